"""
Shared monotonic root finder.

Every "length for a given volume" question in the package (string length
for a pumped volume, annulus length above the bit, equal-volume pipe-in
length) inverts a non-decreasing volume function. They all go through
:func:`solve_monotonic`, which wraps ``scipy.optimize.bisect`` with explicit
handling of the bracket ends.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Optional

from scipy.optimize import bisect

from .config import Config, DEFAULT_CONFIG, MIN_ROOT_RTOL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RootResult:
    """
    Outcome of a monotonic inversion.

    Attributes
    ----------
    value : float
        Abscissa x with func(x) ≈ target.
    converged : bool
        False when the iteration cap was hit inside the bracket.
    iterations : int
        Bisection iterations used (0 for bracket-end answers).
    bounded : bool
        True when target exceeded func(hi) and ``hi`` was returned.
    """

    value: float
    converged: bool = True
    iterations: int = 0
    bounded: bool = False


def solve_monotonic(
    func: Callable[[float], float],
    target: float,
    lo: float,
    hi: float,
    max_iter: Optional[int] = None,
    rtol: Optional[float] = None,
    config: Optional[Config] = None,
) -> RootResult:
    """
    Find x in [lo, hi] with func(x) = target for non-decreasing func.

    Parameters
    ----------
    func : callable
        Non-decreasing function of one variable.
    target : float
        Desired function value.
    lo, hi : float
        Search bracket.
    max_iter : int, optional
        Iteration cap (default: ``config.ROOT_MAX_ITER``, at most 96).
    rtol : float, optional
        Relative tolerance (default: ``config.ROOT_RTOL``), raised to
        ``MIN_ROOT_RTOL`` when smaller.

    Returns
    -------
    RootResult

    Notes
    -----
    - target <= func(lo) returns lo.
    - target >= func(hi) (within rtol) returns hi; ``bounded`` is set
      when target is strictly beyond reach.
    - Otherwise bisection runs on func(x) - target, which changes sign
      on the bracket.
    """
    cfg = config or DEFAULT_CONFIG
    max_iter = cfg.ROOT_MAX_ITER if max_iter is None else min(int(max_iter), 96)
    rtol = max(cfg.ROOT_RTOL if rtol is None else rtol, MIN_ROOT_RTOL)

    if hi <= lo:
        return RootResult(value=float(lo))

    f_lo = func(lo)
    if target <= f_lo:
        return RootResult(value=float(lo))

    f_hi = func(hi)
    tol_abs = rtol * max(1.0, abs(target))
    if target >= f_hi - tol_abs:
        bounded = target > f_hi + tol_abs
        if bounded:
            logger.debug("Target %.6g beyond reach %.6g on [%.3f, %.3f]", target, f_hi, lo, hi)
        return RootResult(value=float(hi), bounded=bounded)

    x, info = bisect(
        lambda x: func(x) - target,
        lo,
        hi,
        xtol=1e-12,
        rtol=rtol,
        maxiter=max_iter,
        full_output=True,
        disp=False,
    )
    if not info.converged:
        warnings.warn(
            f"Bisection did not converge after {max_iter} iterations. "
            f"Returning last value: x={x:.6f}",
            RuntimeWarning
        )
        logger.warning("Bisection stopped at iteration cap (%d), x=%.6f", max_iter, x)
    return RootResult(value=float(x), converged=bool(info.converged), iterations=int(info.iterations))
