"""
Hydrostatic pressure integration.

    P = Σ ρᵢ · g · ΔTVDᵢ

Fluid segments are defined in measured depth, clipped to [0, limit_md] and
mapped through a :class:`~wellcontrol.survey.TvdMapper` before integrating.
Pressures are returned in kPa.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from .config import Config, DEFAULT_CONFIG
from .fluids import resolve_density
from .survey import TvdMapper


def grad_kpa_per_m(density_kgm3: float, config: Optional[Config] = None) -> float:
    """Hydrostatic gradient ρg/1000 [kPa/m]."""
    cfg = config or DEFAULT_CONFIG
    return density_kgm3 * cfg.GRAVITY / 1000.0


def hydrostatic_kpa(
    segments: Iterable,
    limit_md: float,
    mapper: Optional[TvdMapper] = None,
    base_density: Optional[float] = None,
    config: Optional[Config] = None,
) -> float:
    """
    Hydrostatic pressure of a fluid column at ``limit_md`` [kPa].

    Parameters
    ----------
    segments : iterable
        Objects with ``top_m``, ``bottom_m`` and ``fluid`` (FluidLayer or
        displacement Segment). Segments without a fluid use
        ``base_density`` and then the configured fallback density.
    limit_md : float
        Depth at which pressure is evaluated [m MD].
    mapper : TvdMapper, optional
        MD → TVD mapping; identity when omitted. ΔTVD is signed, so an
        up-dip stretch reduces the column pressure.
    """
    cfg = config or DEFAULT_CONFIG
    mapper = mapper or TvdMapper()
    total_pa = 0.0
    for seg in segments:
        t = max(0.0, seg.top_m)
        b = min(limit_md, seg.bottom_m)
        if b <= t:
            continue
        d_tvd = mapper.md_to_tvd(b) - mapper.md_to_tvd(t)
        rho = resolve_density(seg.fluid, base_density, config=cfg).value
        total_pa += rho * cfg.GRAVITY * d_tvd
    return total_pa / 1000.0


def hydrostatic_at_tvd_kpa(
    at_tvd: float,
    segments_tvd: Sequence[Tuple[float, float, float]],
    config: Optional[Config] = None,
) -> float:
    """
    Hydrostatic pressure at ``at_tvd`` for a stack given directly in TVD.

    ``segments_tvd`` holds (top_tvd, bottom_tvd, density_kgm3) tuples.
    """
    cfg = config or DEFAULT_CONFIG
    total = 0.0
    for top, bottom, rho in segments_tvd:
        h = min(bottom, at_tvd) - max(top, 0.0)
        if h > 0:
            total += grad_kpa_per_m(rho, cfg) * h
    return total


def required_sbp_kpa(target_bhp_kpa: float, column_kpa: float) -> float:
    """Surface back-pressure lifting ``column_kpa`` to ``target_bhp_kpa``, floored at 0."""
    return max(0.0, target_bhp_kpa - column_kpa)


def required_uniform_density(pressure_kpa: float, tvd: float, config: Optional[Config] = None) -> float:
    """Uniform density producing ``pressure_kpa`` at ``tvd`` [kg/m³]; 0 at tvd <= 0."""
    cfg = config or DEFAULT_CONFIG
    if tvd <= 0:
        return 0.0
    return pressure_kpa * 1000.0 / (cfg.GRAVITY * tvd)
