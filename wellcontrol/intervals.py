"""
Interval decomposition.

Merges the boundaries of the annulus and drill-string sections that overlap
a query range into one sorted, de-duplicated boundary sequence, and pairs
each resulting sub-interval with the sections covering it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .config import Config, DEFAULT_CONFIG
from .geometry import AnnulusSection, DepthInterval, DrillStringSection


@dataclass(frozen=True)
class SubInterval:
    """Sub-interval of a query range with its covering sections."""

    top_m: float
    bottom_m: float
    annulus: Optional[AnnulusSection]
    string: Optional[DrillStringSection]

    @property
    def length_m(self) -> float:
        return self.bottom_m - self.top_m

    @property
    def mid_m(self) -> float:
        return 0.5 * (self.top_m + self.bottom_m)


def unique_boundaries(values: Iterable[float], tol: float = 1e-6) -> List[float]:
    """
    Sort ``values`` and drop any value within ``tol`` of the previous kept one.

    Examples
    --------
    >>> unique_boundaries([10.0, 0.0, 10.0000001, 5.0])
    [0.0, 5.0, 10.0]
    """
    out: List[float] = []
    for v in sorted(float(x) for x in values):
        if not out or abs(v - out[-1]) > tol:
            out.append(v)
    return out


def boundaries_for(
    top: float,
    bottom: float,
    *section_sets: Sequence[DepthInterval],
    tol: float = 1e-6,
) -> List[float]:
    """{top, bottom} plus the clamped edges of every section overlapping the range."""
    values = [top, bottom]
    for sections in section_sets:
        for s in sections:
            if s.overlaps(top, bottom):
                values.append(min(max(s.top_m, top), bottom))
                values.append(min(max(s.bottom_m, top), bottom))
    return unique_boundaries(values, tol)


def first_covering(sections: Sequence[DepthInterval], top: float, bottom: float, tol: float = 1e-6):
    for s in sections:
        if not s.is_degenerate and s.covers(top, bottom, tol):
            return s
    return None


def widest_covering(sections: Sequence[DrillStringSection], top: float, bottom: float, tol: float = 1e-6):
    """Covering drill-string section with the largest OD, or None."""
    best = None
    for s in sections:
        if not s.is_degenerate and s.covers(top, bottom, tol):
            if best is None or s.outer_diameter_m > best.outer_diameter_m:
                best = s
    return best


def decompose(
    top: float,
    bottom: float,
    annulus: Sequence[AnnulusSection],
    drill_string: Sequence[DrillStringSection],
    config: Optional[Config] = None,
) -> List[SubInterval]:
    """
    Decompose [top, bottom] into sub-intervals of constant geometry.

    Parameters
    ----------
    top, bottom : float
        Query range [m MD].
    annulus : sequence of AnnulusSection
    drill_string : sequence of DrillStringSection
    config : Config, optional

    Returns
    -------
    list of SubInterval
        Consecutive sub-intervals, shallow to deep. Empty when
        bottom <= top.

    Notes
    -----
    The covering annulus is the first section (in list order) covering
    the sub-interval. When several drill-string sections cover, the one
    with the larger OD is taken.
    """
    cfg = config or DEFAULT_CONFIG
    if bottom <= top:
        return []

    tol = cfg.BOUNDARY_TOL
    bounds = boundaries_for(top, bottom, annulus, drill_string, tol=tol)
    parts = []
    for a, b in zip(bounds[:-1], bounds[1:]):
        if b - a <= 0:
            continue
        parts.append(SubInterval(
            top_m=a,
            bottom_m=b,
            annulus=first_covering(annulus, a, b, tol),
            string=widest_covering(drill_string, a, b, tol),
        ))
    return parts
