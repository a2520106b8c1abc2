"""
Annulus section normalization.

Keeps annulus sections non-overlapping with one locally constant effective
pipe OD each: sections are sliced where the covering drill-string OD
changes, then contiguous sections with equal ID and equal constant OD are
merged back together.

All functions are pure. They read a sorted, materialized snapshot of the
input and return new lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .config import Config, DEFAULT_CONFIG
from .geometry import AnnulusSection, DrillStringSection
from .intervals import boundaries_for, widest_covering

logger = logging.getLogger(__name__)

Signature = Tuple[Tuple[Optional[str], float, float, float], ...]


def od_covering(drill_string: Sequence[DrillStringSection], top: float, bottom: float, tol: float = 1e-6) -> float:
    """Largest OD of the drill-string sections covering [top, bottom], 0 if none."""
    s = widest_covering(drill_string, top, bottom, tol)
    return s.outer_diameter_m if s is not None else 0.0


def _od_runs(
    top: float,
    bottom: float,
    drill_string: Sequence[DrillStringSection],
    cfg: Config,
) -> List[Tuple[float, float, float]]:
    """Consecutive (top, bottom, od) runs of constant covering OD over [top, bottom]."""
    bounds = boundaries_for(top, bottom, drill_string, tol=cfg.BOUNDARY_TOL)
    runs: List[Tuple[float, float, float]] = []
    for a, b in zip(bounds[:-1], bounds[1:]):
        od = od_covering(drill_string, a, b, cfg.BOUNDARY_TOL)
        if runs and abs(runs[-1][2] - od) <= cfg.DIAMETER_TOL:
            runs[-1] = (runs[-1][0], b, runs[-1][2])
        else:
            runs.append((a, b, od))
    return runs


def constant_overlapping_od(
    drill_string: Sequence[DrillStringSection],
    top: float,
    bottom: float,
    config: Optional[Config] = None,
) -> Optional[float]:
    """
    Drill-string OD over [top, bottom] if it is constant, else None.

    Returns 0 for a degenerate range and where no string covers.
    """
    cfg = config or DEFAULT_CONFIG
    if bottom <= top:
        return 0.0
    runs = _od_runs(top, bottom, drill_string, cfg)
    if not runs:
        return 0.0
    if len(runs) > 1:
        return None
    return runs[0][2]


def slice_section(
    section: AnnulusSection,
    drill_string: Sequence[DrillStringSection],
    config: Optional[Config] = None,
) -> List[AnnulusSection]:
    """
    Split ``section`` where the covering drill-string OD changes.

    Parts are named ``"<name> [i]"`` (1-based) and carry OD 0; it is
    re-derived from the drill string. A section with a single run comes
    back as a one-element list holding a copy of itself.
    """
    cfg = config or DEFAULT_CONFIG
    if section.is_degenerate:
        return [replace(section)]

    runs = _od_runs(section.top_m, section.bottom_m, drill_string, cfg)
    if len(runs) <= 1:
        return [replace(section)]

    logger.debug("Slicing annulus section %r into %d parts", section.name, len(runs))
    parts = []
    for i, (a, b, _od) in enumerate(runs):
        parts.append(replace(
            section,
            top_m=a,
            bottom_m=b,
            outer_diameter_m=0.0,
            name=f"{section.name} [{i + 1}]",
            section_id=f"{section.section_id}-{i + 1}" if section.section_id else None,
        ))
    return parts


def _mergeable(
    a: AnnulusSection,
    b: AnnulusSection,
    drill_string: Sequence[DrillStringSection],
    cfg: Config,
) -> bool:
    tol = cfg.DIAMETER_TOL
    if abs(a.bottom_m - b.top_m) > tol:
        return False
    if abs(a.inner_diameter_m - b.inner_diameter_m) > tol:
        return False
    od_a = constant_overlapping_od(drill_string, a.top_m, a.bottom_m, cfg)
    od_b = constant_overlapping_od(drill_string, b.top_m, b.bottom_m, cfg)
    od_u = constant_overlapping_od(drill_string, a.top_m, b.bottom_m, cfg)
    if od_a is None or od_b is None or od_u is None:
        return False
    return abs(od_a - od_b) <= tol and abs(od_a - od_u) <= tol


def merge_contiguous_by_od(
    sections: Sequence[AnnulusSection],
    drill_string: Sequence[DrillStringSection],
    config: Optional[Config] = None,
) -> List[AnnulusSection]:
    """
    Merge contiguous neighbours with equal ID and the same constant OD.

    The scan restarts from the top after every merge so merges cascade.
    The merged section keeps the name and id of the upper one.
    """
    cfg = config or DEFAULT_CONFIG
    out = sorted((replace(s) for s in sections), key=lambda s: (s.top_m, s.bottom_m))
    i = 0
    while i < len(out) - 1:
        a, b = out[i], out[i + 1]
        if _mergeable(a, b, drill_string, cfg):
            out[i] = replace(a, bottom_m=b.bottom_m, outer_diameter_m=0.0)
            del out[i + 1]
            i = 0
        else:
            i += 1
    return out


def normalize_sections(
    sections: Sequence[AnnulusSection],
    drill_string: Sequence[DrillStringSection],
    config: Optional[Config] = None,
) -> List[AnnulusSection]:
    """
    Slice every section against the drill string, then merge.

    Operates on a sorted snapshot and returns a new list. A second call on
    the result returns an equal list.
    """
    snapshot = sorted(sections, key=lambda s: (s.top_m, s.bottom_m))
    ds = list(drill_string)
    sliced: List[AnnulusSection] = []
    for s in snapshot:
        sliced.extend(slice_section(s, ds, config))
    return merge_contiguous_by_od(sliced, ds, config)


def drill_string_signature(drill_string: Sequence[DrillStringSection]) -> Signature:
    """Ordered (section_id, top, bottom, od) tuples of the drill string."""
    return tuple(
        (s.section_id, float(s.top_m), float(s.bottom_m), float(s.outer_diameter_m))
        for s in drill_string
    )


@dataclass
class NormalizationResult:
    sections: List[AnnulusSection]
    signature: Signature
    changed: bool


def renormalize_if_changed(
    sections: Sequence[AnnulusSection],
    drill_string: Sequence[DrillStringSection],
    previous_signature: Optional[Signature],
    config: Optional[Config] = None,
) -> NormalizationResult:
    """
    Normalize only when the drill-string signature differs from
    ``previous_signature``. Otherwise return a copy of ``sections``.
    """
    sig = drill_string_signature(drill_string)
    if sig == previous_signature:
        return NormalizationResult([replace(s) for s in sections], sig, False)
    logger.info("Drill string changed; re-normalizing %d annulus sections", len(sections))
    return NormalizationResult(normalize_sections(sections, drill_string, config), sig, True)


def fill_gaps(sections: Sequence[AnnulusSection], config: Optional[Config] = None) -> List[AnnulusSection]:
    """Extend each section down to the next section's top where a gap exists."""
    cfg = config or DEFAULT_CONFIG
    out = sorted((replace(s) for s in sections), key=lambda s: (s.top_m, s.bottom_m))
    for i in range(len(out) - 1):
        gap = out[i + 1].top_m - out[i].bottom_m
        if gap > cfg.BOUNDARY_TOL:
            out[i] = replace(out[i], bottom_m=out[i + 1].top_m)
    return out
