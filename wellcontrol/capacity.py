"""
Capacity integration over wellbore geometry.

Sums cross-sectional area × length over the sub-intervals produced by
:func:`wellcontrol.intervals.decompose`:

    open hole          A_oh   = π/4·ID_ann²
    annular            A_ann  = max(0, π/4·(ID_ann² − OD_str²))
    string capacity    A_cap  = π/4·ID_str²
    wet displacement   A_disp = π/4·OD_str²
    metal (dry)        A_met  = max(0, π/4·(OD_str² − ID_str²))

Wherever the string spans the range, A_ann + A_cap + A_met = A_oh.

A sub-interval with no covering annulus section contributes nothing to any
volume term but still counts toward the length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, STRING, FluidLayer, FluidSpec, same_fluid
from .geometry import GeometryModel, circle_area
from .intervals import decompose
from .rootfind import RootResult, solve_monotonic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolumeBreakdown:
    """
    Volumes over a depth range [m³].

    Attributes
    ----------
    top_m, bottom_m, length_m : float
    open_hole_m3, annular_m3 : float
    string_capacity_m3, string_displacement_m3, string_metal_m3 : float
    interference : bool
        True when a string OD exceeds the annulus ID somewhere in range.
    uncovered_length_m : float
        Length with no covering annulus section.
    """

    top_m: float = 0.0
    bottom_m: float = 0.0
    length_m: float = 0.0
    open_hole_m3: float = 0.0
    annular_m3: float = 0.0
    string_capacity_m3: float = 0.0
    string_displacement_m3: float = 0.0
    string_metal_m3: float = 0.0
    interference: bool = False
    uncovered_length_m: float = 0.0

    def _per_m(self, v: float) -> float:
        return v / self.length_m if self.length_m > 0 else 0.0

    @property
    def open_hole_m3_per_m(self) -> float:
        return self._per_m(self.open_hole_m3)

    @property
    def annular_m3_per_m(self) -> float:
        return self._per_m(self.annular_m3)

    @property
    def string_capacity_m3_per_m(self) -> float:
        return self._per_m(self.string_capacity_m3)

    @property
    def string_displacement_m3_per_m(self) -> float:
        return self._per_m(self.string_displacement_m3)

    @property
    def string_metal_m3_per_m(self) -> float:
        return self._per_m(self.string_metal_m3)


def volumes_between(
    geometry: GeometryModel,
    top: float,
    bottom: float,
    config: Optional[Config] = None,
) -> VolumeBreakdown:
    """
    Integrate all capacity terms over [top, bottom].

    Parameters
    ----------
    geometry : GeometryModel
    top, bottom : float
        Range [m MD]. bottom <= top gives an all-zero result.
    config : Config, optional

    Returns
    -------
    VolumeBreakdown
    """
    cfg = config or DEFAULT_CONFIG
    if bottom <= top:
        return VolumeBreakdown(top_m=top, bottom_m=bottom)

    open_hole = annular = cap = disp = metal = 0.0
    uncovered = 0.0
    interference = False

    for sub in decompose(top, bottom, geometry.annulus, geometry.drill_string, cfg):
        L = sub.length_m
        if sub.annulus is None:
            uncovered += L
            continue

        d_hole = sub.annulus.inner_diameter_m
        od = sub.string.outer_diameter_m if sub.string is not None else 0.0
        bore = sub.string.inner_diameter_m if sub.string is not None else 0.0

        if od > d_hole + cfg.DIAMETER_TOL:
            interference = True

        open_hole += circle_area(d_hole) * L
        annular += max(0.0, circle_area(d_hole) - circle_area(od)) * L
        cap += circle_area(bore) * L
        disp += circle_area(od) * L
        metal += max(0.0, circle_area(od) - circle_area(bore)) * L

    if interference:
        logger.debug("Drill-string OD exceeds annulus ID within [%.2f, %.2f] m", top, bottom)
    if uncovered > 0:
        logger.debug("%.3f m of [%.2f, %.2f] has no annulus section", uncovered, top, bottom)

    return VolumeBreakdown(
        top_m=top,
        bottom_m=bottom,
        length_m=bottom - top,
        open_hole_m3=open_hole,
        annular_m3=annular,
        string_capacity_m3=cap,
        string_displacement_m3=disp,
        string_metal_m3=metal,
        interference=interference,
        uncovered_length_m=uncovered,
    )


def volume_in_annulus(geometry: GeometryModel, top: float, bottom: float, config: Optional[Config] = None) -> float:
    """Annular volume over [top, bottom] [m³]."""
    return volumes_between(geometry, top, bottom, config).annular_m3


def volume_in_string(geometry: GeometryModel, top: float, bottom: float, config: Optional[Config] = None) -> float:
    """String capacity volume over [top, bottom] [m³]."""
    return volumes_between(geometry, top, bottom, config).string_capacity_m3


def length_for_string_volume(
    geometry: GeometryModel,
    start_md: float,
    volume: float,
    limit_md: float,
    config: Optional[Config] = None,
) -> RootResult:
    """
    String length below ``start_md`` holding ``volume``.

    Returns
    -------
    RootResult
        ``value`` is a length in [0, limit_md − start_md]; ``bounded`` when
        the string cannot hold the volume.
    """
    span = max(0.0, limit_md - start_md)
    return solve_monotonic(
        lambda L: volume_in_string(geometry, start_md, start_md + L, config),
        volume, 0.0, span, config=config,
    )


def annulus_length_from_bit(
    geometry: GeometryModel,
    volume: float,
    bit_md: float,
    config: Optional[Config] = None,
) -> RootResult:
    """Annulus length measured up from ``bit_md`` holding ``volume``."""
    return solve_monotonic(
        lambda L: volume_in_annulus(geometry, bit_md - L, bit_md, config),
        volume, 0.0, max(0.0, bit_md), config=config,
    )


@dataclass(frozen=True)
class EqualVolumeResult:
    """Pipe-in length whose annular + string volume matches an open-hole volume."""

    length_m: float
    target_m3: float
    achieved_m3: float
    fallback: bool = False


def solve_pipe_in_interval_for_equal_volume(
    geometry: GeometryModel,
    top: float,
    bottom: float,
    config: Optional[Config] = None,
) -> EqualVolumeResult:
    """
    Length L of pipe run in so annular + string capacity over
    [bottom − L, bottom] equals the open-hole volume over [top, bottom].

    The fluid filling an interval of open hole rises to a taller column
    once pipe is run into it. When no length up to ``bottom`` reaches the
    target, the requested interval length is returned with ``fallback``.
    """
    if bottom <= top:
        return EqualVolumeResult(0.0, 0.0, 0.0)

    target = volumes_between(geometry, top, bottom, config).open_hole_m3

    def wet_volume(L: float) -> float:
        v = volumes_between(geometry, bottom - L, bottom, config)
        return v.annular_m3 + v.string_capacity_m3

    root = solve_monotonic(wet_volume, target, 0.0, bottom, config=config)
    if root.bounded:
        length = bottom - top
        logger.warning(
            "Equal-volume match unreachable for [%.2f, %.2f] m; using interval length %.2f m",
            top, bottom, length,
        )
        return EqualVolumeResult(length, target, wet_volume(length), fallback=True)
    return EqualVolumeResult(root.value, target, wet_volume(root.value))


@dataclass(frozen=True)
class InHoleVolumes:
    """Volume occupied by fluid layers [m³]."""

    total_m3: float
    annulus_m3: float
    string_m3: float


def in_hole_volumes(
    layers: Iterable[FluidLayer],
    geometry: GeometryModel,
    fluid: Optional[FluidSpec] = None,
    config: Optional[Config] = None,
) -> InHoleVolumes:
    """
    Volume of the given layers, optionally restricted to one fluid.

    Annulus layers use annular volume; string layers use string capacity.
    """
    ann = strg = 0.0
    for layer in layers:
        if fluid is not None and not same_fluid(layer.fluid, fluid):
            continue
        if layer.domain == ANNULUS:
            ann += volume_in_annulus(geometry, layer.top_m, layer.bottom_m, config)
        elif layer.domain == STRING:
            strg += volume_in_string(geometry, layer.top_m, layer.bottom_m, config)
    return InHoleVolumes(ann + strg, ann, strg)


if __name__ == "__main__":
    from .geometry import AnnulusSection, DrillStringSection

    print("Testing capacity integration...")
    geom = GeometryModel(
        annulus=[AnnulusSection(0.0, 1000.0, inner_diameter_m=0.3)],
        drill_string=[DrillStringSection(0.0, 1000.0, inner_diameter_m=0.08, outer_diameter_m=0.1)],
    )
    v = volumes_between(geom, 0.0, 1000.0)
    print(f"Annular: {v.annular_m3:.2f} m³ (expected ≈ 62.83)")
    print(f"String capacity: {v.string_capacity_m3:.3f} m³")
    closure = v.annular_m3 + v.string_capacity_m3 + v.string_metal_m3 - v.open_hole_m3
    print(f"Identity residual: {closure:.2e} m³")
