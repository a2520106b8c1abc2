"""
Fluid records, fluid identity and density resolution.

Fluids are compared by value: a stable ``fluid_id`` when one is present,
otherwise the display colour, otherwise the density. Domains and placements
are plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from .config import Config, DEFAULT_CONFIG

ANNULUS = "annulus"
STRING = "string"
BOTH = "both"

DOMAINS = (ANNULUS, STRING)
PLACEMENTS = (ANNULUS, STRING, BOTH)


@dataclass(frozen=True)
class FluidSpec:
    """
    Drilling fluid definition.

    Rheology may be supplied three ways; the most specific wins when
    friction is evaluated (see :mod:`wellcontrol.rheology`):

    1. direct power-law fits per domain (``k_pipe``/``n_pipe``,
       ``k_annulus``/``n_annulus``)
    2. Fann 35 dial readings at 600 and 300 rpm
    3. Bingham plastic viscosity and yield point

    Attributes
    ----------
    density_kgm3 : float
        Fluid density [kg/m³].
    pv_pa_s : float, optional
        Plastic viscosity [Pa·s].
    yp_pa : float, optional
        Yield point [Pa].
    dial600, dial300 : float, optional
        Fann 35 dial readings.
    k_pipe, n_pipe, k_annulus, n_annulus : float, optional
        Power-law consistency [Pa·sⁿ] and flow index [-].
    fluid_id : str, optional
        Stable identity used for merging and accounting.
    name : str
        Display name.
    color : str
        Hex colour, used as identity fallback.
    """

    density_kgm3: float
    pv_pa_s: Optional[float] = None
    yp_pa: Optional[float] = None
    dial600: Optional[float] = None
    dial300: Optional[float] = None
    k_pipe: Optional[float] = None
    n_pipe: Optional[float] = None
    k_annulus: Optional[float] = None
    n_annulus: Optional[float] = None
    fluid_id: Optional[str] = None
    name: str = ""
    color: str = ""

    @property
    def identity(self) -> Tuple[str, object]:
        """Value-based identity key."""
        if self.fluid_id:
            return ("id", self.fluid_id)
        if self.color:
            return ("color", self.color.lower())
        return ("density", round(float(self.density_kgm3), 9))

    @property
    def label(self) -> str:
        return self.name or f"{self.density_kgm3:.0f} kg/m³"


def same_fluid(a: Optional[FluidSpec], b: Optional[FluidSpec]) -> bool:
    """
    Compare two fluids by identity.

    Uses ``fluid_id`` when either side has one, then colour, then density.
    Two missing fluids are the same (both are "base fill").
    """
    if a is None or b is None:
        return a is None and b is None
    if a.fluid_id or b.fluid_id:
        return a.fluid_id == b.fluid_id
    if a.color or b.color:
        return a.color.lower() == b.color.lower()
    return abs(a.density_kgm3 - b.density_kgm3) <= 1e-9


@dataclass(frozen=True)
class DensityResolution:
    """Resolved density with its provenance ('fluid', 'base' or 'default')."""

    value: float
    source: str


def resolve_density(
    fluid: Optional[FluidSpec] = None,
    base: Optional[float] = None,
    default: Optional[float] = None,
    config: Optional[Config] = None,
) -> DensityResolution:
    """
    Resolve a density by priority: fluid, then base fill, then hard default.

    Parameters
    ----------
    fluid : FluidSpec, optional
        Active fluid. Used when it has a positive density.
    base : float, optional
        Base fill density [kg/m³]. Used when positive.
    default : float, optional
        Hard default; ``config.FALLBACK_DENSITY`` when omitted.

    Returns
    -------
    DensityResolution
    """
    cfg = config or DEFAULT_CONFIG
    if fluid is not None and fluid.density_kgm3 > 0:
        return DensityResolution(float(fluid.density_kgm3), "fluid")
    if base is not None and base > 0:
        return DensityResolution(float(base), "base")
    return DensityResolution(float(cfg.FALLBACK_DENSITY if default is None else default), "default")


def closest_fluid(density: float, catalog: Iterable[FluidSpec]) -> Optional[FluidSpec]:
    """Return the catalog fluid with density closest to ``density`` (first on ties)."""
    best = None
    best_diff = float("inf")
    for f in catalog:
        diff = abs(f.density_kgm3 - density)
        if diff < best_diff:
            best, best_diff = f, diff
    return best


@dataclass(frozen=True)
class MudStep:
    """
    User overlay instruction, applied in authored order.

    Attributes
    ----------
    top_m, bottom_m : float
        Interval [m MD].
    fluid : FluidSpec
        Fluid placed in the interval.
    placement : str
        'annulus', 'string' or 'both'.
    name : str
        Display name.
    """

    top_m: float
    bottom_m: float
    fluid: FluidSpec
    placement: str = ANNULUS
    name: str = ""

    def targets(self, domain: str) -> bool:
        return self.placement == BOTH or self.placement == domain


def resolve_step_fluid(step: MudStep, catalog: Iterable[FluidSpec] = ()) -> FluidSpec:
    """
    Attach catalog rheology to a step that carries only a density.

    When the step fluid has no ``fluid_id`` the closest catalog fluid by
    density lends its identity and rheology; the step density is kept.
    """
    if step.fluid.fluid_id:
        return step.fluid
    match = closest_fluid(step.fluid.density_kgm3, catalog)
    if match is None:
        return step.fluid
    return replace(match, density_kgm3=step.fluid.density_kgm3)


@dataclass(frozen=True)
class FluidLayer:
    """One layer of a domain's fluid column."""

    domain: str
    top_m: float
    bottom_m: float
    fluid: Optional[FluidSpec] = None
    label: str = ""

    @property
    def length_m(self) -> float:
        return max(0.0, self.bottom_m - self.top_m)


@dataclass(frozen=True)
class PumpStage:
    """
    Volume of one fluid pumped down the string.

    Attributes
    ----------
    fluid : FluidSpec
    total_volume_m3 : float
    order : int
    name : str
    side : str
        Domain the stage was derived from ('annulus' or 'string').
    """

    fluid: FluidSpec
    total_volume_m3: float
    order: int = 0
    name: str = ""
    side: str = STRING
