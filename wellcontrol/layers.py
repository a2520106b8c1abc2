"""
Fluid layer compositing.

Builds, per domain, a total ordered non-overlapping partition of [0, TD]
from a base fill and the user's mud steps applied in authored order. Later
steps override earlier ones where they overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Protocol, Sequence, Union

from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, DOMAINS, STRING, FluidLayer, FluidSpec, MudStep, resolve_density, resolve_step_fluid

logger = logging.getLogger(__name__)

BaseFill = Union[FluidSpec, float, None]


@dataclass
class LayerColumn:
    """Annulus and string fluid partitions."""

    annulus: List[FluidLayer] = field(default_factory=list)
    string: List[FluidLayer] = field(default_factory=list)

    @property
    def all_layers(self) -> List[FluidLayer]:
        return list(self.annulus) + list(self.string)

    def for_domain(self, domain: str) -> List[FluidLayer]:
        return self.annulus if domain == ANNULUS else self.string


class LayerStore(Protocol):
    """Persistence collaborator for the composed column."""

    def replace_all(self, layers: Sequence[FluidLayer]) -> None:
        ...


class InMemoryLayerStore:
    """Layer store holding the last written snapshot."""

    def __init__(self):
        self.layers: List[FluidLayer] = []
        self.writes = 0

    def replace_all(self, layers: Sequence[FluidLayer]) -> None:
        self.layers = list(layers)
        self.writes += 1


def _base_fluid(domain: str, fill: BaseFill, cfg: Config) -> FluidSpec:
    if isinstance(fill, FluidSpec):
        return fill
    base = cfg.BASE_ANNULUS_DENSITY if domain == ANNULUS else cfg.BASE_STRING_DENSITY
    res = resolve_density(None, fill if fill is not None else base, config=cfg)
    return FluidSpec(density_kgm3=res.value, name="Base")


def base_layer(domain: str, td: float, fill: BaseFill = None, config: Optional[Config] = None) -> FluidLayer:
    """
    One layer [0, td] of the base fill.

    ``fill`` may be a fluid, a density [kg/m³] or None for the configured
    base density of the domain.
    """
    cfg = config or DEFAULT_CONFIG
    return FluidLayer(domain=domain, top_m=0.0, bottom_m=float(td), fluid=_base_fluid(domain, fill, cfg), label="Base")


def overlay(layers: Sequence[FluidLayer], new_layer: FluidLayer) -> List[FluidLayer]:
    """
    Overlay ``new_layer`` onto a partition.

    Disjoint layers are kept, overlapped layers keep only their left and
    right remainders of positive length, the new layer is appended and the
    result is sorted by top.
    """
    t, b = new_layer.top_m, new_layer.bottom_m
    out: List[FluidLayer] = []
    for layer in layers:
        if layer.bottom_m <= t or layer.top_m >= b:
            out.append(layer)
            continue
        if layer.top_m < t:
            out.append(replace(layer, bottom_m=t))
        if layer.bottom_m > b:
            out.append(replace(layer, top_m=b))
    out.append(new_layer)
    out.sort(key=lambda x: x.top_m)
    return out


def compose_layers(
    steps: Iterable[MudStep],
    td: float,
    base_annulus: BaseFill = None,
    base_string: BaseFill = None,
    catalog: Iterable[FluidSpec] = (),
    config: Optional[Config] = None,
) -> LayerColumn:
    """
    Compose the fluid column for both domains.

    Parameters
    ----------
    steps : iterable of MudStep
        Overlays in authored order. Steps are clipped to [0, td]; steps
        with no positive length after clipping are skipped.
    td : float
        Total depth [m MD].
    base_annulus, base_string : FluidSpec, float or None
        Base fill per domain.
    catalog : iterable of FluidSpec
        Fluids offered to steps that carry only a density.

    Returns
    -------
    LayerColumn
    """
    cfg = config or DEFAULT_CONFIG
    catalog = list(catalog)
    column = LayerColumn(
        annulus=[base_layer(ANNULUS, td, base_annulus, cfg)],
        string=[base_layer(STRING, td, base_string, cfg)],
    )
    for step in steps:
        t = max(0.0, step.top_m)
        b = min(float(td), step.bottom_m)
        if b - t <= 0:
            logger.debug("Skipping mud step %r outside [0, %.2f]", step.name, td)
            continue
        fluid = resolve_step_fluid(step, catalog)
        for domain in DOMAINS:
            if step.targets(domain):
                new = FluidLayer(domain=domain, top_m=t, bottom_m=b, fluid=fluid, label=step.name or fluid.label)
                if domain == ANNULUS:
                    column.annulus = overlay(column.annulus, new)
                else:
                    column.string = overlay(column.string, new)
    return column


def persist_layers(column: LayerColumn, store: LayerStore) -> None:
    """Write the whole column through ``store`` as one replace-all snapshot."""
    layers = column.all_layers
    logger.debug("Persisting %d fluid layers", len(layers))
    store.replace_all(layers)


def steps_have_overlap(steps: Sequence[MudStep], tol: float = 1e-6) -> bool:
    """True when two steps targeting a common domain overlap by more than ``tol``."""
    for i, a in enumerate(steps):
        for b in steps[i + 1:]:
            shared = any(a.targets(d) and b.targets(d) for d in DOMAINS)
            if shared and min(a.bottom_m, b.bottom_m) - max(a.top_m, b.top_m) > tol:
                return True
    return False


def is_total_partition(layers: Sequence[FluidLayer], td: float, tol: float = 1e-6) -> bool:
    """True when ``layers`` are sorted, contiguous and cover exactly [0, td]."""
    if not layers:
        return td <= tol
    if abs(layers[0].top_m) > tol or abs(layers[-1].bottom_m - td) > tol:
        return False
    for a, b in zip(layers[:-1], layers[1:]):
        if abs(a.bottom_m - b.top_m) > tol or a.bottom_m <= a.top_m:
            return False
    return layers[-1].bottom_m > layers[-1].top_m


def slice_layers_for_domain(
    layers: Sequence[FluidLayer],
    lo: float,
    hi: float,
    merge_same_density: bool = False,
    config: Optional[Config] = None,
) -> List[FluidLayer]:
    """
    Clip layers to [lo, hi] and return them deep to shallow.

    With ``merge_same_density`` adjacent layers of equal density are
    joined. Used to build evaluation windows for surge and swab.
    """
    cfg = config or DEFAULT_CONFIG
    clipped = []
    for layer in sorted(layers, key=lambda x: x.top_m):
        t, b = max(lo, layer.top_m), min(hi, layer.bottom_m)
        if b - t > cfg.SEGMENT_TOL:
            clipped.append(replace(layer, top_m=t, bottom_m=b))

    if merge_same_density:
        merged: List[FluidLayer] = []
        for layer in clipped:
            if merged:
                prev = merged[-1]
                rho_prev = resolve_density(prev.fluid, config=cfg).value
                rho = resolve_density(layer.fluid, config=cfg).value
                if abs(prev.bottom_m - layer.top_m) <= cfg.SEGMENT_TOL and abs(rho_prev - rho) <= 1e-9:
                    merged[-1] = replace(prev, bottom_m=layer.bottom_m)
                    continue
            merged.append(layer)
        clipped = merged

    return list(reversed(clipped))
