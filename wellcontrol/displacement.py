"""
Pump-stage displacement simulation.

Tracks which fluid occupies each part of the drill string and the annulus
while stages are pumped down the string and returned up the annulus.

Applying a stage of volume V of fluid F:

1. Ls = string length holding V from surface (root find on capacity).
2. The deepest Ls of the string leaves through the bit as parcels, each
   with the true volume of its own geometry.
3. The rest of the string shifts down by Ls and [0, Ls] is filled with F.
4. If V exceeds the parcels' volume (string ran dry) the shortfall is a
   parcel of F exiting directly at the bit.
5. Parcels enter the annulus at the bit; the annulus column shifts up and
   fluid pushed above surface is discarded.

State is never updated incrementally between snapshots: every snapshot is
rebuilt from the base fill by replaying stages.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .capacity import annulus_length_from_bit, length_for_string_volume, volume_in_annulus, volume_in_string
from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, STRING, FluidSpec, PumpStage, same_fluid
from .geometry import GeometryModel
from .layers import LayerColumn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """Fluid occupying [top_m, bottom_m] of one domain."""

    top_m: float
    bottom_m: float
    fluid: Optional[FluidSpec] = None

    @property
    def length_m(self) -> float:
        return self.bottom_m - self.top_m


@dataclass(frozen=True)
class Parcel:
    """Volume of one fluid leaving the string at the bit."""

    volume_m3: float
    fluid: Optional[FluidSpec] = None


@dataclass
class StackState:
    """Fluid segments in the string and the annulus, shallow to deep."""

    string: List[Segment] = field(default_factory=list)
    annulus: List[Segment] = field(default_factory=list)


def merge_segments(segments: Iterable[Segment], tol: float = 1e-6) -> List[Segment]:
    """
    Sort by top, drop slivers shorter than ``tol`` and coalesce contiguous
    segments of the same fluid.
    """
    out: List[Segment] = []
    for seg in sorted(segments, key=lambda s: s.top_m):
        if seg.length_m < tol:
            continue
        if out and abs(out[-1].bottom_m - seg.top_m) <= tol and same_fluid(out[-1].fluid, seg.fluid):
            out[-1] = replace(out[-1], bottom_m=max(out[-1].bottom_m, seg.bottom_m))
        else:
            out.append(seg)
    return out


def take_from_bottom(
    segments: Sequence[Segment],
    length: float,
    geometry: GeometryModel,
    config: Optional[Config] = None,
) -> Tuple[List[Segment], List[Parcel]]:
    """
    Remove the deepest ``length`` metres of the string.

    Returns
    -------
    remaining : list of Segment
        What is left, shallow to deep.
    parcels : list of Parcel
        Removed pieces in removal order (deepest first), each with its
        string capacity volume.
    """
    remaining: List[Segment] = []
    parcels: List[Parcel] = []
    to_take = max(0.0, length)
    for seg in sorted(segments, key=lambda s: s.bottom_m, reverse=True):
        if to_take <= 0:
            remaining.append(seg)
            continue
        take = min(seg.length_m, to_take)
        slice_top = seg.bottom_m - take
        vol = volume_in_string(geometry, slice_top, seg.bottom_m, config)
        if vol > 0:
            parcels.append(Parcel(vol, seg.fluid))
        if take < seg.length_m:
            remaining.append(replace(seg, bottom_m=slice_top))
        to_take -= take
    remaining.sort(key=lambda s: s.top_m)
    return remaining, parcels


def inject_at_surface_string(
    segments: Sequence[Segment],
    length: float,
    fluid: Optional[FluidSpec],
    bit_md: float,
    config: Optional[Config] = None,
) -> List[Segment]:
    """Shift segments down by ``length`` (clipped at the bit) and fill [0, length] with ``fluid``."""
    cfg = config or DEFAULT_CONFIG
    out = [Segment(0.0, min(bit_md, length), fluid)]
    for seg in segments:
        top = seg.top_m + length
        bottom = min(bit_md, seg.bottom_m + length)
        if bottom > top:
            out.append(replace(seg, top_m=top, bottom_m=bottom))
    return merge_segments(out, cfg.SEGMENT_TOL)


def push_up_from_bit_annulus(
    segments: Sequence[Segment],
    parcels: Sequence[Parcel],
    geometry: GeometryModel,
    bit_md: float,
    config: Optional[Config] = None,
) -> List[Segment]:
    """
    Displace the annulus upward by the parcels entering at the bit.

    Each parcel's length is solved from the bit. When the combined span
    holds a volume different from the parcels' total (beyond
    ``RESCALE_TOL``), all lengths are rescaled uniformly so the span
    matches the length that holds the total, by at most ``RESCALE_CAP``.
    Scaling by span/total rather than target/achieved keeps the laid batch
    volume exact when the hole size changes inside the batch. Existing segments move up by the total length and are clipped at
    surface. Parcels are laid from bit_md − total downward in parcel
    order, so the first parcel out of the bit ends up highest.
    """
    cfg = config or DEFAULT_CONFIG
    parcels = [p for p in parcels if p.volume_m3 > 0]
    if not parcels or bit_md <= 0:
        return list(segments)

    lengths = [annulus_length_from_bit(geometry, p.volume_m3, bit_md, cfg).value for p in parcels]
    target = sum(p.volume_m3 for p in parcels)
    total = sum(lengths)

    achieved = volume_in_annulus(geometry, bit_md - total, bit_md, cfg)
    if total > 0 and abs(achieved - target) > cfg.RESCALE_TOL * target:
        span = annulus_length_from_bit(geometry, target, bit_md, cfg)
        factor = min(cfg.RESCALE_CAP, span.value / total)
        logger.debug("Rescaling annulus batch by %.6f (%.6f of %.6f m³)", factor, achieved, target)
        lengths = [L * factor for L in lengths]
        total = sum(lengths)

    out: List[Segment] = []
    for seg in segments:
        top = max(0.0, seg.top_m - total)
        bottom = seg.bottom_m - total
        if bottom > top:
            out.append(replace(seg, top_m=top, bottom_m=bottom))

    cursor = bit_md - total
    for parcel, L in zip(parcels, lengths):
        top, bottom = max(0.0, cursor), cursor + L
        if bottom > top:
            out.append(Segment(top, bottom, parcel.fluid))
        cursor += L

    return merge_segments(out, cfg.SEGMENT_TOL)


@dataclass(frozen=True)
class ExpelledFluid:
    """Volume of a fluid returned at surface [m³]."""

    fluid: Optional[FluidSpec]
    volume_m3: float


def _identity_key(fluid: Optional[FluidSpec]):
    return ("none",) if fluid is None else fluid.identity


class DisplacementSimulator:
    """
    Replays pump stages over a fixed geometry.

    Parameters
    ----------
    geometry : GeometryModel
    base_string : FluidSpec, optional
        Fluid initially filling the string.
    base_annulus : FluidSpec, optional
        Fluid initially filling the annulus.
    config : Config, optional
    """

    def __init__(
        self,
        geometry: GeometryModel,
        base_string: Optional[FluidSpec] = None,
        base_annulus: Optional[FluidSpec] = None,
        config: Optional[Config] = None,
    ):
        self.geometry = geometry
        self.base_string = base_string
        self.base_annulus = base_annulus
        self.config = config or DEFAULT_CONFIG

    @property
    def bit_md(self) -> float:
        return self.geometry.bit_md

    def initial_state(self) -> StackState:
        bit = self.bit_md
        if bit <= 0:
            return StackState()
        return StackState(
            string=[Segment(0.0, bit, self.base_string)],
            annulus=[Segment(0.0, bit, self.base_annulus)],
        )

    def apply_stage(self, state: StackState, volume: float, fluid: Optional[FluidSpec]) -> StackState:
        """Return the state after pumping ``volume`` of ``fluid``; ``state`` is not modified."""
        cfg = self.config
        bit = self.bit_md
        if volume <= 0 or bit <= 0:
            return StackState(list(state.string), list(state.annulus))

        ls = length_for_string_volume(self.geometry, 0.0, volume, bit, cfg)
        remaining, parcels = take_from_bottom(state.string, ls.value, self.geometry, cfg)
        string = inject_at_surface_string(remaining, ls.value, fluid, bit, cfg)

        taken = sum(p.volume_m3 for p in parcels)
        if volume - taken > 1e-9:
            if ls.bounded:
                logger.debug("String ran dry; %.4f m³ of stage fluid exits at the bit", volume - taken)
            parcels.append(Parcel(volume - taken, fluid))

        annulus = push_up_from_bit_annulus(state.annulus, parcels, self.geometry, bit, cfg)
        return StackState(string=string, annulus=annulus)

    def snapshot(self, stages: Sequence[PumpStage], stage_index: int, progress: float = 0.0) -> StackState:
        """
        State after ``stage_index`` full stages plus ``progress`` (0..1) of
        the next one, replayed from the base fill.
        """
        state = self.initial_state()
        n_full = max(0, min(int(stage_index), len(stages)))
        progress = min(max(progress, 0.0), 1.0)
        for stage in stages[:n_full]:
            state = self.apply_stage(state, stage.total_volume_m3, stage.fluid)
        if n_full < len(stages) and progress > 0:
            stage = stages[n_full]
            state = self.apply_stage(state, progress * stage.total_volume_m3, stage.fluid)
        return state

    def pumped_volume(self, stages: Sequence[PumpStage], stage_index: int, progress: float = 0.0) -> float:
        n_full = max(0, min(int(stage_index), len(stages)))
        total = sum(max(0.0, s.total_volume_m3) for s in stages[:n_full])
        if n_full < len(stages):
            total += min(max(progress, 0.0), 1.0) * max(0.0, stages[n_full].total_volume_m3)
        return total

    def state_volumes(self, state: StackState) -> "OrderedDict":
        """Volume in well per fluid identity: key -> (fluid, m³)."""
        out: "OrderedDict" = OrderedDict()
        for domain, segs in ((STRING, state.string), (ANNULUS, state.annulus)):
            for seg in segs:
                if domain == STRING:
                    v = volume_in_string(self.geometry, seg.top_m, seg.bottom_m, self.config)
                else:
                    v = volume_in_annulus(self.geometry, seg.top_m, seg.bottom_m, self.config)
                key = _identity_key(seg.fluid)
                fluid, acc = out.get(key, (seg.fluid, 0.0))
                out[key] = (fluid, acc + v)
        return out

    def expelled_fluids(self, stages: Sequence[PumpStage], stage_index: int, progress: float = 0.0) -> List[ExpelledFluid]:
        """
        Fluids returned at surface: initial + pumped − in well, per fluid.

        Only volumes above 1e-6 m³ are reported, largest first.
        """
        balance = OrderedDict()
        for key, (fluid, v) in self.state_volumes(self.initial_state()).items():
            balance[key] = [fluid, v]

        n_full = max(0, min(int(stage_index), len(stages)))
        pumped = [(s.fluid, max(0.0, s.total_volume_m3)) for s in stages[:n_full]]
        if n_full < len(stages):
            s = stages[n_full]
            pumped.append((s.fluid, min(max(progress, 0.0), 1.0) * max(0.0, s.total_volume_m3)))
        for fluid, v in pumped:
            key = _identity_key(fluid)
            balance.setdefault(key, [fluid, 0.0])[1] += v

        final = self.snapshot(stages, stage_index, progress)
        for key, (fluid, v) in self.state_volumes(final).items():
            balance.setdefault(key, [fluid, 0.0])[1] -= v

        out = [ExpelledFluid(fluid, v) for fluid, v in balance.values() if v > 1e-6]
        out.sort(key=lambda e: e.volume_m3, reverse=True)
        return out


def build_stages_from_layers(
    column: LayerColumn,
    geometry: GeometryModel,
    active_fluid: Optional[FluidSpec] = None,
    config: Optional[Config] = None,
) -> List[PumpStage]:
    """
    Pump stages that would place ``column`` in the well.

    Annulus layers come first, shallow to deep (sized by annular volume),
    then string layers deep to shallow (sized by string capacity). Layers
    without a fluid use ``active_fluid``. Zero-volume layers are skipped.
    """
    stages: List[PumpStage] = []
    for layer in sorted(column.annulus, key=lambda x: x.top_m):
        v = volume_in_annulus(geometry, layer.top_m, layer.bottom_m, config)
        fluid = layer.fluid if layer.fluid is not None else active_fluid
        if v > 0 and fluid is not None:
            stages.append(PumpStage(fluid, v, len(stages), layer.label or fluid.label, ANNULUS))
    for layer in sorted(column.string, key=lambda x: x.top_m, reverse=True):
        v = volume_in_string(geometry, layer.top_m, layer.bottom_m, config)
        fluid = layer.fluid if layer.fluid is not None else active_fluid
        if v > 0 and fluid is not None:
            stages.append(PumpStage(fluid, v, len(stages), layer.label or fluid.label, STRING))
    return stages


def build_stages_from_program(program: Iterable[Tuple[FluidSpec, float]]) -> List[PumpStage]:
    """Pump stages from an authored (fluid, volume) program; negative volumes become 0."""
    return [
        PumpStage(fluid, max(0.0, float(v)), i, fluid.label, STRING)
        for i, (fluid, v) in enumerate(program)
    ]
