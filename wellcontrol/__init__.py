"""
Well-control geometry and hydraulics core.

This package provides modules for:
- config: Centralized configuration with all constants
- logging_config: Package logger setup
- geometry: Annulus and drill-string section records
- fluids: Fluid specs, mud steps, pump stages, density resolution
- intervals: Boundary decomposition of overlapping depth intervals
- rootfind: Shared monotonic root finder
- capacity: Annular, string, open-hole volumes and their inverses
- mixing: Mud blending and weight-up
- sections: Annulus section slicing and merging by drill-string OD
- layers: Fluid layer column compositing
- survey: MD → TVD interpolation
- hydrostatic: Hydrostatic pressure integration
- rheology: Power-law fits, friction gradients, generalized Reynolds
- displacement: Pump-stage displacement simulation
- hydraulics: Friction, SBP, BHP, ECD, TCP
- surge_swab: Trip-induced surge and swab pressures
"""

from .config import Config, DEFAULT_CONFIG
from .logging_config import reset_logging, setup_logging
from .geometry import AnnulusSection, DepthInterval, DrillStringSection, GeometryModel
from .fluids import (
    ANNULUS,
    BOTH,
    STRING,
    FluidLayer,
    FluidSpec,
    MudStep,
    PumpStage,
    closest_fluid,
    resolve_density,
    same_fluid,
)
from .intervals import decompose, unique_boundaries
from .rootfind import RootResult, solve_monotonic
from .capacity import (
    VolumeBreakdown,
    annulus_length_from_bit,
    in_hole_volumes,
    length_for_string_volume,
    solve_pipe_in_interval_for_equal_volume,
    volume_in_annulus,
    volume_in_string,
    volumes_between,
)
from .mixing import barite_mass_for_target, blend_density, volume_for_target_density
from .sections import (
    constant_overlapping_od,
    drill_string_signature,
    fill_gaps,
    merge_contiguous_by_od,
    normalize_sections,
    renormalize_if_changed,
    slice_section,
)
from .layers import (
    InMemoryLayerStore,
    LayerColumn,
    base_layer,
    compose_layers,
    overlay,
    persist_layers,
    slice_layers_for_domain,
    steps_have_overlap,
)
from .survey import SurveyStation, TvdMapper
from .hydrostatic import hydrostatic_kpa, required_uniform_density
from .rheology import PowerLaw, power_law_for, power_law_from_dials
from .displacement import (
    DisplacementSimulator,
    Segment,
    StackState,
    build_stages_from_layers,
    build_stages_from_program,
    merge_segments,
)
from .hydraulics import HydraulicsEngine, HydraulicsResult
from .surge_swab import SurgeSwabCalculator, SurgeSwabResult

__version__ = "1.0.0"
__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "setup_logging",
    "reset_logging",
    "AnnulusSection",
    "DepthInterval",
    "DrillStringSection",
    "GeometryModel",
    "ANNULUS",
    "BOTH",
    "STRING",
    "FluidLayer",
    "FluidSpec",
    "MudStep",
    "PumpStage",
    "closest_fluid",
    "resolve_density",
    "same_fluid",
    "decompose",
    "unique_boundaries",
    "RootResult",
    "solve_monotonic",
    "VolumeBreakdown",
    "annulus_length_from_bit",
    "in_hole_volumes",
    "length_for_string_volume",
    "solve_pipe_in_interval_for_equal_volume",
    "volume_in_annulus",
    "volume_in_string",
    "volumes_between",
    "barite_mass_for_target",
    "blend_density",
    "volume_for_target_density",
    "constant_overlapping_od",
    "drill_string_signature",
    "fill_gaps",
    "merge_contiguous_by_od",
    "normalize_sections",
    "renormalize_if_changed",
    "slice_section",
    "InMemoryLayerStore",
    "LayerColumn",
    "base_layer",
    "compose_layers",
    "overlay",
    "persist_layers",
    "slice_layers_for_domain",
    "steps_have_overlap",
    "SurveyStation",
    "TvdMapper",
    "hydrostatic_kpa",
    "required_uniform_density",
    "PowerLaw",
    "power_law_for",
    "power_law_from_dials",
    "DisplacementSimulator",
    "Segment",
    "StackState",
    "build_stages_from_layers",
    "build_stages_from_program",
    "merge_segments",
    "HydraulicsEngine",
    "HydraulicsResult",
    "SurgeSwabCalculator",
    "SurgeSwabResult",
]
