#!/usr/bin/env python
"""
Quick demonstration of the well-control core.

Builds a small well, normalizes its annulus, composes a fluid column,
pumps a spacer and reports hydraulics and surge/swab.
"""

import logging
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol import (
    ANNULUS,
    AnnulusSection,
    DisplacementSimulator,
    DrillStringSection,
    FluidSpec,
    GeometryModel,
    HydraulicsEngine,
    MudStep,
    SurgeSwabCalculator,
    SurveyStation,
    TvdMapper,
    build_stages_from_program,
    compose_layers,
    normalize_sections,
    setup_logging,
    volumes_between,
)


def main():
    setup_logging(logging.INFO)

    print("=" * 70)
    print("WELL-CONTROL CORE - QUICK DEMO")
    print("=" * 70)

    # 1. Geometry
    print("\n1. Building geometry...")
    drill_string = [
        DrillStringSection(0.0, 2200.0, inner_diameter_m=0.108, outer_diameter_m=0.127, name="5in DP", section_id="dp"),
        DrillStringSection(2200.0, 2500.0, inner_diameter_m=0.0714, outer_diameter_m=0.1651, name="6.5in DC", section_id="dc"),
    ]
    annulus = [
        AnnulusSection(0.0, 1500.0, inner_diameter_m=0.2245, name="9-5/8in casing"),
        AnnulusSection(1500.0, 2500.0, inner_diameter_m=0.2159, name="8.5in hole"),
    ]
    annulus = normalize_sections(annulus, drill_string)
    geometry = GeometryModel(annulus=annulus, drill_string=drill_string)
    for s in annulus:
        print(f"   {s.name:<22s} {s.top_m:7.1f} - {s.bottom_m:7.1f} m  ID={s.inner_diameter_m:.4f} m")

    v = volumes_between(geometry, 0.0, geometry.total_depth_m)
    print(f"   Annular volume:   {v.annular_m3:8.2f} m³")
    print(f"   String capacity:  {v.string_capacity_m3:8.2f} m³")
    print(f"   Open hole:        {v.open_hole_m3:8.2f} m³")

    # 2. Fluid column
    print("\n2. Composing fluid column...")
    mud = FluidSpec(1250.0, dial600=52.0, dial300=32.0, fluid_id="wbm", name="WBM 1.25")
    pill = FluidSpec(1600.0, dial600=80.0, dial300=50.0, fluid_id="pill", name="Weighted pill")
    column = compose_layers(
        [MudStep(2000.0, 2500.0, pill, ANNULUS, name="Pill")],
        td=geometry.total_depth_m,
        base_annulus=mud,
        base_string=mud,
    )
    for layer in column.annulus:
        print(f"   annulus {layer.top_m:7.1f} - {layer.bottom_m:7.1f} m  {layer.fluid.label}")

    # 3. Pump a spacer
    print("\n3. Pumping 5 m³ spacer...")
    spacer = FluidSpec(1400.0, dial600=60.0, dial300=38.0, fluid_id="spacer", name="Spacer")
    sim = DisplacementSimulator(geometry, base_string=mud, base_annulus=mud)
    stages = build_stages_from_program([(spacer, 5.0)])
    state = sim.snapshot(stages, 1)
    for seg in state.annulus:
        print(f"   annulus {seg.top_m:7.1f} - {seg.bottom_m:7.1f} m  {seg.fluid.label}")

    # 4. Hydraulics
    print("\n4. Hydraulics at the bit...")
    mapper = TvdMapper([SurveyStation(0.0, 0.0), SurveyStation(1000.0, 1000.0), SurveyStation(2500.0, 2300.0)])
    res = HydraulicsEngine(geometry, mapper).evaluate_state(
        state, pump_rate_m3_per_min=1.2, mpd_enabled=True, target_ecd_kgm3=1320.0
    )
    print(f"   Annulus friction: {res.annulus_friction_kpa:8.1f} kPa")
    print(f"   String friction:  {res.string_friction_kpa:8.1f} kPa")
    print(f"   SBP:              {res.sbp_kpa:8.1f} kPa")
    print(f"   BHP:              {res.bhp_kpa:8.1f} kPa")
    print(f"   ECD:              {res.ecd_kgm3:8.1f} kg/m³")

    # 5. Surge / swab
    print("\n5. Surge/swab pulling out at 15 m/min...")
    result = SurgeSwabCalculator(geometry, mud, mapper).calculate(-15.0, 2500.0, 500.0, 250.0)
    s = result.summary
    print(f"   Max swab:         {s.max_swab_kpa:8.1f} kPa at {s.depth_of_max_swab_m:.0f} m")
    print(f"   Recommended SABP: {s.recommended_sabp_kpa:8.1f} kPa")
    print(result.to_dataframe().to_string(index=False, float_format=lambda x: f"{x:.2f}"))

    print("\n" + "=" * 70)


if __name__ == "__main__":
    main()
