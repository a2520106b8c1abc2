"""
Unit tests for surge and swab calculations.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol.geometry import AnnulusSection, DrillStringSection, GeometryModel
from wellcontrol.fluids import FluidSpec
from wellcontrol.rheology import LAMINAR, PowerLaw, friction_gradient
from wellcontrol.surge_swab import (
    CLOSED,
    NO_STRING,
    OPEN,
    SurgeSwabCalculator,
    clinging_constant,
    displacement_area,
)

G = 9.80665
MUD = FluidSpec(1200.0, k_annulus=0.5, n_annulus=0.7, fluid_id="mud")


def uniform_well(pipe_id=0.05):
    return GeometryModel(
        annulus=[AnnulusSection(0.0, 1000.0, inner_diameter_m=0.2)],
        drill_string=[DrillStringSection(0.0, 1000.0, inner_diameter_m=pipe_id, outer_diameter_m=0.1)],
    )


class TestClinging:
    """Test clinging constant and displacement area."""

    def test_burkhardt(self):
        assert np.isclose(clinging_constant(0.1, 0.2), 0.45 + 0.45 * 0.25)

    def test_invalid_geometry_returns_base(self):
        assert clinging_constant(0.3, 0.2) == 0.45
        assert clinging_constant(0.0, 0.2) == 0.45

    def test_displacement_area(self):
        assert np.isclose(displacement_area(0.1, 0.05, CLOSED), np.pi / 4.0 * 0.01)
        assert np.isclose(displacement_area(0.1, 0.05, OPEN), np.pi / 4.0 * (0.01 - 0.0025))


class TestAtDepth:
    """Test single-depth surge/swab."""

    def test_laminar_value(self):
        """Uniform well, closed end, 10 m/min."""
        calc = SurgeSwabCalculator(uniform_well(), MUD)
        row = calc.at_depth(1000.0, 10.0)

        kc = 0.45 + 0.45 * 0.25
        va = (10.0 / 60.0) * (1.0 + kc) * (0.01 / 0.03)
        grad = friction_gradient(va, 0.1, PowerLaw(0.5, 0.7))
        expected_kpa = grad * 1000.0 / 1000.0

        assert row.flow_regime == LAMINAR
        assert np.isclose(row.annular_velocity_m_per_s, va)
        assert np.isclose(row.clinging_constant, kc)
        assert np.isclose(row.surge_kpa, expected_kpa)
        assert np.isclose(row.swab_kpa, -expected_kpa)
        assert np.isclose(row.surge_ecd_kgm3, expected_kpa / (G / 1000.0 * 1000.0))
        assert np.isclose(row.swab_ecd_kgm3, -row.surge_ecd_kgm3)

    def test_open_end_lower_than_closed(self):
        closed = SurgeSwabCalculator(uniform_well(), MUD, pipe_end=CLOSED).at_depth(1000.0, 10.0)
        opened = SurgeSwabCalculator(uniform_well(), MUD, pipe_end=OPEN).at_depth(1000.0, 10.0)
        assert 0 < opened.surge_kpa < closed.surge_kpa

    def test_faster_trip_more_surge(self):
        calc = SurgeSwabCalculator(uniform_well(), MUD)
        assert calc.at_depth(1000.0, 30.0).surge_kpa > calc.at_depth(1000.0, 10.0).surge_kpa

    def test_trip_direction_sign_ignored(self):
        calc = SurgeSwabCalculator(uniform_well(), MUD)
        assert np.isclose(calc.at_depth(800.0, -10.0).surge_kpa, calc.at_depth(800.0, 10.0).surge_kpa)

    def test_override_and_eccentricity(self):
        base = SurgeSwabCalculator(uniform_well(), MUD, clinging_override=0.5).at_depth(1000.0, 10.0)
        ecc = SurgeSwabCalculator(uniform_well(), MUD, clinging_override=0.5, eccentricity=1.2).at_depth(1000.0, 10.0)
        assert base.clinging_constant == 0.5
        assert np.isclose(ecc.annular_velocity_m_per_s, 1.2 * base.annular_velocity_m_per_s)

    def test_no_string_at_bit(self):
        geom = GeometryModel(
            annulus=[AnnulusSection(0.0, 1000.0, inner_diameter_m=0.2)],
            drill_string=[DrillStringSection(0.0, 500.0, inner_diameter_m=0.05, outer_diameter_m=0.1)],
        )
        row = SurgeSwabCalculator(geom, MUD).at_depth(800.0, 10.0)
        assert row.flow_regime == NO_STRING
        assert row.surge_kpa == 0.0
        assert row.swab_kpa == 0.0

    def test_missing_rheology_zero_friction(self):
        row = SurgeSwabCalculator(uniform_well(), FluidSpec(1200.0)).at_depth(1000.0, 10.0)
        assert row.surge_kpa == 0.0

    def test_pv_yp_only_fluid_gives_friction(self):
        """Surge/swab falls back to PV/YP when no lab fit or dials are given."""
        bingham = FluidSpec(1200.0, pv_pa_s=0.02, yp_pa=5.0)
        row = SurgeSwabCalculator(uniform_well(), bingham).at_depth(1000.0, 10.0)
        assert row.surge_kpa > 0.0


class TestSweep:
    """Test depth sweeps and summaries."""

    def test_depths_include_end(self):
        assert np.allclose(SurgeSwabCalculator.depths(0.0, 1000.0, 300.0), [0.0, 300.0, 600.0, 900.0, 1000.0])
        assert np.allclose(SurgeSwabCalculator.depths(1000.0, 0.0, 500.0), [1000.0, 500.0, 0.0])

    def test_summary(self):
        calc = SurgeSwabCalculator(uniform_well(), MUD)
        result = calc.calculate(10.0, 100.0, 1000.0, 100.0)
        s = result.summary
        assert len(result.rows) == 10
        assert s.depth_of_max_surge_m == 1000.0
        assert s.depth_of_max_swab_m == 1000.0
        assert np.isclose(s.max_swab_kpa, s.max_surge_kpa)
        assert np.isclose(s.recommended_sabp_kpa, 1.15 * s.max_swab_kpa)
        assert np.isclose(s.average_clinging_constant, 0.45 + 0.45 * 0.25)
        assert np.isclose(s.displacement_area_m2, np.pi / 4.0 * 0.01)
        assert not s.has_missing_pipe_id

    def test_missing_pipe_id_flag(self):
        calc = SurgeSwabCalculator(uniform_well(pipe_id=0.0), MUD)
        assert calc.calculate(10.0, 500.0, 1000.0, 250.0).summary.has_missing_pipe_id

    def test_dataframe_export(self):
        result = SurgeSwabCalculator(uniform_well(), MUD).calculate(10.0, 1000.0, 500.0, 250.0)
        df = result.to_dataframe()
        assert list(df["bit_md"]) == [1000.0, 750.0, 500.0]
        assert "swab_kpa" in df.columns
        assert (df["swab_kpa"] <= 0).all()
