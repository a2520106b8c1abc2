"""
Unit tests for MD → TVD mapping and hydrostatic integration.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol.fluids import ANNULUS, FluidLayer, FluidSpec
from wellcontrol.survey import SurveyStation, TvdMapper
from wellcontrol.hydrostatic import (
    grad_kpa_per_m,
    hydrostatic_at_tvd_kpa,
    hydrostatic_kpa,
    required_sbp_kpa,
    required_uniform_density,
)

G = 9.80665


def stations():
    return [SurveyStation(0.0, 0.0), SurveyStation(1000.0, 950.0), SurveyStation(2000.0, 1800.0)]


class TestTvdMapper:
    """Test survey interpolation."""

    def test_linear_between_stations(self):
        assert np.isclose(TvdMapper(stations()).md_to_tvd(500.0), 475.0)
        assert np.isclose(TvdMapper(stations()).md_to_tvd(1500.0), 1375.0)

    def test_beyond_last_station_clamps(self):
        assert np.isclose(TvdMapper(stations()).md_to_tvd(3000.0), 1800.0)

    def test_above_first_station_clamps(self):
        m = TvdMapper([SurveyStation(100.0, 100.0), SurveyStation(1000.0, 900.0)])
        assert m.md_to_tvd(50.0) == 100.0

    def test_no_stations_is_identity(self):
        assert TvdMapper([]).md_to_tvd(1234.5) == 1234.5
        assert TvdMapper().is_identity

    def test_single_station_is_identity(self):
        assert TvdMapper([SurveyStation(500.0, 400.0)]).md_to_tvd(800.0) == 800.0

    def test_unsorted_and_duplicate_stations(self):
        m = TvdMapper([
            SurveyStation(2000.0, 1800.0),
            SurveyStation(0.0, 0.0),
            SurveyStation(1000.0, 950.0),
            SurveyStation(1000.0, 999.0),
        ])
        assert np.isclose(m.md_to_tvd(500.0), 475.0)


class TestHydrostatic:
    """Test hydrostatic integration."""

    def test_uniform_column(self):
        """ρ·g·h for a single layer, reported in kPa."""
        layers = [FluidLayer(ANNULUS, 0.0, 1000.0, FluidSpec(1200.0))]
        assert np.isclose(hydrostatic_kpa(layers, 1000.0), 1200.0 * G * 1000.0 / 1000.0)

    def test_clips_at_limit(self):
        layers = [
            FluidLayer(ANNULUS, 0.0, 500.0, FluidSpec(1000.0)),
            FluidLayer(ANNULUS, 500.0, 1000.0, FluidSpec(2000.0)),
        ]
        expected = (1000.0 * 500.0 + 2000.0 * 200.0) * G / 1000.0
        assert np.isclose(hydrostatic_kpa(layers, 700.0), expected)

    def test_uses_tvd(self):
        """Deviated well integrates over ΔTVD, not ΔMD."""
        layers = [FluidLayer(ANNULUS, 0.0, 2000.0, FluidSpec(1200.0))]
        p = hydrostatic_kpa(layers, 2000.0, TvdMapper(stations()))
        assert np.isclose(p, 1200.0 * G * 1800.0 / 1000.0)

    def test_missing_fluid_uses_fallback(self):
        layers = [FluidLayer(ANNULUS, 0.0, 100.0, None)]
        assert np.isclose(hydrostatic_kpa(layers, 100.0), 1260.0 * G * 100.0 / 1000.0)
        assert np.isclose(hydrostatic_kpa(layers, 100.0, base_density=1000.0), 1000.0 * G * 100.0 / 1000.0)

    def test_tvd_stack_and_helpers(self):
        assert np.isclose(grad_kpa_per_m(1000.0), G)
        p = hydrostatic_at_tvd_kpa(1500.0, [(0.0, 1000.0, 1000.0), (1000.0, 3000.0, 1500.0)])
        assert np.isclose(p, (1000.0 * 1000.0 + 1500.0 * 500.0) * G / 1000.0)
        assert np.isclose(required_uniform_density(p, 1500.0), (1000.0 * 1000.0 + 1500.0 * 500.0) / 1500.0)
        assert required_uniform_density(p, 0.0) == 0.0
        assert required_sbp_kpa(1000.0, 1200.0) == 0.0
        assert required_sbp_kpa(1200.0, 1000.0) == 200.0
