"""
Unit tests for mud mixing helpers.

Tests blend density, the volume needed to reach a target density and the
barite mass needed to weight up a mud.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol.mixing import (
    BARITE_DENSITY,
    barite_mass_for_target,
    blend_density,
    volume_for_target_density,
)


class TestBlendDensity:
    """Test volume-weighted blending."""

    def test_equal_volumes(self):
        assert np.isclose(blend_density(1000.0, 10.0, 2000.0, 10.0), 1500.0)

    def test_weighted_by_volume(self):
        assert np.isclose(blend_density(1200.0, 30.0, 1600.0, 10.0), 1300.0)

    def test_no_volume(self):
        assert blend_density(1000.0, 0.0, 2000.0, 0.0) == 0.0


class TestVolumeForTarget:
    """Test the inverse blend."""

    def test_midpoint_target(self):
        v2 = volume_for_target_density(1000.0, 10.0, 2000.0, 1500.0)
        assert np.isclose(v2, 10.0)

    def test_result_blends_to_target(self):
        v2 = volume_for_target_density(1200.0, 40.0, 1800.0, 1350.0)
        assert np.isclose(blend_density(1200.0, 40.0, 1800.0, v2), 1350.0)

    def test_unreachable_targets(self):
        """Target equal to the added fluid, or outside the two densities."""
        assert volume_for_target_density(1000.0, 10.0, 1500.0, 1500.0) is None
        assert volume_for_target_density(1000.0, 10.0, 2000.0, 900.0) is None


class TestBariteMass:
    """Test barite weighting."""

    def test_mass(self):
        m = barite_mass_for_target(1200.0, 10.0, 1500.0)
        assert np.isclose(m, 300.0 * 10.0 / (1.0 - 1500.0 / 4200.0))

    def test_weighted_mud_reaches_target(self):
        """Adding the barite volume m/ρB brings the blend to the target."""
        m = barite_mass_for_target(1100.0, 20.0, 1400.0)
        assert np.isclose(blend_density(1100.0, 20.0, BARITE_DENSITY, m / BARITE_DENSITY), 1400.0)

    def test_invalid_inputs(self):
        assert barite_mass_for_target(1200.0, 10.0, 1100.0) is None
        assert barite_mass_for_target(1200.0, 0.0, 1500.0) is None
        assert barite_mass_for_target(1200.0, 10.0, 4500.0) is None
