"""
Unit tests for annulus section slicing, merging and normalization.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol.geometry import AnnulusSection, DrillStringSection
from wellcontrol.sections import (
    constant_overlapping_od,
    drill_string_signature,
    fill_gaps,
    merge_contiguous_by_od,
    normalize_sections,
    renormalize_if_changed,
    slice_section,
)


def drill_string():
    return [
        DrillStringSection(0.0, 800.0, inner_diameter_m=0.108, outer_diameter_m=0.127, name="DP", section_id="dp"),
        DrillStringSection(800.0, 1000.0, inner_diameter_m=0.07, outer_diameter_m=0.165, name="DC", section_id="dc"),
    ]


def annulus():
    return [
        AnnulusSection(600.0, 1000.0, inner_diameter_m=0.216, name="OH", section_id="oh"),
        AnnulusSection(0.0, 600.0, inner_diameter_m=0.22, name="Casing", section_id="csg"),
    ]


def as_tuples(sections):
    return [(s.top_m, s.bottom_m, s.inner_diameter_m, s.outer_diameter_m, s.name) for s in sections]


class TestConstantOverlappingOD:
    """Test constant-OD probing."""

    def test_constant_od(self):
        assert constant_overlapping_od(drill_string(), 0.0, 800.0) == 0.127

    def test_changing_od_is_none(self):
        assert constant_overlapping_od(drill_string(), 700.0, 900.0) is None

    def test_no_string_is_zero(self):
        assert constant_overlapping_od(drill_string(), 1000.0, 1100.0) == 0.0

    def test_degenerate_range_is_zero(self):
        assert constant_overlapping_od(drill_string(), 500.0, 500.0) == 0.0


class TestSliceSection:
    """Test slicing at drill-string OD changes."""

    def test_slices_at_od_change(self):
        """Open hole spanning the DP/DC crossover splits in two."""
        parts = slice_section(annulus()[0], drill_string())
        assert [(p.top_m, p.bottom_m) for p in parts] == [(600.0, 800.0), (800.0, 1000.0)]
        assert [p.name for p in parts] == ["OH [1]", "OH [2]"]
        assert all(p.outer_diameter_m == 0.0 for p in parts)
        assert all(p.inner_diameter_m == 0.216 for p in parts)

    def test_single_run_is_unchanged(self):
        """A section under one OD comes back as itself."""
        casing = annulus()[1]
        parts = slice_section(casing, drill_string())
        assert len(parts) == 1
        assert as_tuples(parts) == as_tuples([casing])

    def test_input_not_mutated(self):
        oh = annulus()[0]
        slice_section(oh, drill_string())
        assert (oh.top_m, oh.bottom_m, oh.name) == (600.0, 1000.0, "OH")


class TestMerge:
    """Test merging of contiguous sections."""

    def test_merges_cascade(self):
        """Three contiguous pieces under one OD become one section."""
        pieces = [
            AnnulusSection(200.0, 300.0, inner_diameter_m=0.22, name="c"),
            AnnulusSection(0.0, 100.0, inner_diameter_m=0.22, name="a"),
            AnnulusSection(100.0, 200.0, inner_diameter_m=0.22, name="b"),
        ]
        merged = merge_contiguous_by_od(pieces, drill_string())
        assert len(merged) == 1
        assert (merged[0].top_m, merged[0].bottom_m, merged[0].name) == (0.0, 300.0, "a")

    def test_different_ids_not_merged(self):
        pieces = [
            AnnulusSection(0.0, 100.0, inner_diameter_m=0.22),
            AnnulusSection(100.0, 200.0, inner_diameter_m=0.216),
        ]
        assert len(merge_contiguous_by_od(pieces, drill_string())) == 2

    def test_od_change_blocks_merge(self):
        """Union spanning an OD change has no constant OD."""
        pieces = [
            AnnulusSection(700.0, 800.0, inner_diameter_m=0.216),
            AnnulusSection(800.0, 900.0, inner_diameter_m=0.216),
        ]
        assert len(merge_contiguous_by_od(pieces, drill_string())) == 2

    def test_gap_blocks_merge(self):
        pieces = [
            AnnulusSection(0.0, 100.0, inner_diameter_m=0.22),
            AnnulusSection(100.5, 200.0, inner_diameter_m=0.22),
        ]
        assert len(merge_contiguous_by_od(pieces, drill_string())) == 2


class TestNormalize:
    """Test full normalization."""

    def test_each_section_has_constant_od(self):
        out = normalize_sections(annulus(), drill_string())
        for s in out:
            assert constant_overlapping_od(drill_string(), s.top_m, s.bottom_m) is not None

    def test_sorted_and_non_overlapping(self):
        out = normalize_sections(annulus(), drill_string())
        for a, b in zip(out[:-1], out[1:]):
            assert a.bottom_m <= b.top_m + 1e-9

    def test_idempotent(self):
        """A second pass on normalized sections changes nothing."""
        once = normalize_sections(annulus(), drill_string())
        twice = normalize_sections(once, drill_string())
        assert as_tuples(once) == as_tuples(twice)

    def test_idempotent_random(self):
        """Idempotence over randomized drill strings."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            cuts = np.sort(rng.uniform(50.0, 1950.0, size=4))
            edges = np.concatenate([[0.0], cuts, [2000.0]])
            ds = [
                DrillStringSection(float(a), float(b), inner_diameter_m=0.07,
                                   outer_diameter_m=float(rng.choice([0.127, 0.165, 0.2])))
                for a, b in zip(edges[:-1], edges[1:])
            ]
            ann = [
                AnnulusSection(0.0, 900.0, inner_diameter_m=0.3, name="Csg"),
                AnnulusSection(900.0, 2000.0, inner_diameter_m=0.25, name="OH"),
            ]
            once = normalize_sections(ann, ds)
            assert as_tuples(normalize_sections(once, ds)) == as_tuples(once)

    def test_input_list_not_mutated(self):
        sections = annulus()
        before = as_tuples(sections)
        normalize_sections(sections, drill_string())
        assert as_tuples(sections) == before


class TestSignature:
    """Test change-signature driven renormalization."""

    def test_signature_is_ordered_tuples(self):
        sig = drill_string_signature(drill_string())
        assert sig == (("dp", 0.0, 800.0, 0.127), ("dc", 800.0, 1000.0, 0.165))

    def test_renormalize_only_on_change(self):
        first = renormalize_if_changed(annulus(), drill_string(), None)
        assert first.changed
        assert len(first.sections) == 3

        second = renormalize_if_changed(first.sections, drill_string(), first.signature)
        assert not second.changed
        assert as_tuples(second.sections) == as_tuples(first.sections)

        ds = drill_string()
        ds[1].outer_diameter_m = 0.2
        third = renormalize_if_changed(first.sections, ds, first.signature)
        assert third.changed


class TestFillGaps:
    """Test gap filling between sections."""

    def test_extends_previous_section(self):
        sections = [
            AnnulusSection(600.0, 1000.0, inner_diameter_m=0.216),
            AnnulusSection(0.0, 500.0, inner_diameter_m=0.22),
        ]
        out = fill_gaps(sections)
        assert (out[0].top_m, out[0].bottom_m) == (0.0, 600.0)
        assert (out[1].top_m, out[1].bottom_m) == (600.0, 1000.0)
