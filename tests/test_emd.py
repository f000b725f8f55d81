"""Unit tests for the pairwise EMDUniFrac engine."""

import numpy as np
import pandas as pd
import pytest

from emdunifrac.exceptions import UnmatchedTaxonWarning
from emdunifrac.unifrac.emd import DIFF_TOLERANCE, emd_unweighted, unifrac_pair
from emdunifrac.unifrac.flatten import flatten_tree
from emdunifrac.unifrac.leaf_map import build_leaf_map
from emdunifrac.unifrac.normalize import normalize_samples
from conftest import brute_force_unifrac, make_table


def pair_distance(tree, presence, taxa, i=0, j=1):
    flat = flatten_tree(tree)
    leaf_map = build_leaf_map(tree, flat)
    table = normalize_samples(make_table(presence, taxa))
    return unifrac_pair(flat, leaf_map, list(table.index), table, i, j)


class TestUniFracPair:
    """Test concrete distances."""

    def test_sibling_tips(self, simple_tree):
        """Test {A} vs {B}: the path crosses two edges of length 1."""
        d = pair_distance(simple_tree, {"s1": {"A"}, "s2": {"B"}}, ["A", "B", "C"])
        assert d == pytest.approx(2.0)

    def test_distant_tips(self, simple_tree):
        """Test {A} vs {C}: 1 + 1 + 2."""
        d = pair_distance(simple_tree, {"s1": {"A"}, "s2": {"C"}}, ["A", "B", "C"])
        assert d == pytest.approx(4.0)

    def test_split_mass(self, simple_tree):
        """Test {A, C} vs {B}."""
        d = pair_distance(simple_tree, {"s1": {"A", "C"}, "s2": {"B"}}, ["A", "B", "C"])
        assert d == pytest.approx(3.0)

    def test_four_tip_tree(self, four_tip_tree):
        """Test {A} vs {D} on the balanced tree."""
        d = pair_distance(four_tip_tree, {"s1": {"A"}, "s2": {"D"}}, ["A", "B", "C", "D"])
        assert d == pytest.approx(0.6)

    def test_identical_samples_zero(self, simple_tree):
        """Test that identical presence sets give 0.0."""
        d = pair_distance(
            simple_tree,
            {"s1": {"A", "C"}, "s2": {"A", "C"}, "s3": {"B"}},
            ["A", "B", "C"],
        )
        assert d == 0.0

    def test_self_distance_zero(self, six_tip_tree):
        """Test that a sample against itself gives 0.0."""
        presence = {"s1": {"A", "D", "F"}, "s2": {"B"}}
        d = pair_distance(six_tip_tree, presence, list("ABCDEF"), i=0, j=0)
        assert d == 0.0

    def test_symmetric(self, six_tip_tree):
        """Test that swapping the samples gives the same distance."""
        presence = {"s1": {"A", "D"}, "s2": {"B", "E", "F"}}
        taxa = list("ABCDEF")
        assert pair_distance(six_tip_tree, presence, taxa, 0, 1) == pytest.approx(
            pair_distance(six_tip_tree, presence, taxa, 1, 0)
        )

    def test_row_order_independent(self, simple_tree):
        """Test that taxa are joined by name, not by position."""
        presence = {"s1": {"A"}, "s2": {"C"}}
        assert pair_distance(simple_tree, presence, ["C", "B", "A"]) == pytest.approx(4.0)

    def test_empty_sample(self, simple_tree):
        """Test distance from an all-zero sample."""
        d = pair_distance(simple_tree, {"s1": {"A"}, "s2": set()}, ["A", "B", "C"])
        assert d == pytest.approx(2.0)

    def test_unmatched_taxon_ignored(self, simple_tree):
        """Test that a taxon missing from the tree contributes nothing."""
        flat = flatten_tree(simple_tree)
        leaf_map = build_leaf_map(simple_tree, flat)
        table = pd.DataFrame({"s1": [1.0, 0.0, 0.5], "s2": [0.0, 1.0, 0.0]}, index=["A", "B", "Z"])
        with pytest.warns(UnmatchedTaxonWarning):
            d = unifrac_pair(flat, leaf_map, list(table.index), table, 0, 1)
        assert d == pytest.approx(2.0)

    def test_sample_index_out_of_range(self, simple_tree):
        """Test that an invalid sample index raises IndexError."""
        with pytest.raises(IndexError):
            pair_distance(simple_tree, {"s1": {"A"}, "s2": {"B"}}, ["A", "B", "C"], 0, 5)

    @pytest.mark.parametrize("i,j", [(0, -1), (-2, 0)])
    def test_negative_sample_index(self, simple_tree, i, j):
        """Test that negative indices do not wrap around to the last samples."""
        with pytest.raises(IndexError, match="out of range"):
            pair_distance(simple_tree, {"s1": {"A"}, "s2": {"B"}}, ["A", "B", "C"], i, j)

    def test_matches_brute_force(self, six_tip_tree, rng):
        """Test the propagation against a per-branch subtree mass sum."""
        taxa = list("ABCDEF")
        flat = flatten_tree(six_tip_tree)
        leaf_map = build_leaf_map(six_tip_tree, flat)
        for _ in range(20):
            presence = rng.integers(0, 2, size=(len(taxa), 2)).astype(float)
            table = normalize_samples(pd.DataFrame(presence, index=taxa, columns=["s1", "s2"]))
            d = unifrac_pair(flat, leaf_map, taxa, table, 0, 1)
            expected = brute_force_unifrac(
                six_tip_tree,
                dict(zip(taxa, table["s1"])),
                dict(zip(taxa, table["s2"])),
            )
            assert d == pytest.approx(expected)


class TestEmdUnweighted:
    """Test the array-level propagation."""

    def test_direct_arrays(self):
        """Test propagation on hand-built arrays for ((A:1,B:1):1,C:2);"""
        tint = np.array([2, 2, 4, 4, 4])
        lint = np.array([1.0, 1.0, 1.0, 2.0, 0.0])
        positions = np.array([0, 1, 3])
        d = emd_unweighted(tint, lint, positions, np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
        assert d == pytest.approx(2.0)

    def test_noise_below_tolerance_skipped(self):
        """Test that differences within tolerance contribute nothing."""
        tint = np.array([2, 2, 2])
        lint = np.array([1.0, 1.0, 0.0])
        positions = np.array([0, 1])
        p = np.array([0.5, 0.5])
        q = np.array([0.5 + DIFF_TOLERANCE / 2, 0.5 - DIFF_TOLERANCE / 2])
        assert emd_unweighted(tint, lint, positions, p, q) == 0.0

    def test_no_taxa(self):
        """Test that an empty join gives 0.0."""
        tint = np.array([1, 1])
        lint = np.array([3.0, 0.0])
        empty = np.array([], dtype=float)
        assert emd_unweighted(tint, lint, np.array([], dtype=int), empty, empty) == 0.0


class TestMetricProperties:
    """Property checks over random presence tables on a fixed tree."""

    def test_triangle_inequality(self, six_tip_tree, rng):
        """Test dist(a, c) <= dist(a, b) + dist(b, c)."""
        taxa = list("ABCDEF")
        flat = flatten_tree(six_tip_tree)
        leaf_map = build_leaf_map(six_tip_tree, flat)
        for _ in range(50):
            presence = rng.integers(0, 2, size=(len(taxa), 3)).astype(float)
            table = normalize_samples(pd.DataFrame(presence, index=taxa, columns=["a", "b", "c"]))
            ab = unifrac_pair(flat, leaf_map, taxa, table, 0, 1)
            bc = unifrac_pair(flat, leaf_map, taxa, table, 1, 2)
            ac = unifrac_pair(flat, leaf_map, taxa, table, 0, 2)
            assert ac <= ab + bc + 1e-12

    def test_non_negative(self, six_tip_tree, rng):
        """Test that distances are never negative."""
        taxa = list("ABCDEF")
        flat = flatten_tree(six_tip_tree)
        leaf_map = build_leaf_map(six_tip_tree, flat)
        for _ in range(20):
            presence = rng.integers(0, 2, size=(len(taxa), 2)).astype(float)
            table = normalize_samples(pd.DataFrame(presence, index=taxa))
            assert unifrac_pair(flat, leaf_map, taxa, table, 0, 1) >= 0.0
