"""Shared pytest fixtures for emdunifrac tests."""

import numpy as np
import pandas as pd
import pytest
from skbio import TreeNode


SIMPLE_NEWICK = "((A:1,B:1):1,C:2);"
FOUR_TIP_NEWICK = "((A:0.1,B:0.1):0.2,(C:0.1,D:0.1):0.2);"
SIX_TIP_NEWICK = "(((A:0.5,B:1.5):0.3,C:2.0):0.7,((D:0.2,E:0.4):1.1,F:0.9):0.6);"


def read_tree(newick: str) -> TreeNode:
    """Parse a Newick string into a TreeNode."""
    return TreeNode.read([newick], format="newick", convert_underscores=False)


def make_table(presence: dict, taxa: list) -> pd.DataFrame:
    """Build a [taxa x samples] table from {sample: set of present taxa}."""
    data = {sample: [1.0 if taxon in present else 0.0 for taxon in taxa] for sample, present in presence.items()}
    return pd.DataFrame(data, index=taxa)


def brute_force_unifrac(tree: TreeNode, p: dict, q: dict) -> float:
    """Sum over branches of length times |mass of p below - mass of q below|."""
    total = 0.0
    for node in tree.postorder(include_self=False):
        below = [n.name for n in node.postorder(include_self=True) if n.is_tip()]
        imbalance = sum(p.get(name, 0.0) for name in below) - sum(q.get(name, 0.0) for name in below)
        total += (node.length or 0.0) * abs(imbalance)
    return total


@pytest.fixture
def simple_tree():
    """Create the three-tip tree ((A:1,B:1):1,C:2);"""
    return read_tree(SIMPLE_NEWICK)


@pytest.fixture
def four_tip_tree():
    """Create a balanced four-tip tree."""
    return read_tree(FOUR_TIP_NEWICK)


@pytest.fixture
def six_tip_tree():
    """Create an unbalanced six-tip tree with varied branch lengths."""
    return read_tree(SIX_TIP_NEWICK)


@pytest.fixture
def simple_table():
    """Create a table over A, B, C with four samples."""
    return make_table(
        {
            "sample1": {"A"},
            "sample2": {"B"},
            "sample3": {"A", "C"},
            "sample4": {"A", "C"},
        },
        ["A", "B", "C"],
    )


@pytest.fixture
def tree_file(tmp_path):
    """Write the simple tree to a Newick file."""
    path = tmp_path / "tree.nwk"
    path.write_text(SIMPLE_NEWICK + "\n")
    return str(path)


@pytest.fixture
def table_file(tmp_path):
    """Write a whitespace-delimited table over the simple tree's tips."""
    path = tmp_path / "table.tsv"
    path.write_text(
        "#OTU\tsample1\tsample2\tsample3\n"
        "A\t10\t0\t3\n"
        "B\t0\t7\t0\n"
        "C\t0\t0\t1\n"
    )
    return str(path)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)
