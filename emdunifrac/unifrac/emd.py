"""Unweighted UniFrac between two samples via EMDUniFrac propagation.

The distance is the Earth Mover's Distance between the two samples' leaf
distributions under the tree metric. On a tree that transport problem has a
closed form: push the signed mass difference at each leaf up towards the
root and add ``branch length * |mass crossing the branch|`` for every branch.
"""

from typing import Dict, Sequence

import numpy as np
import pandas as pd

from emdunifrac.unifrac.flatten import FlattenedTree
from emdunifrac.unifrac.leaf_map import match_taxa


# Leaf differences at or below this are treated as zero
DIFF_TOLERANCE = 1e-14


def emd_unweighted(
    tint: np.ndarray,
    lint: np.ndarray,
    leaf_positions: np.ndarray,
    p: np.ndarray,
    q: np.ndarray,
) -> float:
    """Propagate leaf mass differences up a flattened tree.

    Args:
        tint: Parent position per node (postorder, root is its own parent)
        lint: Branch length per node
        leaf_positions: Leaf position for every entry of ``p`` and ``q``
        p: Normalized abundances of the first sample, aligned with ``leaf_positions``
        q: Normalized abundances of the second sample, aligned with ``leaf_positions``

    Returns:
        Sum over all branches of branch length times absolute mass imbalance
    """
    partial = np.zeros(len(tint), dtype=np.float64)

    diff = np.asarray(p, dtype=np.float64) - np.asarray(q, dtype=np.float64)
    moved = np.abs(diff) > DIFF_TOLERANCE
    partial[leaf_positions[moved]] = diff[moved]

    z = 0.0
    for node in range(len(tint)):
        parent = tint[node]
        if parent == node:
            continue
        value = partial[node]
        partial[parent] += value
        z += lint[node] * abs(value)
    return float(z)


def unifrac_pair(
    flat: FlattenedTree,
    leaf_map: Dict[str, int],
    taxa: Sequence[str],
    probabilities: pd.DataFrame | np.ndarray,
    i: int,
    j: int,
) -> float:
    """Compute the unweighted UniFrac distance between samples ``i`` and ``j``.

    Taxa missing from ``leaf_map`` are ignored. Computing a sample against
    itself gives 0.0.

    Args:
        flat: Flattened tree
        leaf_map: Tip name -> position, from ``build_leaf_map``
        taxa: Taxon names in table row order
        probabilities: Normalized table [taxa x samples]
        i: Column index of the first sample
        j: Column index of the second sample

    Returns:
        Raw (not length-normalized) unweighted UniFrac distance

    Raises:
        IndexError: If ``i`` or ``j`` is not a column of ``probabilities``
    """
    values = np.asarray(probabilities, dtype=np.float64)
    n_samples = values.shape[1]
    for index in (i, j):
        if not 0 <= index < n_samples:
            raise IndexError(f"Sample index {index} out of range for {n_samples} samples")
    match = match_taxa(leaf_map, taxa)
    matched = values[match.rows]
    return emd_unweighted(flat.tint, flat.lint, match.positions, matched[:, i], matched[:, j])
