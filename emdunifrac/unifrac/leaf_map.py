"""Map taxon names to leaf positions of a flattened tree."""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple
import logging
import warnings

import numpy as np
import pandas as pd
from skbio import TreeNode

from emdunifrac.exceptions import UnmatchedTaxonWarning
from emdunifrac.unifrac.flatten import FlattenedTree


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TaxonMatch:
    """Join of table rows to leaf positions.

    Attributes:
        rows: Indices of table rows whose taxon is a tip of the tree
        positions: Flattened leaf position for each entry of ``rows``
        unmatched: Taxa from the table with no tip in the tree
    """

    rows: np.ndarray
    positions: np.ndarray
    unmatched: Tuple[str, ...]

    @property
    def n_matched(self) -> int:
        return len(self.rows)

    @property
    def n_unmatched(self) -> int:
        return len(self.unmatched)


def build_leaf_map(tree: TreeNode, flat: FlattenedTree) -> Dict[str, int]:
    """Map the name of every named tip to its flattened position.

    Args:
        tree: The tree that was flattened
        flat: Result of ``flatten_tree(tree)``

    Returns:
        Dictionary of tip name -> position. Internal node names are not
        included; if two tips share a name the later one in postorder wins.
    """
    leaf_map: Dict[str, int] = {}
    for tip in tree.root().tips(include_self=True):
        if tip.name is not None:
            leaf_map[tip.name] = flat.position(tip)
    return leaf_map


def match_taxa(leaf_map: Dict[str, int], taxa: Sequence[str]) -> TaxonMatch:
    """Resolve table taxa against the leaf map once for all pairs.

    Taxa without a tip contribute nothing to any distance. They are reported
    with a single UnmatchedTaxonWarning and listed in ``TaxonMatch.unmatched``.

    Args:
        leaf_map: Output of ``build_leaf_map``
        taxa: Taxon names in table row order

    Returns:
        TaxonMatch with aligned row and position arrays
    """
    rows = []
    positions = []
    unmatched = []
    for row, taxon in enumerate(taxa):
        position = leaf_map.get(taxon)
        if position is None:
            unmatched.append(taxon)
        else:
            rows.append(row)
            positions.append(position)

    if unmatched:
        preview = ", ".join(str(t) for t in unmatched[:5])
        if len(unmatched) > 5:
            preview += ", ..."
        warnings.warn(
            f"{len(unmatched)} of {len(taxa)} taxa not found in tree and ignored: {preview}",
            UnmatchedTaxonWarning,
            stacklevel=2,
        )

    logger.debug(f"Matched {len(rows)} of {len(taxa)} taxa to tree tips")

    return TaxonMatch(
        rows=np.asarray(rows, dtype=np.intp),
        positions=np.asarray(positions, dtype=np.intp),
        unmatched=tuple(unmatched),
    )


def drop_unmatched(table: pd.DataFrame, match: TaxonMatch) -> Tuple[pd.DataFrame, TaxonMatch]:
    """Filter a table down to the taxa that have a tip in the tree.

    Normalizing the filtered table makes a run with extra unmatched rows
    identical to one where those rows were never in the table.

    Args:
        table: DataFrame [taxa x samples] that ``match`` was built from
        match: Output of ``match_taxa`` for ``table.index``

    Returns:
        Tuple of (filtered table, match re-indexed against the filtered rows)
    """
    if match.n_unmatched:
        logger.debug(f"Filtering table: {len(table.index)} taxa -> {match.n_matched} taxa")
    filtered = table.iloc[match.rows]
    return filtered, TaxonMatch(
        rows=np.arange(match.n_matched, dtype=np.intp),
        positions=match.positions,
        unmatched=match.unmatched,
    )
