from __future__ import annotations

__version__ = "0.1.0"

from .exceptions import (
    EMDUniFracError,
    InputFormatError,
    TreeStructureError,
    UnmatchedTaxonWarning,
)
from .unifrac import (
    FlattenedTree,
    build_leaf_map,
    compute_distance_matrix,
    flatten_tree,
    match_taxa,
    normalize_samples,
    unifrac_pair,
)

__all__ = [
    "EMDUniFracError",
    "FlattenedTree",
    "InputFormatError",
    "TreeStructureError",
    "UnmatchedTaxonWarning",
    "__version__",
    "build_leaf_map",
    "compute_distance_matrix",
    "flatten_tree",
    "match_taxa",
    "normalize_samples",
    "unifrac_pair",
]
