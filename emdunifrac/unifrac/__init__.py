from emdunifrac.unifrac.flatten import FlattenedTree, flatten_tree
from emdunifrac.unifrac.normalize import binarize_samples, normalize_samples
from emdunifrac.unifrac.leaf_map import TaxonMatch, build_leaf_map, drop_unmatched, match_taxa
from emdunifrac.unifrac.emd import DIFF_TOLERANCE, emd_unweighted, unifrac_pair
from emdunifrac.unifrac.scheduler import compute_distance_matrix, enumerate_pairs

__all__ = [
    "DIFF_TOLERANCE",
    "FlattenedTree",
    "TaxonMatch",
    "binarize_samples",
    "build_leaf_map",
    "compute_distance_matrix",
    "drop_unmatched",
    "emd_unweighted",
    "enumerate_pairs",
    "flatten_tree",
    "match_taxa",
    "normalize_samples",
    "unifrac_pair",
]
