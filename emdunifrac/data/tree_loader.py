"""Newick tree loading."""

from pathlib import Path
import logging

from skbio import TreeNode
from skbio.io import NewickFormatError

from emdunifrac.exceptions import InputFormatError, TreeStructureError


logger = logging.getLogger(__name__)


def load_tree(tree_path: str) -> TreeNode:
    """Load a rooted phylogenetic tree from a Newick file.

    Underscores in unquoted names are kept as-is so tip names match the
    taxon names of the table verbatim.

    Args:
        tree_path: Path to tree file (.nwk Newick format)

    Returns:
        Root TreeNode

    Raises:
        InputFormatError: If the file doesn't exist or can't be read
        TreeStructureError: If the file isn't valid Newick
    """
    tree_path_obj = Path(tree_path)
    if not tree_path_obj.is_file():
        raise InputFormatError("Tree file not found", context={"file_path": tree_path})

    logger.info(f"Loading tree from {tree_path}")
    try:
        tree = TreeNode.read(str(tree_path_obj), format="newick", convert_underscores=False)
    except NewickFormatError as e:
        raise TreeStructureError(
            "Error parsing Newick tree", context={"file_path": tree_path, "error": str(e)}
        ) from e
    except OSError as e:
        raise InputFormatError(
            "Error reading tree file", context={"file_path": tree_path, "error": str(e)}
        ) from e

    logger.info(f"Tree loaded ({sum(1 for _ in tree.tips())} tips)")
    return tree
