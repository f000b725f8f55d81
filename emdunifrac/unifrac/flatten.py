"""Flatten a rooted phylogenetic tree into postorder-indexed arrays."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import logging
import math

import numpy as np
from skbio import TreeNode

from emdunifrac.exceptions import TreeStructureError


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FlattenedTree:
    """Array encoding of a rooted tree, indexed by postorder rank.

    Attributes:
        tint: Parent position of every node; the root points at itself.
        lint: Branch length from every node to its parent; 0.0 at the root.
        nodes: Source TreeNodes in postorder (children before parents).
        names: Node name at every position, or None.
        positions: Postorder rank keyed by ``id(node)``.
    """

    tint: np.ndarray
    lint: np.ndarray
    nodes: Tuple[TreeNode, ...] = field(repr=False)
    names: Tuple[Optional[str], ...] = field(repr=False)
    positions: Dict[int, int] = field(repr=False)

    @property
    def num_nodes(self) -> int:
        return len(self.tint)

    @property
    def root(self) -> int:
        """Position of the root, the only fixed point of ``tint``."""
        return self.num_nodes - 1

    @property
    def total_length(self) -> float:
        """Sum of all branch lengths in the tree."""
        return float(self.lint.sum())

    def position(self, node: TreeNode) -> int:
        """Return the postorder rank of ``node``.

        Raises:
            KeyError: If ``node`` is not part of this tree
        """
        return self.positions[id(node)]


def flatten_tree(tree: TreeNode) -> FlattenedTree:
    """Build ``tint``/``lint`` arrays from a rooted tree.

    Positions follow a postorder traversal from the root, so every node's
    position is lower than its parent's. Missing branch lengths count as 0.0,
    and the root's own length (if the Newick text gives one) is ignored.

    Args:
        tree: Any node of a rooted skbio TreeNode; the traversal starts at
              its root

    Returns:
        FlattenedTree with read-only arrays

    Raises:
        TreeStructureError: If the tree has no resolvable root, a non-root node
                            has no parent inside the tree, a node is reached
                            twice, or a branch length is negative or not finite
    """
    if tree is None:
        raise TreeStructureError("Tree has no resolvable root")
    root = tree.root()

    postorder = list(root.postorder(include_self=True))
    num_nodes = len(postorder)

    positions: Dict[int, int] = {}
    for rank, node in enumerate(postorder):
        if id(node) in positions:
            raise TreeStructureError(
                "Node visited twice during postorder traversal",
                context={"node": node.name, "rank": rank},
            )
        positions[id(node)] = rank

    tint = np.zeros(num_nodes, dtype=np.intp)
    lint = np.zeros(num_nodes, dtype=np.float64)
    names = []

    for rank, node in enumerate(postorder):
        names.append(node.name)
        if node is root:
            tint[rank] = rank
            lint[rank] = 0.0
            continue

        parent = node.parent
        if parent is None:
            raise TreeStructureError(
                "Node has no parent but is not root",
                context={"node": node.name, "rank": rank},
            )
        parent_rank = positions.get(id(parent))
        if parent_rank is None:
            raise TreeStructureError(
                "Node parent is not reachable from the root",
                context={"node": node.name, "rank": rank},
            )
        tint[rank] = parent_rank

        length = 0.0 if node.length is None else float(node.length)
        if not math.isfinite(length) or length < 0:
            raise TreeStructureError(
                "Branch length must be a finite non-negative number",
                context={"node": node.name, "length": node.length},
            )
        lint[rank] = length

    tint.setflags(write=False)
    lint.setflags(write=False)

    logger.debug(f"Flattened tree: {num_nodes} nodes, total branch length {lint.sum():.6f}")

    return FlattenedTree(
        tint=tint,
        lint=lint,
        nodes=tuple(postorder),
        names=tuple(names),
        positions=positions,
    )
