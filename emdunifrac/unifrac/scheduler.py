"""Parallel computation of the full pairwise UniFrac distance matrix."""

from typing import Iterator, List, Optional, Sequence, Tuple
import logging
import multiprocessing as mp
import time

import numpy as np
from skbio import DistanceMatrix

from emdunifrac.unifrac.emd import emd_unweighted
from emdunifrac.unifrac.flatten import FlattenedTree
from emdunifrac.unifrac.leaf_map import TaxonMatch


logger = logging.getLogger(__name__)

Pair = Tuple[int, int]
PairResult = Tuple[int, int, float]

# Read-only inputs installed once per worker process by the pool initializer
_worker_inputs: Optional[Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]] = None


def enumerate_pairs(n_samples: int) -> Iterator[Pair]:
    """Yield every unordered sample pair ``(i, j)`` with ``i < j`` exactly once."""
    for i in range(n_samples):
        for j in range(i + 1, n_samples):
            yield i, j


def chunk_pairs(pairs: Sequence[Pair], chunk_size: int) -> List[Tuple[Pair, ...]]:
    """Split the pair list into immutable chunks of at most ``chunk_size`` pairs."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [tuple(pairs[k:k + chunk_size]) for k in range(0, len(pairs), chunk_size)]


def compute_pair_chunk(
    pairs: Sequence[Pair],
    tint: np.ndarray,
    lint: np.ndarray,
    leaf_positions: np.ndarray,
    values: np.ndarray,
) -> List[PairResult]:
    """Compute the distance for every pair in a chunk.

    Args:
        pairs: Sample index pairs
        tint: Parent position per node
        lint: Branch length per node
        leaf_positions: Leaf position for every row of ``values``
        values: Normalized abundances of matched taxa [matched taxa x samples]

    Returns:
        List of ``(i, j, distance)`` triples
    """
    return [
        (i, j, emd_unweighted(tint, lint, leaf_positions, values[:, i], values[:, j]))
        for i, j in pairs
    ]


def _init_worker(tint, lint, leaf_positions, values) -> None:
    global _worker_inputs
    _worker_inputs = (tint, lint, leaf_positions, values)


def _run_chunk(pairs: Tuple[Pair, ...]) -> List[PairResult]:
    return compute_pair_chunk(pairs, *_worker_inputs)


def compute_distance_matrix(
    flat: FlattenedTree,
    match: TaxonMatch,
    probabilities: np.ndarray,
    sample_ids: Sequence[str],
    num_workers: Optional[int] = None,
    chunk_size: int = 1000,
    normalize_by_total_length: bool = False,
) -> DistanceMatrix:
    """Compute unweighted UniFrac for all sample pairs.

    Pairs are split into chunks and farmed out to a process pool. Workers
    return distances by value and only the calling process writes into the
    matrix, each pair filling its own two cells. The diagonal is always 0.0.

    Args:
        flat: Flattened tree
        match: Table taxa resolved against the tree's leaves
        probabilities: Normalized table [taxa x samples], rows in table order
        sample_ids: Sample names, one per column of ``probabilities``
        num_workers: Number of worker processes (default: CPU count). With one
                     worker everything runs in the calling process.
        chunk_size: Number of pairs per worker task
        normalize_by_total_length: If True, divide every distance by the total
                                   branch length of the tree (when positive)

    Returns:
        skbio.DistanceMatrix with ids in ``sample_ids`` order

    Raises:
        ValueError: If there are no samples, the number of sample ids does not
                    match the table columns, or num_workers/chunk_size are not
                    positive
    """
    values = np.asarray(probabilities, dtype=np.float64)
    n_samples = len(sample_ids)
    if values.ndim != 2 or values.shape[1] != n_samples:
        raise ValueError(
            f"Table has shape {values.shape} but {n_samples} sample ids were given"
        )
    if n_samples == 0:
        raise ValueError("At least one sample is required to build a distance matrix")
    if num_workers is None:
        num_workers = mp.cpu_count()
    if num_workers <= 0:
        raise ValueError(f"num_workers must be positive, got {num_workers}")

    matched = np.ascontiguousarray(values[match.rows])
    pairs = list(enumerate_pairs(n_samples))
    chunks = chunk_pairs(pairs, chunk_size)

    logger.info(f"Computing unweighted UniFrac for {n_samples:,} samples ({len(pairs):,} pairs)")

    start_time = time.time()
    inputs = (flat.tint, flat.lint, match.positions, matched)

    if num_workers == 1 or len(chunks) <= 1:
        results = [compute_pair_chunk(chunk, *inputs) for chunk in chunks]
    else:
        workers = min(num_workers, len(chunks))
        logger.info(f"Using {workers} workers, {len(chunks)} chunks of up to {chunk_size} pairs")
        with mp.Pool(workers, initializer=_init_worker, initargs=inputs) as pool:
            results = pool.map(_run_chunk, chunks)

    dist = np.zeros((n_samples, n_samples), dtype=np.float64)
    for chunk_results in results:
        for i, j, distance in chunk_results:
            dist[i, j] = distance
            dist[j, i] = distance

    if normalize_by_total_length:
        total = flat.total_length
        if total > 0:
            dist /= total
        else:
            logger.warning("Total branch length is 0, distances left un-normalized")

    elapsed = time.time() - start_time
    logger.info(f"Computation complete in {elapsed:.1f} seconds")

    return DistanceMatrix(dist, ids=list(sample_ids))
