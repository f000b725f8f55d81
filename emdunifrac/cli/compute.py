"""Compute command for the emdunifrac CLI."""

import logging
import multiprocessing as mp
import time

import click

from emdunifrac import __version__
from emdunifrac.cli.utils import setup_logging, validate_arguments
from emdunifrac.data.matrix_writer import write_matrix
from emdunifrac.data.table_loader import load_table
from emdunifrac.data.tree_loader import load_tree
from emdunifrac.unifrac import (
    build_leaf_map,
    compute_distance_matrix,
    drop_unmatched,
    flatten_tree,
    match_taxa,
    normalize_samples,
)


logger = logging.getLogger(__name__)


def run(
    tree_path: str,
    table_path: str,
    output_path: str,
    num_workers: int | None = None,
    chunk_size: int = 1000,
):
    """Load inputs, compute all pairwise distances and write the matrix.

    Nothing is written unless the whole matrix was computed.

    Returns:
        The computed skbio.DistanceMatrix
    """
    tree = load_tree(tree_path)
    table = load_table(table_path)

    flat = flatten_tree(tree)
    logger.info(f"Flattened tree: {flat.num_nodes} nodes, total branch length {flat.total_length:.6f}")

    leaf_map = build_leaf_map(tree, flat)
    match = match_taxa(leaf_map, list(table.index))
    logger.info(f"{match.n_matched} of {len(table.index)} taxa matched to tree tips")

    table, match = drop_unmatched(table, match)
    probabilities = normalize_samples(table)

    distances = compute_distance_matrix(
        flat,
        match,
        probabilities.to_numpy(),
        list(table.columns),
        num_workers=num_workers,
        chunk_size=chunk_size,
    )
    write_matrix(distances, output_path)
    return distances


@click.command()
@click.option("-t", "--tree", required=True, type=click.Path(dir_okay=False), help="Input Newick format tree file")
@click.option(
    "-i",
    "--input",
    "table",
    required=True,
    type=click.Path(dir_okay=False),
    help="Input whitespace-delimited sample-feature table (or .biom file)",
)
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False), help="Output file for distance matrix")
@click.option(
    "--num-workers",
    default=None,
    type=int,
    help="Number of worker processes (default: CPU count)",
)
@click.option("--chunk-size", default=1000, type=int, help="Number of sample pairs per worker task")
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Also write logs to this file")
@click.version_option(version=__version__, prog_name="emdunifrac")
def compute(
    tree: str,
    table: str,
    output: str,
    num_workers: int | None,
    chunk_size: int,
    log_level: str,
    log_file: str | None,
):
    """Fast unweighted UniFrac using EMDUniFrac."""
    setup_logging(log_level, log_file)
    try:
        validate_arguments(num_workers=num_workers, chunk_size=chunk_size)
        if num_workers is None:
            num_workers = mp.cpu_count()

        logger.info("Starting unweighted UniFrac computation")
        start_time = time.time()
        run(tree, table, output, num_workers=num_workers, chunk_size=chunk_size)
        logger.info(f"Done in {time.time() - start_time:.1f} seconds. Distance matrix saved to {output}")

    except Exception as e:
        logger.error(f"UniFrac computation failed: {e}")
        raise click.ClickException(str(e))
