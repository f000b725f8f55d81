"""Distance matrix output."""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd
from skbio import DistanceMatrix


logger = logging.getLogger(__name__)

ROW_LABEL = "Sample"
FLOAT_FORMAT = "%.6f"


def matrix_to_frame(distances: DistanceMatrix) -> pd.DataFrame:
    """Return the matrix as a DataFrame labelled by sample id on both axes."""
    df = distances.to_data_frame()
    df.index.name = ROW_LABEL
    return df


def format_matrix(distances: DistanceMatrix, output_path: Optional[str] = None) -> Optional[str]:
    """Render a distance matrix as tab-delimited text.

    The header row is ``Sample`` followed by the sample ids; each following
    row is a sample id followed by its distances, formatted to 6 decimals.
    Returns the text when ``output_path`` is None, otherwise writes it there.
    """
    return matrix_to_frame(distances).to_csv(
        output_path, sep="\t", float_format=FLOAT_FORMAT, lineterminator="\n"
    )


def write_matrix(distances: DistanceMatrix, output_path: str) -> None:
    """Write a distance matrix to ``output_path``, creating parent directories.

    Args:
        distances: Distance matrix to write
        output_path: Destination file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    format_matrix(distances, str(path))
    logger.info(f"Distance matrix ({distances.shape[0]} samples) written to {output_path}")
