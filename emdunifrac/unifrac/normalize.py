"""Presence/absence normalization of sample-by-taxon tables."""

import logging

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


def binarize_samples(table: pd.DataFrame) -> pd.DataFrame:
    """Convert abundances to presence/absence.

    Any value > 0 becomes 1.0; everything else, including NaN, becomes 0.0.

    Args:
        table: DataFrame of abundances [taxa x samples]

    Returns:
        New float64 DataFrame with the same labels
    """
    values = table.to_numpy(dtype=np.float64, na_value=0.0)
    presence = (values > 0).astype(np.float64)
    return pd.DataFrame(presence, index=table.index, columns=table.columns)


def normalize_samples(table: pd.DataFrame) -> pd.DataFrame:
    """Turn every sample column into a probability distribution over taxa.

    Values are binarized first, so only which taxa are present matters. Each
    column is then divided by its sum. A column with no present taxa stays
    all-zero.

    Args:
        table: DataFrame of abundances [taxa x samples]

    Returns:
        New DataFrame whose non-empty columns each sum to 1.0
    """
    presence = binarize_samples(table).to_numpy()
    sums = presence.sum(axis=0)
    normalized = np.divide(
        presence,
        sums,
        out=np.zeros_like(presence),
        where=sums > 0,
    )

    empty = int((sums == 0).sum())
    if empty:
        logger.info(f"{empty} sample(s) have no present taxa and keep an all-zero distribution")

    return pd.DataFrame(normalized, index=table.index, columns=table.columns)
