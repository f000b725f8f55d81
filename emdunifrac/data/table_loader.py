"""Sample-by-taxon table loading."""

from pathlib import Path
import logging

import biom
import numpy as np
import pandas as pd

from emdunifrac.exceptions import InputFormatError


logger = logging.getLogger(__name__)


def read_sample_table(table_path: str) -> pd.DataFrame:
    """Read a whitespace-delimited sample-by-taxon table.

    The first line is a header whose first token is ignored; the remaining
    tokens are sample names. Every following line is a taxon name followed by
    one abundance per sample. Cells that do not parse as numbers become 0.0.

    Args:
        table_path: Path to text table

    Returns:
        DataFrame [taxa x samples] with taxa as index, samples as columns

    Raises:
        InputFormatError: If the file can't be read or decoded, has no header
                          or no samples, repeats a sample name, has a line
                          without a taxon, or has a row with the wrong number
                          of values
    """
    try:
        raw = pd.read_csv(
            table_path,
            sep=r"\s+",
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError as e:
        raise InputFormatError("No header in table", context={"file_path": table_path}) from e
    except pd.errors.ParserError as e:
        raise InputFormatError(
            "Row has more values than the header names samples",
            context={"file_path": table_path, "error": str(e)},
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputFormatError(
            "Error reading table file", context={"file_path": table_path, "error": str(e)}
        ) from e

    # Short rows are padded by the parser; row k of ``raw`` is line k + 1.
    missing = raw.isna() | raw.eq("")

    if missing.iat[0, 0]:
        raise InputFormatError("No header in table", context={"file_path": table_path, "line": 1})
    header = raw.iloc[0]
    sample_names = list(header.iloc[1:])
    if not sample_names:
        raise InputFormatError("Table header has no sample names", context={"file_path": table_path, "line": 1})
    duplicates = sorted({s for s in sample_names if sample_names.count(s) > 1})
    if duplicates:
        raise InputFormatError(
            "Duplicate sample names in table header",
            context={"file_path": table_path, "line": 1, "samples": duplicates},
        )

    body = raw.iloc[1:]
    body_missing = missing.iloc[1:]
    line_numbers = np.arange(2, len(body) + 2)

    taxon_missing = body_missing.iloc[:, 0].to_numpy()
    if taxon_missing.any():
        raise InputFormatError(
            "Taxon missing in a line",
            context={"file_path": table_path, "line": int(line_numbers[taxon_missing.argmax()])},
        )
    n_values = (~body_missing.iloc[:, 1:]).sum(axis=1).to_numpy()
    short = n_values != len(sample_names)
    if short.any():
        k = int(short.argmax())
        raise InputFormatError(
            f"Row has {n_values[k]} values but header names {len(sample_names)} samples",
            context={"file_path": table_path, "line": int(line_numbers[k]), "taxon": body.iat[k, 0]},
        )

    values = body.iloc[:, 1:].apply(pd.to_numeric, errors="coerce").astype(np.float64)
    n_coerced = int(values.isna().sum().sum())
    if n_coerced:
        logger.debug(f"{n_coerced} unparsable abundances treated as 0.0")

    return pd.DataFrame(
        values.fillna(0.0).to_numpy(),
        index=pd.Index(body.iloc[:, 0].tolist(), name="taxon"),
        columns=sample_names,
    )


def read_biom_table(table_path: str) -> pd.DataFrame:
    """Read a BIOM table into a [taxa x samples] DataFrame.

    Raises:
        InputFormatError: If the file cannot be read as a BIOM table
    """
    try:
        table = biom.load_table(table_path)
    except Exception as e:
        raise InputFormatError(
            "Error loading BIOM table", context={"file_path": table_path, "error": str(e)}
        ) from e
    if len(table.ids(axis="sample")) == 0:
        raise InputFormatError("BIOM table has no samples", context={"file_path": table_path})
    df = table.to_dataframe(dense=True).astype(np.float64)
    df.index.name = "taxon"
    return df


def load_table(table_path: str) -> pd.DataFrame:
    """Load a sample-by-taxon table, dispatching on the file suffix.

    Files ending in ``.biom`` are read with the biom-format library; anything
    else is read as whitespace-delimited text.

    Args:
        table_path: Path to table file

    Returns:
        DataFrame [taxa x samples]

    Raises:
        InputFormatError: If the file is missing or malformed
    """
    path = Path(table_path)
    if not path.is_file():
        raise InputFormatError("Table file not found", context={"file_path": table_path})

    logger.info(f"Loading table from {table_path}")
    if path.suffix == ".biom":
        table = read_biom_table(str(path))
    else:
        table = read_sample_table(str(path))

    logger.info(f"Table loaded ({table.shape[0]} taxa x {table.shape[1]} samples)")
    return table
