"""Utility functions for the emdunifrac CLI."""

import logging
from pathlib import Path
from typing import Optional


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Setup logging to console and, optionally, a file.

    Python warnings (such as UnmatchedTaxonWarning) are routed through logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a log file to append to
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)


def validate_arguments(**kwargs):
    """Validate CLI arguments.

    Args:
        **kwargs: Arguments to validate

    Raises:
        ValueError: If validation fails
    """
    num_workers = kwargs.get("num_workers")
    if num_workers is not None and num_workers <= 0:
        raise ValueError(f"num_workers must be positive, got {num_workers}")

    chunk_size = kwargs.get("chunk_size")
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
