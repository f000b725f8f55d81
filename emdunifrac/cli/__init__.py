"""Command-line interface for emdunifrac."""

from emdunifrac.cli.utils import setup_logging, validate_arguments
from emdunifrac.cli.compute import compute, run

cli = compute


def main():
    """Main entry point for CLI."""
    cli()


__all__ = [
    "cli",
    "compute",
    "main",
    "run",
    "setup_logging",
    "validate_arguments",
]
