"""
CLI logger adapter.

Provides a simple logger that outputs to stdout/stderr for CLI commands.
"""

from __future__ import annotations

import sys


class CLILogger:
    """
    Logger implementation for CLI.

    Outputs messages to stderr with optional verbose mode, so stdout stays
    reserved for Chronicles output.
    """

    def __init__(self, verbose: bool = False) -> None:
        """
        Initialize CLI logger.

        Args:
            verbose: If True, show info messages. If False, only warnings.
        """
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Log info message (only if verbose)."""
        if self.verbose:
            print(f'[INFO] {message}', file=sys.stderr)

    def warning(self, message: str) -> None:
        """Log warning message."""
        print(f'[WARNING] {message}', file=sys.stderr)
