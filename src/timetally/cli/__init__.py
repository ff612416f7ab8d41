"""timetally command line interface."""

from .cli_common import CLIContext, ExitCode

__all__ = ["CLIContext", "ExitCode"]
