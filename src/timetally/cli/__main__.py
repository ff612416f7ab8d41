"""timetally command line entry point."""

from __future__ import annotations

import sys

import click

from .durations import duration_command, timer_command
from .report import range_command, report_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  timetally report --period week --entries entries.json
  timetally report --date 2025-10-08 --period month --tz Europe/Brussels --csv
  timetally report --filter design --csv=- > design.csv
  timetally range --date 2025-01-31 --period month
  timetally timer --start 2025-10-08T09:00:00Z --end 2025-10-08T10:29:30Z
  timetally duration 01:30
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="timetally - day, week and month reports over tracked time",
    epilog=EPILOG,
)
def cli() -> None:
    """Root command."""


cli.add_command(report_command)
cli.add_command(range_command)
cli.add_command(timer_command)
cli.add_command(duration_command)


def main(args: list[str] | None = None) -> int:
    """Main entry point; returns the command's exit code."""
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), prog_name="timetally", standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
