"""Project color keys and stable name-to-color hashing.

Purely cosmetic: the same project name always lands on the same palette slot,
so a project keeps its color across reports. Not part of report aggregation.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "DEFAULT_COLOR",
    "PROJECT_COLORS",
    "resolve_project_color",
    "stable_project_color",
    "stable_string_hash",
]

PROJECT_COLORS: tuple[str, ...] = (
    "slate",
    "blue",
    "emerald",
    "violet",
    "amber",
    "rose",
    "cyan",
    "lime",
    "fuchsia",
)

DEFAULT_COLOR = "slate"

# Badge palette order; slate last so it is the least likely hash target.
BADGE_PALETTE: tuple[str, ...] = (
    "blue",
    "emerald",
    "violet",
    "amber",
    "rose",
    "cyan",
    "lime",
    "fuchsia",
    "slate",
)

# Terminal styles used by the CLI table.
TERMINAL_STYLES: dict[str, str] = {
    "slate": "bright_black",
    "blue": "blue",
    "emerald": "green",
    "violet": "magenta",
    "amber": "yellow",
    "rose": "red",
    "cyan": "cyan",
    "lime": "bright_green",
    "fuchsia": "bright_magenta",
}


def stable_string_hash(value: str) -> int:
    """Rolling 31-multiplier hash over UTF-16 code units, modulo 2**32.

    Matches the web client's badge hashing, so colors agree between the
    browser and exported reports.
    """
    encoded = value.encode("utf-16-le")
    result = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        result = (result * 31 + code_unit) & 0xFFFFFFFF
    return result


def stable_project_color(name: str, palette: Sequence[str] = BADGE_PALETTE) -> str:
    """Pick a palette color for a project name."""
    return palette[stable_string_hash(name) % len(palette)]


def resolve_project_color(color: str | None, name: str | None = None) -> str:
    """Return a known color key.

    Uses the stored color when it is a known key, otherwise hashes the project
    name, otherwise falls back to :data:`DEFAULT_COLOR`.
    """
    if color in PROJECT_COLORS:
        return color  # type: ignore[return-value]
    if name:
        return stable_project_color(name)
    return DEFAULT_COLOR
