"""Shared constants for postseason models.

Placed here so both the resolvers (core/) and the HTTP adapter (api/) can
import them without creating a layer violation.
"""

from __future__ import annotations

SERIES_BEST_OF = 7
CLINCHING_WINS = SERIES_BEST_OF // 2 + 1

# Rotation target minutes must add up to exactly this: 5 court slots x 40-minute game.
REGULATION_MINUTES = 200

CONFERENCES: tuple[str, ...] = ("east", "west")

ROUND_LABELS: dict[int, str] = {
    1: "First Round",
    2: "Semifinals",
    3: "Conference Finals",
    4: "NBA Finals",
}
