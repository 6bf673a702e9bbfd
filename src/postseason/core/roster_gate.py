"""Roster legality gate, run before any Play or Simulate action.

Two checks, in order: no injured starters, then rotation minutes summing to
exactly ``REGULATION_MINUTES``. Failures come back as a ``RosterRejection``
value rather than an exception; the UI shows the message inline with a
link to lineup management.
"""

from __future__ import annotations

from postseason.models.constants import REGULATION_MINUTES
from postseason.models.game import Game
from postseason.models.roster import Roster, RosterRejection

INJURED_STARTERS_REMEDIATION = "Go to Lineup Management and replace injured starters."
INVALID_MINUTES_REMEDIATION = (
    f"Go to Lineup Management and set rotation minutes to total exactly {REGULATION_MINUTES}."
)


def validate_roster(roster: Roster) -> RosterRejection | None:
    """Return None if the roster may take the court, else the first rejection."""
    injured = [p for p in roster.starters if p.is_injured]
    if injured:
        count = len(injured)
        names = ", ".join(p.name for p in injured)
        noun = "starter" if count == 1 else "starters"
        return RosterRejection(
            kind="InjuredStarters",
            message=f"You have {count} injured {noun} in your lineup: {names}.",
            remediation=INJURED_STARTERS_REMEDIATION,
            injured_count=count,
            injured_names=names,
        )

    total = roster.total_target_minutes
    if total != REGULATION_MINUTES:
        return RosterRejection(
            kind="InvalidMinutes",
            message=(
                f"Rotation minutes total {total}; they must add up to "
                f"exactly {REGULATION_MINUTES}."
            ),
            remediation=INVALID_MINUTES_REMEDIATION,
            total_minutes=total,
        )

    return None


def roster_check_required(game: Game | None) -> bool:
    """False only when resuming the user's game that is already under way.

    An in-progress game was validated when it started.
    """
    if game is None:
        return True
    return not (game.is_user_game and game.is_in_progress)
