"""Roster models: the user's players, their rotation minutes, and gate rejections."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from postseason.models.game import WireModel

RejectionKind = Literal["InjuredStarters", "InvalidMinutes"]


class RosterPlayer(WireModel):
    """A rostered player as far as lineup legality is concerned."""

    id: str
    name: str
    is_starter: bool = False
    is_injured: bool = False
    target_minutes: int = Field(default=0, ge=0)


class Roster(WireModel):
    """The user's team roster with its rotation plan."""

    team_id: str
    players: list[RosterPlayer] = Field(default_factory=list)

    @property
    def starters(self) -> list[RosterPlayer]:
        return [p for p in self.players if p.is_starter]

    @property
    def total_target_minutes(self) -> int:
        """Sum of rotation target minutes across the whole roster."""
        return sum(p.target_minutes for p in self.players)


class RosterRejection(BaseModel):
    """Why the roster gate refused a Play/Simulate action.

    Not an exception: the caller renders ``message`` inline and offers
    ``remediation`` as the follow-up action.
    """

    kind: RejectionKind
    message: str
    remediation: str
    injured_count: int = 0
    injured_names: str = ""
    total_minutes: int | None = None
