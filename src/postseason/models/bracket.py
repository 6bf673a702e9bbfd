"""Bracket models: entrants, best-of-seven series, and the two-conference tree.

``Series.status`` and ``Series.winner`` mirror whatever the data layer stored
and are never trusted for decisions; see ``core/series_status.py`` for the
derived state.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from postseason.models.game import WireModel

SeriesState = Literal["pending", "in_progress", "completed"]


class Entrant(WireModel):
    """A team occupying one side of a series."""

    team_id: str
    seed: int
    name: str
    city: str = ""
    abbreviation: str = ""
    primary_color: str = "#6B7280"
    wins: int = 0
    losses: int = 0

    @property
    def display_name(self) -> str:
        return f"{self.city} {self.name}".strip() if self.city else self.name


class SeriesMVP(WireModel):
    """Best performer of a completed series, with per-game averages."""

    player_id: str | int
    name: str
    team_id: str = ""
    ppg: float = 0.0
    rpg: float = 0.0
    apg: float = 0.0

    @property
    def stat_line(self) -> str:
        return f"{self.ppg:.1f} PPG, {self.rpg:.1f} RPG, {self.apg:.1f} APG"


class Series(WireModel):
    """A best-of-seven matchup within one playoff round."""

    series_id: str
    conference: str = ""
    round: int = 1
    team1: Entrant | None = None
    team2: Entrant | None = None
    team1_wins: int = 0
    team2_wins: int = 0
    games: list[str] = Field(default_factory=list)
    # Stored by the data layer; informational only.
    status: str = "pending"
    winner: Entrant | None = None
    series_mvp: SeriesMVP | None = Field(default=None, alias="seriesMVP")

    @property
    def has_entrants(self) -> bool:
        return self.team1 is not None and self.team2 is not None

    def entrant_for(self, team_id: str) -> Entrant | None:
        for entrant in (self.team1, self.team2):
            if entrant is not None and entrant.team_id == team_id:
                return entrant
        return None


class ConferenceBracket(WireModel):
    """One conference's side of the tree: 4 first-round, 2 second-round, 1 final."""

    round1: list[Series] = Field(default_factory=list)
    round2: list[Series] = Field(default_factory=list)
    conf_finals: Series | None = None


class Bracket(WireModel):
    """Both conference trees plus the cross-conference finals node."""

    east: ConferenceBracket | None = None
    west: ConferenceBracket | None = None
    finals: Series | None = None
    finals_mvp: SeriesMVP | None = Field(default=None, alias="finalsMVP")

    def conference(self, name: str) -> ConferenceBracket | None:
        if name == "east":
            return self.east
        if name == "west":
            return self.west
        return None
