"""Game models: scheduled playoff contests and their derived display status.

Wire payloads use camelCase keys (``homeTeamId``, ``isComplete``); models
accept either spelling and always dump snake_case unless ``by_alias=True``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

GameStatus = Literal["tbd", "complete", "live", "next", "upcoming"]
GameResultTag = Literal["win", "loss"]


class WireModel(BaseModel):
    """Base for models parsed from the campaign API's camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Game(WireModel):
    """A single scheduled contest.

    ``home_score``/``away_score`` are only meaningful once ``is_complete``.
    A cancelled game (an unneeded game 5-7 of a series) is never complete.
    """

    id: str
    game_date: str | None = None
    home_team_id: str
    away_team_id: str
    home_team_abbreviation: str = ""
    away_team_abbreviation: str = ""
    is_complete: bool = False
    is_cancelled: bool = False
    is_in_progress: bool = False
    home_score: int | None = None
    away_score: int | None = None
    is_user_game: bool = False
    is_playoff: bool = True
    playoff_series_id: str | None = None
    playoff_game_number: int | None = None

    @property
    def has_scores(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    def involves(self, team_id: str | None) -> bool:
        """True if ``team_id`` is one of the two participants."""
        if team_id is None:
            return False
        return team_id in (self.home_team_id, self.away_team_id)

    def winner_team_id(self) -> str | None:
        """Team id of the winner, or None if the game has no final score."""
        if not self.is_complete or not self.has_scores:
            return None
        if self.home_score > self.away_score:  # type: ignore[operator]
            return self.home_team_id
        if self.away_score > self.home_score:  # type: ignore[operator]
            return self.away_team_id
        return None


class GameStatusView(BaseModel):
    """Display classification of a game for the current viewer."""

    status: GameStatus
    result: GameResultTag | None = None
