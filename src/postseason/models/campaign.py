"""Campaign record and simulation-engine result payloads."""

from __future__ import annotations

from pydantic import BaseModel

from postseason.models.bracket import Entrant, Series
from postseason.models.game import WireModel


class Campaign(WireModel):
    """The season record refreshed after every simulation."""

    id: str
    user_team_id: str
    current_date: str = ""
    season_year: int | None = None


class PlayoffUpdate(WireModel):
    """Series change reported by the engine after a playoff game.

    ``is_champion`` is only set when the finals were clinched by the game.
    """

    series_id: str
    series: Series | None = None
    series_complete: bool = False
    round: int | None = None
    winner: Entrant | None = None
    is_conference_finals: bool = False
    is_finals: bool = False
    is_champion: bool = False


class UserGameResult(WireModel):
    """Final score of the user's game when the engine played it."""

    game_id: str
    home_score: int
    away_score: int
    is_user_home: bool = False

    @property
    def user_won(self) -> bool:
        if self.is_user_home:
            return self.home_score > self.away_score
        return self.away_score > self.home_score


class SimulationResult(WireModel):
    """Response of the simulate-next-game engine call. Every part is optional."""

    user_game_result: UserGameResult | None = None
    upgrade_points_awarded: int | None = None
    playoff_update: PlayoffUpdate | None = None


class ChampionAnnouncement(BaseModel):
    """One-shot event raised when the finals resolve."""

    series_id: str
    team_id: str
    team_name: str
    date: str
