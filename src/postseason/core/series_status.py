"""Series status resolution — derive a series' state from its win counts and games.

The data layer also stores a ``status`` on each series, but it can lag behind
or contradict the recorded results, so it is never used to decide anything.
Everything here is recomputed from ``team1_wins``/``team2_wins``, the entrant
slots, and the game collection.

Invariant violations (a "clinched" series whose clinching side never won a
recorded game, or both sides at the clinching count) are logged and the
series degrades to ``in_progress`` so the view keeps rendering.

Pure computation, no I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from postseason.models.bracket import Entrant, Series, SeriesState
from postseason.models.constants import ROUND_LABELS, SERIES_BEST_OF
from postseason.models.game import Game

logger = logging.getLogger(__name__)

GameCollection = Mapping[str, Game] | Iterable[Game]


@dataclass(frozen=True)
class SeriesStatus:
    """Derived view of a series for the series detail."""

    series_id: str
    state: SeriesState
    round_label: str
    games: tuple[Game, ...]
    placeholder_count: int
    team1_wins: int = 0
    team2_wins: int = 0
    winner: Entrant | None = None

    @property
    def is_completed(self) -> bool:
        return self.state == "completed"


def round_label(round_number: int) -> str:
    """Display name for a playoff round; unknown rounds fall back to "Round N"."""
    return ROUND_LABELS.get(round_number, f"Round {round_number}")


def clinching_wins(best_of: int = SERIES_BEST_OF) -> int:
    return best_of // 2 + 1


def index_games(games: GameCollection) -> Mapping[str, Game]:
    """Accept either a list of games or an id -> Game mapping."""
    if isinstance(games, Mapping):
        return games
    return {g.id: g for g in games}


def effective_series_games(series: Series, games: GameCollection) -> list[Game]:
    """The series' scheduled games that exist and were not cancelled, in order."""
    by_id = index_games(games)
    effective: list[Game] = []
    for game_id in series.games:
        game = by_id.get(game_id)
        if game is None or game.is_cancelled:
            continue
        effective.append(game)
    return effective


def next_game_in_series(series: Series, games: GameCollection) -> Game | None:
    """First effective game that has not been played yet."""
    for game in effective_series_games(series, games):
        if not game.is_complete:
            return game
    return None


def resolve_series_status(
    series: Series,
    games: GameCollection,
    *,
    best_of: int = SERIES_BEST_OF,
) -> SeriesStatus:
    """Derive the state of a series.

    Args:
        series: The series as stored in the bracket.
        games: The game collection (list or id -> Game mapping).
        best_of: Series length; the clinching count is ``best_of // 2 + 1``.

    Returns:
        SeriesStatus with state ``pending`` (an entrant slot is still empty),
        ``in_progress`` or ``completed``, the effective game list and the
        number of placeholder rows needed to fill ``best_of`` display slots.
    """
    effective = effective_series_games(series, games)
    state, winner = _derive_state(series, effective, clinching_wins(best_of))
    return SeriesStatus(
        series_id=series.series_id,
        state=state,
        round_label=round_label(series.round),
        games=tuple(effective),
        placeholder_count=max(0, best_of - len(effective)),
        team1_wins=series.team1_wins,
        team2_wins=series.team2_wins,
        winner=winner,
    )


def _derive_state(
    series: Series, effective: list[Game], clinch: int
) -> tuple[SeriesState, Entrant | None]:
    team1, team2 = series.team1, series.team2
    if team1 is None or team2 is None:
        return "pending", None

    t1, t2 = series.team1_wins, series.team2_wins
    if t1 >= clinch and t2 >= clinch:
        logger.warning(
            "series_invariant_violation series=%s both_sides_clinched=%d-%d",
            series.series_id,
            t1,
            t2,
        )
        return "in_progress", None

    if t1 >= clinch:
        clinched = team1
    elif t2 >= clinch:
        clinched = team2
    else:
        if series.status in ("complete", "completed"):
            logger.warning(
                "series_invariant_violation series=%s stored_status=%s record=%d-%d",
                series.series_id,
                series.status,
                t1,
                t2,
            )
        return "in_progress", None

    completed = [g for g in effective if g.is_complete]
    if completed:
        winners = {g.winner_team_id() for g in completed}
        if clinched.team_id not in winners:
            logger.warning(
                "series_invariant_violation series=%s clinched_by=%s without_recorded_win",
                series.series_id,
                clinched.team_id,
            )
            return "in_progress", None
        if t1 + t2 > len(completed):
            logger.warning(
                "series_wins_exceed_games series=%s record=%d-%d completed_games=%d",
                series.series_id,
                t1,
                t2,
                len(completed),
            )

    return "completed", clinched
