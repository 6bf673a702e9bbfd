"""Tests for per-game display status."""

from __future__ import annotations

import pytest

from postseason.core.game_status import next_user_game, resolve_game_status
from postseason.models.game import Game

USER = "BOS"


def _make_game(
    game_id: str = "g1",
    home: str = USER,
    away: str = "NYK",
    *,
    home_score: int | None = None,
    away_score: int | None = None,
    is_complete: bool = False,
    is_in_progress: bool = False,
    is_cancelled: bool = False,
) -> Game:
    return Game(
        id=game_id,
        home_team_id=home,
        away_team_id=away,
        home_score=home_score,
        away_score=away_score,
        is_complete=is_complete,
        is_in_progress=is_in_progress,
        is_cancelled=is_cancelled,
        is_user_game=USER in (home, away),
    )


class TestResolveGameStatus:
    def test_missing_game_is_tbd(self) -> None:
        view = resolve_game_status(None, user_team_id=USER)
        assert view.status == "tbd"
        assert view.result is None

    def test_complete_user_win(self) -> None:
        game = _make_game(home_score=110, away_score=101, is_complete=True)
        view = resolve_game_status(game, user_team_id=USER)
        assert view.status == "complete"
        assert view.result == "win"

    def test_complete_user_loss_as_away_team(self) -> None:
        game = _make_game(home="NYK", away=USER, home_score=99, away_score=95, is_complete=True)
        view = resolve_game_status(game, user_team_id=USER)
        assert view.result == "loss"

    def test_tie_counts_as_loss(self) -> None:
        game = _make_game(home_score=100, away_score=100, is_complete=True)
        assert resolve_game_status(game, user_team_id=USER).result == "loss"

    def test_complete_without_user_has_no_tag(self) -> None:
        game = _make_game(home="MIA", away="NYK", home_score=90, away_score=80, is_complete=True)
        view = resolve_game_status(game, user_team_id=USER)
        assert view.status == "complete"
        assert view.result is None

    def test_complete_without_scores_is_tbd(self) -> None:
        game = _make_game(is_complete=True)
        assert resolve_game_status(game, user_team_id=USER).status == "tbd"

    def test_in_progress_is_live(self) -> None:
        game = _make_game(is_in_progress=True)
        assert resolve_game_status(game, next_user_game_id="g1").status == "live"

    def test_next_user_game(self) -> None:
        game = _make_game()
        assert resolve_game_status(game, next_user_game_id="g1").status == "next"

    def test_other_game_is_upcoming(self) -> None:
        game = _make_game("g2")
        assert resolve_game_status(game, next_user_game_id="g1").status == "upcoming"
        assert resolve_game_status(game).status == "upcoming"

    def test_complete_wins_over_live_and_next(self) -> None:
        game = _make_game(home_score=1, away_score=0, is_complete=True, is_in_progress=True)
        view = resolve_game_status(game, user_team_id=USER, next_user_game_id="g1")
        assert view.status == "complete"

    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            ({}, "upcoming"),
            ({"is_in_progress": True}, "live"),
            ({"is_complete": True, "home_score": 3, "away_score": 1}, "complete"),
            ({"is_complete": True}, "tbd"),
        ],
    )
    def test_exactly_one_status(self, flags: dict, expected: str) -> None:
        view = resolve_game_status(_make_game(**flags), user_team_id=USER)
        assert view.status == expected
        if view.status != "complete":
            assert view.result is None


class TestNextUserGame:
    def test_first_unplayed_user_game(self) -> None:
        games = [
            _make_game("g1", home_score=100, away_score=90, is_complete=True),
            _make_game("g2", home="MIA", away="ATL"),
            _make_game("g3", is_cancelled=True),
            _make_game("g4"),
            _make_game("g5"),
        ]
        game = next_user_game(games, USER)
        assert game is not None
        assert game.id == "g4"

    def test_no_user_team(self) -> None:
        assert next_user_game([_make_game()], None) is None

    def test_all_played(self) -> None:
        games = [_make_game("g1", home_score=100, away_score=90, is_complete=True)]
        assert next_user_game(games, USER) is None

    def test_earliest_date_wins_over_list_order(self) -> None:
        games = [
            _make_game("g7").model_copy(update={"game_date": "2025-05-04"}),
            _make_game("g6").model_copy(update={"game_date": "2025-05-02"}),
            _make_game("g8"),
        ]
        game = next_user_game(games, USER)
        assert game is not None
        assert game.id == "g6"

    def test_undated_games_come_last(self) -> None:
        games = [_make_game("g1"), _make_game("g2").model_copy(update={"game_date": "2025-04-20"})]
        game = next_user_game(games, USER)
        assert game is not None
        assert game.id == "g2"
