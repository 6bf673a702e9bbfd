"""Tests for the selection session (open series/game details)."""

from __future__ import annotations

from postseason.core.session import SelectionSession
from postseason.models.bracket import Bracket, Entrant, Series
from postseason.models.game import Game

BOS = Entrant(team_id="BOS", seed=1, name="Celtics", city="Boston")
LAL = Entrant(team_id="LAL", seed=1, name="Lakers", city="Los Angeles")


def _finals(team1_wins: int = 0, games: list[str] | None = None, **kwargs) -> Series:
    return Series(
        series_id="FINALS",
        round=4,
        team1=kwargs.get("team1", BOS),
        team2=kwargs.get("team2", LAL),
        team1_wins=team1_wins,
        games=games or [],
    )


def _win(game_id: str) -> Game:
    return Game(
        id=game_id,
        home_team_id="BOS",
        away_team_id="LAL",
        home_score=101,
        away_score=99,
        is_complete=True,
    )


class TestSeriesDetail:
    def test_open_in_progress_series(self) -> None:
        session = SelectionSession()
        assert session.open_series(_finals(), []) is True
        assert session.series_open
        assert session.series_status is not None
        assert session.series_status.state == "in_progress"

    def test_pending_series_cannot_open(self) -> None:
        session = SelectionSession()
        assert session.open_series(_finals(team2=None), []) is False
        assert not session.series_open

    def test_close_series(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        assert session.close_series() is True
        assert session.series is None
        assert session.series_status is None

    def test_close_rejected_while_simulating(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        session.simulating = True
        assert session.close_series() is False
        assert session.series_open


class TestRefreshSeries:
    def test_re_resolves_from_fresh_bracket(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])

        games = [_win(f"g{i}") for i in range(1, 5)]
        fresh = Bracket(finals=_finals(team1_wins=4, games=[g.id for g in games]))
        status = session.refresh_series(fresh, games)

        assert status is not None
        assert status.state == "completed"
        assert session.series is fresh.finals

    def test_vanished_series_closes_detail(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        assert session.refresh_series(Bracket(), []) is None
        assert not session.series_open

    def test_nothing_open(self) -> None:
        assert SelectionSession().refresh_series(Bracket(finals=_finals()), []) is None


class TestDismissal:
    def test_escape_closes_game_then_series(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        session.open_game("g1")

        assert session.handle_key("Escape") == "game"
        assert session.series_open
        assert session.handle_key("Escape") == "series"
        assert session.handle_key("Escape") is None

    def test_other_keys_ignored(self) -> None:
        session = SelectionSession()
        session.open_game("g1")
        assert session.handle_key("Enter") is None
        assert session.game_open

    def test_overlay_click(self) -> None:
        session = SelectionSession()
        session.open_game("g1")
        assert session.handle_overlay_click() == "game"
        assert not session.game_open

    def test_series_stays_open_while_simulating(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        session.simulating = True
        assert session.handle_key("Escape") is None
        assert session.series_open

    def test_close_game_without_open_game(self) -> None:
        assert SelectionSession().close_game() is False


class TestSimulationLifecycle:
    def test_begin_dismisses_everything(self) -> None:
        session = SelectionSession()
        session.open_series(_finals(), [])
        session.open_game("g1")

        session.begin_simulation()

        assert session.simulating
        assert not session.series_open
        assert not session.game_open

    def test_end_clears_flag(self) -> None:
        session = SelectionSession()
        session.begin_simulation()
        session.end_simulation()
        assert session.simulating is False
