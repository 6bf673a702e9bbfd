"""Game status resolution — what a single game row shows to the viewing user.

Pure functions, no I/O. Status is derived from the game's flags on every
call; there is no stored "display status" anywhere.

Precedence when several flags could apply: complete > live > next > upcoming.
"""

from __future__ import annotations

from collections.abc import Iterable

from postseason.models.game import Game, GameResultTag, GameStatusView

_TBD = GameStatusView(status="tbd")


def resolve_game_status(
    game: Game | None,
    *,
    user_team_id: str | None = None,
    next_user_game_id: str | None = None,
) -> GameStatusView:
    """Classify a game for display.

    Args:
        game: The game, or None for an unscheduled placeholder slot.
        user_team_id: The viewing user's team, used for the win/loss tag.
        next_user_game_id: Id of the user's next game to play.

    Returns:
        A GameStatusView. ``result`` is only set for completed games the
        user's team took part in.
    """
    if game is None:
        return _TBD

    if game.is_complete:
        if not game.has_scores:
            # Malformed: flagged complete with no final score.
            return _TBD
        return GameStatusView(status="complete", result=_user_result(game, user_team_id))

    if game.is_in_progress:
        return GameStatusView(status="live")

    if next_user_game_id is not None and game.id == next_user_game_id:
        return GameStatusView(status="next")

    return GameStatusView(status="upcoming")


def _user_result(game: Game, user_team_id: str | None) -> GameResultTag | None:
    if user_team_id == game.home_team_id:
        user_score, other_score = game.home_score, game.away_score
    elif user_team_id == game.away_team_id:
        user_score, other_score = game.away_score, game.home_score
    else:
        return None
    return "win" if user_score > other_score else "loss"  # type: ignore[operator]


def next_user_game(games: Iterable[Game], user_team_id: str | None) -> Game | None:
    """First game the user still has to play, by game date.

    Undated games sort last and keep their relative order.
    """
    if user_team_id is None:
        return None
    for game in sorted(games, key=lambda g: (g.game_date is None, g.game_date or "")):
        if game.is_complete or game.is_cancelled:
            continue
        if game.involves(user_team_id):
            return game
    return None
