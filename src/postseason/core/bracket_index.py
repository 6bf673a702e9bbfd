"""Bracket traversal: find series by id and walk the tree in display order.

Search/display order is fixed: for each conference (east, then west) the
first round, the second round, the conference finals; then the finals.
Every function tolerates a bracket that is not populated yet (None
bracket, missing conference, empty later rounds).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from postseason.core.series_status import GameCollection, index_games, resolve_series_status
from postseason.models.bracket import Bracket, Entrant, Series
from postseason.models.constants import CONFERENCES

logger = logging.getLogger(__name__)


def iter_bracket_series(bracket: Bracket | None) -> Iterator[Series]:
    """Yield every series in search order."""
    if bracket is None:
        return
    for name in CONFERENCES:
        conf = bracket.conference(name)
        if conf is None:
            continue
        yield from conf.round1
        yield from conf.round2
        if conf.conf_finals is not None:
            yield conf.conf_finals
    if bracket.finals is not None:
        yield bracket.finals


def find_series_in_bracket(bracket: Bracket | None, series_id: str) -> Series | None:
    """Return the series with ``series_id``, or None if it is not in the bracket."""
    for series in iter_bracket_series(bracket):
        if series.series_id == series_id:
            return series
    return None


def series_for_round(bracket: Bracket | None, round_number: int) -> list[Series]:
    """All series of one round across both conferences (round 4 is the finals)."""
    if bracket is None:
        return []
    if round_number == 4:
        return [bracket.finals] if bracket.finals is not None else []
    found: list[Series] = []
    for name in CONFERENCES:
        conf = bracket.conference(name)
        if conf is None:
            continue
        if round_number == 1:
            found.extend(conf.round1)
        elif round_number == 2:
            found.extend(conf.round2)
        elif round_number == 3 and conf.conf_finals is not None:
            found.append(conf.conf_finals)
    return found


def next_user_series(
    bracket: Bracket | None, games: GameCollection, user_team_id: str | None
) -> Series | None:
    """First series involving the user's team that has not been decided yet."""
    if user_team_id is None:
        return None
    by_id = index_games(games)
    for series in iter_bracket_series(bracket):
        if series.entrant_for(user_team_id) is None:
            continue
        if resolve_series_status(series, by_id).state != "completed":
            return series
    return None


def bracket_champion(bracket: Bracket | None, games: GameCollection) -> Entrant | None:
    """Winner of the finals once the finals are derived as completed."""
    if bracket is None or bracket.finals is None:
        return None
    return resolve_series_status(bracket.finals, games).winner


# Round-2 slot -> the two round-1 series (by index) that feed it.
_ROUND2_FEEDERS: tuple[tuple[int, int], ...] = ((0, 1), (3, 2))


def check_bracket_consistency(bracket: Bracket | None, games: GameCollection) -> list[str]:
    """Verify later-round entrants are exactly the winners of the feeding series.

    Only checks slots whose feeders are completed and which already have
    entrants. Returns the violations found (each is also logged).
    """
    if bracket is None:
        return []
    by_id = index_games(games)
    problems: list[str] = []

    def winner_id(series: Series | None) -> str | None:
        if series is None:
            return None
        winner = resolve_series_status(series, by_id).winner
        return winner.team_id if winner else None

    def check(target: Series | None, feeders: list[Series | None]) -> None:
        if target is None or not target.has_entrants:
            return
        expected = {winner_id(f) for f in feeders}
        if None in expected:
            return
        actual = {target.team1.team_id, target.team2.team_id}  # type: ignore[union-attr]
        if actual != expected:
            problems.append(
                f"{target.series_id}: entrants {sorted(actual)} != "
                f"feeder winners {sorted(expected)}"  # type: ignore[type-var]
            )

    conf_champions: list[Series | None] = []
    for name in CONFERENCES:
        conf = bracket.conference(name)
        if conf is None:
            conf_champions.append(None)
            continue
        for slot, (a, b) in enumerate(_ROUND2_FEEDERS):
            if slot >= len(conf.round2) or max(a, b) >= len(conf.round1):
                continue
            check(conf.round2[slot], [conf.round1[a], conf.round1[b]])
        if len(conf.round2) >= 2:
            check(conf.conf_finals, [conf.round2[0], conf.round2[1]])
        conf_champions.append(conf.conf_finals)

    check(bracket.finals, conf_champions)

    for problem in problems:
        logger.warning("bracket_invariant_violation %s", problem)
    return problems
