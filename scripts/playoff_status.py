"""Inspect and advance a campaign's playoffs from the command line.

Usage:
    python scripts/playoff_status.py CAMPAIGN_ID status           # Print the bracket
    python scripts/playoff_status.py CAMPAIGN_ID series SERIES_ID # Print one series
    python scripts/playoff_status.py CAMPAIGN_ID sim SCOPE [SERIES_ID]
        SCOPE is next_game (needs SERIES_ID), rest_of_round or all_playoffs

Reads POSTSEASON_API_BASE_URL / POSTSEASON_API_TOKEN from the environment or .env.
"""

from __future__ import annotations

import asyncio
import sys

from postseason.api.client import HttpPlayoffServices
from postseason.config import Settings, configure_logging
from postseason.core.bracket_index import find_series_in_bracket, iter_bracket_series
from postseason.core.event_bus import EventBus
from postseason.core.game_status import resolve_game_status
from postseason.core.notifications import NotificationQueue
from postseason.core.orchestrator import SimulationOrchestrator
from postseason.core.series_status import resolve_series_status
from postseason.models.bracket import Entrant, Series
from postseason.models.campaign import ChampionAnnouncement


def _matchup(series: Series) -> str:
    def side(entrant: Entrant | None, wins: int) -> str:
        if entrant is None:
            return "TBD"
        return f"({entrant.seed}) {entrant.display_name} {wins}"

    return f"{side(series.team1, series.team1_wins)} vs {side(series.team2, series.team2_wins)}"


def _announce(event: ChampionAnnouncement, campaign_id: str) -> None:
    print(f"\n*** {event.team_name} are champions! ({event.date}) ***\n")


async def print_status(orch: SimulationOrchestrator) -> None:
    games = orch.state.games_by_id
    if orch.state.bracket is None:
        print("No playoff bracket yet.")
        return
    for series in iter_bracket_series(orch.state.bracket):
        resolved = resolve_series_status(series, games)
        label = f"{series.series_id:<10} {resolved.round_label:<18} {resolved.state:<12}"
        print(f"{label} {_matchup(series)}")
    finals_mvp = orch.state.bracket.finals_mvp
    if finals_mvp is not None:
        print(f"Finals MVP: {finals_mvp.name} ({finals_mvp.stat_line})")


async def show_series(orch: SimulationOrchestrator, series_id: str) -> None:
    series = find_series_in_bracket(orch.state.bracket, series_id)
    if series is None:
        print(f"No series {series_id}")
        return
    resolved = resolve_series_status(series, orch.state.games_by_id)
    print(f"{resolved.round_label}: {_matchup(series)} [{resolved.state}]")
    next_id = orch.next_user_game_id()
    for n, game in enumerate(resolved.games, start=1):
        view = resolve_game_status(
            game, user_team_id=orch.state.user_team_id, next_user_game_id=next_id
        )
        score = f"{game.away_score}-{game.home_score}" if view.status == "complete" else "-"
        tag = f" {view.result.upper()}" if view.result else ""
        print(f"  Game {n}: {game.game_date or 'TBD':<10} {view.status:<9} {score}{tag}")
    for n in range(len(resolved.games) + 1, len(resolved.games) + resolved.placeholder_count + 1):
        print(f"  Game {n}: {'TBD':<10} tbd")
    if series.series_mvp is not None:
        print(f"Series MVP: {series.series_mvp.name} ({series.series_mvp.stat_line})")


async def sim(
    orch: SimulationOrchestrator, campaign_id: str, scope: str, series_id: str | None
) -> None:
    outcome = await orch.simulate(scope, campaign_id, series_id=series_id)
    print(f"{outcome.scope}: {outcome.status} {outcome.reason}".rstrip())
    if outcome.rejection is not None:
        print(f"  {outcome.rejection.message}")
        print(f"  {outcome.rejection.remediation}")
    for note in orch.notifications.shown:
        print(f"  [{note.kind}] {note.message}")


async def run(argv: list[str]) -> int:
    settings = Settings()
    configure_logging(settings)
    campaign_id, command = argv[0], argv[1]

    async with HttpPlayoffServices(settings) as services:
        bus = EventBus()
        notifications = NotificationQueue(
            bus, stagger_seconds=settings.postseason_notification_stagger_seconds
        )
        orch = SimulationOrchestrator(
            services, event_bus=bus, notifications=notifications, champion_sink=_announce
        )
        await orch.refresh_all(campaign_id)
        if command == "status":
            await print_status(orch)
        elif command == "series" and len(argv) > 2:
            await show_series(orch, argv[2])
        elif command == "sim" and len(argv) > 2:
            await sim(orch, campaign_id, argv[2], argv[3] if len(argv) > 3 else None)
            await print_status(orch)
        else:
            print(__doc__)
            return 1
    return 0


def main() -> None:
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    sys.exit(asyncio.run(run(sys.argv[1:])))


if __name__ == "__main__":
    main()
