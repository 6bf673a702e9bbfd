"""Playoff simulation orchestrator — sequence simulate requests and keep views consistent.

One ``simulate()`` call runs a fixed pipeline:

    mutual-exclusion check -> roster gate -> dismiss open details
        -> ONE engine call -> five-way concurrent refresh -> champion check

Three escalating scopes:
    next_game      the next unplayed game of a given series
    rest_of_round  AI games until the user's next game or the round ends
    all_playoffs   AI games until the finals resolve or the user's game is due;
                   a single opaque engine request, treated as atomic

Shared state (bracket, games, campaign, roster, standings) lives in
``PlayoffState`` and is only ever written by the refresh step, after all
five reads have completed. Resolvers only read it.

The external data layer and engine are injected as ``PlayoffServices``;
see ``postseason.api.client.HttpPlayoffServices`` for the HTTP one.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal, Protocol

from postseason.core.bracket_index import (
    check_bracket_consistency,
    find_series_in_bracket,
    next_user_series,
)
from postseason.core.event_bus import (
    CHAMPION_CROWNED,
    SERIES_COMPLETED,
    SIMULATION_FINISHED,
    SIMULATION_STARTED,
    EventBus,
)
from postseason.core.game_status import next_user_game
from postseason.core.notifications import NotificationQueue
from postseason.core.roster_gate import roster_check_required, validate_roster
from postseason.core.series_status import next_game_in_series, resolve_series_status
from postseason.core.session import DismissTarget, SelectionSession
from postseason.models.bracket import Bracket
from postseason.models.campaign import Campaign, ChampionAnnouncement, SimulationResult
from postseason.models.game import Game
from postseason.models.roster import Roster, RosterRejection

logger = logging.getLogger(__name__)


class EngineFailure(Exception):
    """The simulation engine call failed or returned malformed data.

    Raised by ``PlayoffServices`` implementations. The engine is all-or-nothing:
    after this error no bracket or game data has changed.
    """


class SimulationScope(StrEnum):
    """Breadth of one simulate request."""

    NEXT_GAME = "next_game"
    REST_OF_ROUND = "rest_of_round"
    ALL_PLAYOFFS = "all_playoffs"


OutcomeStatus = Literal["completed", "skipped", "rejected", "failed"]


@dataclass
class SimulationOutcome:
    """What happened to one simulate() call."""

    scope: SimulationScope
    status: OutcomeStatus
    reason: str = ""
    rejection: RosterRejection | None = None
    result: SimulationResult | None = None
    champion: ChampionAnnouncement | None = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"


class PlayoffServices(Protocol):
    """External data layer and simulation engine."""

    async def fetch_bracket(self, campaign_id: str) -> Bracket | None: ...

    async def fetch_games(self, campaign_id: str, *, force: bool = False) -> list[Game]: ...

    async def fetch_campaign(self, campaign_id: str, *, force: bool = False) -> Campaign: ...

    async def fetch_roster(self, campaign_id: str, *, force: bool = False) -> Roster: ...

    async def fetch_standings(self, campaign_id: str, *, force: bool = False) -> Any: ...

    async def simulate_next_game(self, campaign_id: str) -> SimulationResult: ...

    async def simulate_to_next_round(self, campaign_id: str, *, sim_all: bool = False) -> None: ...


ChampionSink = Callable[[ChampionAnnouncement, str], Awaitable[None] | None]


@dataclass
class PlayoffState:
    """Process-wide views the resolvers read. Written only by refreshes."""

    bracket: Bracket | None = None
    games: list[Game] = field(default_factory=list)
    campaign: Campaign | None = None
    roster: Roster | None = None
    standings: Any = None

    @property
    def games_by_id(self) -> dict[str, Game]:
        return {g.id: g for g in self.games}

    @property
    def user_team_id(self) -> str | None:
        if self.campaign is not None:
            return self.campaign.user_team_id
        if self.roster is not None:
            return self.roster.team_id
        return None


class SimulationOrchestrator:
    """Runs simulate requests for one user session.

    Usage:
        orchestrator = SimulationOrchestrator(HttpPlayoffServices(settings))
        await orchestrator.refresh_all(campaign_id)
        outcome = await orchestrator.simulate("all_playoffs", campaign_id)
    """

    def __init__(
        self,
        services: PlayoffServices,
        state: PlayoffState | None = None,
        *,
        session: SelectionSession | None = None,
        event_bus: EventBus | None = None,
        notifications: NotificationQueue | None = None,
        champion_sink: ChampionSink | None = None,
    ) -> None:
        self.services = services
        self.state = state or PlayoffState()
        self.session = session or SelectionSession()
        self.event_bus = event_bus or EventBus()
        self.notifications = notifications or NotificationQueue(self.event_bus)
        self._champion_sink = champion_sink
        self._simulating = False
        self._announced: set[tuple[str, str, str]] = set()

    @property
    def is_simulating(self) -> bool:
        return self._simulating

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    async def simulate(
        self,
        scope: SimulationScope | str,
        campaign_id: str,
        *,
        series_id: str | None = None,
    ) -> SimulationOutcome:
        """Run one simulate request end to end.

        Args:
            scope: ``next_game``, ``rest_of_round`` or ``all_playoffs``.
            campaign_id: The campaign to simulate in.
            series_id: Required for ``next_game``: whose next game to play.

        Returns:
            A SimulationOutcome. Engine and refresh failures are reported as
            ``failed`` outcomes (with an error notification), not raised.

        Raises:
            ValueError: Unknown scope, or ``next_game`` without ``series_id``.
        """
        scope = SimulationScope(scope)
        if scope is SimulationScope.NEXT_GAME and series_id is None:
            raise ValueError("next_game simulation requires a series_id")

        if self._simulating:
            logger.info("simulation_skipped scope=%s campaign=%s reason=busy", scope, campaign_id)
            return SimulationOutcome(scope=scope, status="skipped", reason="busy")

        self._simulating = True
        try:
            outcome = await self._run(scope, campaign_id, series_id)
        finally:
            self._simulating = False
            self.session.end_simulation()

        if outcome.status in ("completed", "failed"):
            await self.event_bus.publish(
                SIMULATION_FINISHED,
                {"campaign_id": campaign_id, "scope": scope.value, "status": outcome.status},
            )
        await self.notifications.flush()
        return outcome

    async def _run(
        self, scope: SimulationScope, campaign_id: str, series_id: str | None
    ) -> SimulationOutcome:
        target: Game | None = None
        if scope is SimulationScope.NEXT_GAME:
            series = find_series_in_bracket(self.state.bracket, series_id or "")
            if series is None:
                return SimulationOutcome(scope=scope, status="skipped", reason="series_not_found")
            target = next_game_in_series(series, self.state.games_by_id)
            if target is None:
                return SimulationOutcome(scope=scope, status="skipped", reason="no_unplayed_games")

        rejection = await self._gate(scope, campaign_id, target)
        if rejection is not None:
            logger.info(
                "simulation_rejected scope=%s campaign=%s kind=%s",
                scope,
                campaign_id,
                rejection.kind,
            )
            return SimulationOutcome(
                scope=scope, status="rejected", reason=rejection.kind, rejection=rejection
            )

        finals_decided_before = self._finals_decided()
        self.session.begin_simulation()
        await self.event_bus.publish(
            SIMULATION_STARTED, {"campaign_id": campaign_id, "scope": scope.value}
        )
        logger.info("simulation_started scope=%s campaign=%s", scope, campaign_id)

        try:
            result = await self._call_engine(scope, campaign_id)
        except EngineFailure as exc:
            logger.warning(
                "simulation_failed scope=%s campaign=%s error=%s", scope, campaign_id, exc
            )
            self.notifications.error(str(exc) or "Simulation failed. Please try again.")
            return SimulationOutcome(scope=scope, status="failed", reason="engine_failure")
        except Exception:  # Last-resort handler: unexpected engine-side errors
            logger.exception("simulation_failed scope=%s campaign=%s", scope, campaign_id)
            self.notifications.error("Simulation failed. Please try again.")
            return SimulationOutcome(scope=scope, status="failed", reason="engine_failure")

        try:
            await self.refresh_all(campaign_id)
        except Exception:  # Last-resort handler: state is left as it was
            logger.exception(
                "post_simulation_refresh_failed scope=%s campaign=%s", scope, campaign_id
            )
            self.notifications.error("Simulation finished but playoff data could not be reloaded.")
            return SimulationOutcome(
                scope=scope, status="failed", reason="refresh_failure", result=result
            )

        outcome = SimulationOutcome(scope=scope, status="completed", result=result)
        await self._report_result(result, campaign_id)
        if scope is SimulationScope.ALL_PLAYOFFS and not finals_decided_before:
            outcome.champion = await self._announce_champion(campaign_id)

        logger.info("simulation_completed scope=%s campaign=%s", scope, campaign_id)
        return outcome

    async def _call_engine(
        self, scope: SimulationScope, campaign_id: str
    ) -> SimulationResult | None:
        if scope is SimulationScope.NEXT_GAME:
            return await self.services.simulate_next_game(campaign_id)
        await self.services.simulate_to_next_round(
            campaign_id, sim_all=scope is SimulationScope.ALL_PLAYOFFS
        )
        return None

    # ------------------------------------------------------------------
    # Roster gate
    # ------------------------------------------------------------------

    def validate_action(self, game: Game | None = None) -> RosterRejection | None:
        """Gate a Play action on the user's game against the loaded roster.

        Raises:
            ValueError: If no roster has been loaded yet.
        """
        if not roster_check_required(game):
            return None
        if self.state.roster is None:
            raise ValueError("Roster not loaded; call refresh_all() first")
        return validate_roster(self.state.roster)

    async def _gate(
        self, scope: SimulationScope, campaign_id: str, target: Game | None
    ) -> RosterRejection | None:
        if scope is SimulationScope.NEXT_GAME:
            if target is None or not self._is_user_game(target):
                return None
            if not roster_check_required(target):
                return None
        elif not self._user_has_open_series():
            return None
        elif not roster_check_required(next_user_game(self.state.games, self.state.user_team_id)):
            return None

        roster = self.state.roster
        if roster is None:
            roster = await self.services.fetch_roster(campaign_id, force=True)
        return validate_roster(roster)

    def _is_user_game(self, game: Game) -> bool:
        return game.is_user_game or game.involves(self.state.user_team_id)

    def _user_has_open_series(self) -> bool:
        return (
            next_user_series(self.state.bracket, self.state.games_by_id, self.state.user_team_id)
            is not None
        )

    def next_user_game_id(self) -> str | None:
        """Id of the user's next game, for the game status resolver."""
        game = next_user_game(self.state.games, self.state.user_team_id)
        return game.id if game else None

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_all(self, campaign_id: str) -> None:
        """Reload bracket, games, campaign, roster and standings together.

        The five reads run concurrently; state is written only once all
        five have succeeded.
        """
        bracket, games, campaign, roster, standings = await asyncio.gather(
            self.services.fetch_bracket(campaign_id),
            self.services.fetch_games(campaign_id, force=True),
            self.services.fetch_campaign(campaign_id, force=True),
            self.services.fetch_roster(campaign_id, force=True),
            self.services.fetch_standings(campaign_id, force=True),
        )
        self.state.bracket = bracket
        self.state.games = list(games)
        self.state.campaign = campaign
        self.state.roster = roster
        self.state.standings = standings
        self._after_refresh()

    async def refresh_bracket_and_games(self, campaign_id: str) -> None:
        """Narrow refresh used when a game detail closes."""
        bracket, games = await asyncio.gather(
            self.services.fetch_bracket(campaign_id),
            self.services.fetch_games(campaign_id, force=True),
        )
        self.state.bracket = bracket
        self.state.games = list(games)
        self._after_refresh()

    def _after_refresh(self) -> None:
        by_id = self.state.games_by_id
        check_bracket_consistency(self.state.bracket, by_id)
        self.session.refresh_series(self.state.bracket, by_id)

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    async def close_game_detail(self, campaign_id: str) -> bool:
        """Close the game detail, then refresh bracket + games."""
        if not self.session.close_game():
            return False
        await self._after_game_closed(campaign_id)
        return True

    async def dismiss(self, campaign_id: str, key: str | None = None) -> DismissTarget | None:
        """Escape key (``key``) or overlay click (no key) on the open details."""
        if key is None:
            closed = self.session.handle_overlay_click()
        else:
            closed = self.session.handle_key(key)
        if closed == "game":
            await self._after_game_closed(campaign_id)
        return closed

    async def _after_game_closed(self, campaign_id: str) -> None:
        # While simulating, only the simulation's own refresh writes state.
        if self._simulating:
            return
        await self.refresh_bracket_and_games(campaign_id)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def _report_result(self, result: SimulationResult | None, campaign_id: str) -> None:
        if result is None:
            return

        if result.user_game_result is not None:
            game = result.user_game_result
            verdict = "Won" if game.user_won else "Lost"
            if game.is_user_home:
                score = f"{game.home_score}-{game.away_score}"
            else:
                score = f"{game.away_score}-{game.home_score}"
            self.notifications.info(f"{verdict} {score}")

        if result.upgrade_points_awarded:
            points = result.upgrade_points_awarded
            self.notifications.award(f"+{points} upgrade point{'s' if points != 1 else ''}")

        update = result.playoff_update
        if update is not None and update.series_complete and update.winner is not None:
            self.notifications.success(f"{update.winner.display_name} win the series")
            await self.event_bus.publish(
                SERIES_COMPLETED,
                {
                    "campaign_id": campaign_id,
                    "series_id": update.series_id,
                    "winner_team_id": update.winner.team_id,
                },
            )

    def _finals_decided(self) -> bool:
        bracket = self.state.bracket
        if bracket is None or bracket.finals is None:
            return False
        return resolve_series_status(bracket.finals, self.state.games_by_id).is_completed

    async def _announce_champion(self, campaign_id: str) -> ChampionAnnouncement | None:
        """Announce a champion crowned by this simulation, at most once per title."""
        bracket = self.state.bracket
        if bracket is None or bracket.finals is None:
            return None
        finals = bracket.finals
        status = resolve_series_status(finals, self.state.games_by_id)
        if not status.is_completed or status.winner is None:
            return None

        key = (campaign_id, finals.series_id, status.winner.team_id)
        if key in self._announced:
            return None
        self._announced.add(key)

        announcement = ChampionAnnouncement(
            series_id=finals.series_id,
            team_id=status.winner.team_id,
            team_name=status.winner.display_name,
            date=self.state.campaign.current_date if self.state.campaign else "",
        )
        logger.info(
            "champion_crowned campaign=%s team=%s (%s)",
            campaign_id,
            announcement.team_id,
            announcement.team_name,
        )
        await self.event_bus.publish(
            CHAMPION_CROWNED, {"campaign_id": campaign_id, **announcement.model_dump()}
        )
        if self._champion_sink is not None:
            try:
                ret = self._champion_sink(announcement, campaign_id)
                if inspect.isawaitable(ret):
                    await ret
            except Exception:  # Fire-and-forget sink
                logger.exception("champion_sink_failed campaign=%s", campaign_id)
        return announcement
