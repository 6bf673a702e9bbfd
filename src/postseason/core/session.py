"""Selection session: which series and which game detail are open.

Two independent slots: a series detail and a game detail (a game can be
opened from inside a series, or on its own). Rules:

- A series whose derived state is ``pending`` cannot be opened.
- The series detail cannot be closed by the user while a simulation is
  outstanding. The orchestrator itself dismisses everything when a
  simulation starts via ``begin_simulation()``.
- Escape and overlay clicks dismiss the top-most detail: the game first,
  then the series.

Closing a game detail is followed by a bracket/games refresh and a
re-resolve of the open series; that part is async and lives on
``SimulationOrchestrator.close_game_detail``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from postseason.core.bracket_index import find_series_in_bracket
from postseason.core.series_status import GameCollection, SeriesStatus, resolve_series_status
from postseason.models.bracket import Bracket, Series

logger = logging.getLogger(__name__)

DismissTarget = Literal["game", "series"]

DISMISS_KEYS = frozenset({"Escape", "Esc"})


@dataclass
class SelectionSession:
    """Transient UI-adjacent selection state for one user session."""

    series: Series | None = None
    series_status: SeriesStatus | None = None
    game_id: str | None = None
    simulating: bool = False

    @property
    def series_open(self) -> bool:
        return self.series is not None

    @property
    def game_open(self) -> bool:
        return self.game_id is not None

    # -- series detail ------------------------------------------------------

    def open_series(self, series: Series, games: GameCollection) -> bool:
        """Open the series detail. Returns False if there is nothing to show yet."""
        status = resolve_series_status(series, games)
        if status.state == "pending":
            logger.debug("open_series_rejected series=%s state=pending", series.series_id)
            return False
        self.series = series
        self.series_status = status
        return True

    def close_series(self) -> bool:
        """Close the series detail. Returns False while a simulation is outstanding."""
        if self.simulating:
            logger.debug("close_series_rejected series=%s simulating", self._series_id)
            return False
        self.series = None
        self.series_status = None
        return True

    def refresh_series(self, bracket: Bracket | None, games: GameCollection) -> SeriesStatus | None:
        """Re-resolve the open series from a freshly loaded bracket.

        If the series is no longer in the bracket the detail is closed.
        """
        if self.series is None:
            return None
        fresh = find_series_in_bracket(bracket, self.series.series_id)
        if fresh is None:
            logger.info("open_series_vanished series=%s", self.series.series_id)
            self.series = None
            self.series_status = None
            return None
        self.series = fresh
        self.series_status = resolve_series_status(fresh, games)
        return self.series_status

    # -- game detail --------------------------------------------------------

    def open_game(self, game_id: str) -> None:
        self.game_id = game_id

    def close_game(self) -> bool:
        """Close the game detail. Returns False if none was open."""
        if self.game_id is None:
            return False
        self.game_id = None
        return True

    # -- dismissal ----------------------------------------------------------

    def handle_key(self, key: str) -> DismissTarget | None:
        """Keyboard dismissal. Returns what was closed, if anything."""
        if key not in DISMISS_KEYS:
            return None
        return self._dismiss_top()

    def handle_overlay_click(self) -> DismissTarget | None:
        """Click on the backdrop outside the detail panel."""
        return self._dismiss_top()

    def _dismiss_top(self) -> DismissTarget | None:
        if self.close_game():
            return "game"
        if self.series is not None and self.close_series():
            return "series"
        return None

    # -- simulation lifecycle -------------------------------------------------

    def begin_simulation(self) -> None:
        """Mark a simulation outstanding and dismiss every open detail."""
        self.series = None
        self.series_status = None
        self.game_id = None
        self.simulating = True

    def end_simulation(self) -> None:
        self.simulating = False

    @property
    def _series_id(self) -> str | None:
        return self.series.series_id if self.series else None
