"""HTTP implementation of ``PlayoffServices`` against the campaign REST API.

All reads go through one ``httpx.AsyncClient``. ``force=True`` asks
intermediaries for a fresh copy (``Cache-Control: no-cache``). Any
transport or HTTP error on a simulate call becomes ``EngineFailure``; read
errors propagate as httpx exceptions so the orchestrator's refresh step
can report them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from postseason.config import Settings
from postseason.core.orchestrator import EngineFailure
from postseason.models.bracket import Bracket
from postseason.models.campaign import Campaign, SimulationResult
from postseason.models.game import Game
from postseason.models.roster import Roster, RosterPlayer

logger = logging.getLogger(__name__)

_NO_CACHE = {"Cache-Control": "no-cache"}


class HttpPlayoffServices:
    """Campaign API client. Use as an async context manager or call ``aclose()``."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        headers = {"Accept": "application/json"}
        if settings.postseason_api_token:
            headers["Authorization"] = f"Bearer {settings.postseason_api_token}"
        self._client = client or httpx.AsyncClient(
            base_url=settings.postseason_api_base_url,
            headers=headers,
            timeout=httpx.Timeout(settings.postseason_http_timeout, connect=5.0),
        )

    async def __aenter__(self) -> HttpPlayoffServices:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- reads -------------------------------------------------------------

    async def fetch_bracket(self, campaign_id: str) -> Bracket | None:
        resp = await self._client.get(f"/api/campaigns/{campaign_id}/playoffs/bracket")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return None
        resp.raise_for_status()
        data = resp.json().get("bracket")
        return Bracket.model_validate(data) if data else None

    async def fetch_games(self, campaign_id: str, *, force: bool = False) -> list[Game]:
        data = await self._get_json(f"/api/campaigns/{campaign_id}/games", force=force)
        return [Game.model_validate(g) for g in data.get("games", [])]

    async def fetch_campaign(self, campaign_id: str, *, force: bool = False) -> Campaign:
        data = await self._get_json(f"/api/campaigns/{campaign_id}", force=force)
        campaign = data.get("campaign", {})
        team = data.get("team") or {}
        return Campaign(
            id=str(campaign.get("id", campaign_id)),
            user_team_id=str(team.get("id", "")),
            current_date=campaign.get("current_date", ""),
            season_year=campaign.get("game_year"),
        )

    async def fetch_roster(self, campaign_id: str, *, force: bool = False) -> Roster:
        data = await self._get_json(f"/api/campaigns/{campaign_id}/team", force=force)
        return parse_roster(data)

    async def fetch_standings(self, campaign_id: str, *, force: bool = False) -> Any:
        data = await self._get_json(f"/api/campaigns/{campaign_id}/standings", force=force)
        return data.get("standings")

    async def _get_json(self, path: str, *, force: bool) -> dict[str, Any]:
        resp = await self._client.get(path, headers=_NO_CACHE if force else None)
        resp.raise_for_status()
        result: dict[str, Any] = resp.json()
        return result

    # ---- engine ------------------------------------------------------------

    async def simulate_next_game(self, campaign_id: str) -> SimulationResult:
        data = await self._post_engine(f"/api/campaigns/{campaign_id}/simulate-to-next-game", {})
        try:
            return SimulationResult.model_validate(data)
        except ValidationError as exc:
            raise EngineFailure("Simulation returned malformed data.") from exc

    async def simulate_to_next_round(self, campaign_id: str, *, sim_all: bool = False) -> None:
        await self._post_engine(
            f"/api/campaigns/{campaign_id}/playoffs/simulate-to-next-round",
            {"simAll": sim_all},
        )

    async def _post_engine(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(
                path,
                json=body,
                timeout=httpx.Timeout(self._settings.postseason_sim_timeout, connect=5.0),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "engine_request_failed path=%s status=%d", path, exc.response.status_code
            )
            message = _error_message(exc.response) or "Simulation failed. Please try again."
            raise EngineFailure(message) from exc
        except httpx.HTTPError as exc:
            logger.warning("engine_request_failed path=%s error=%s", path, exc)
            raise EngineFailure("Network error. Please check your connection.") from exc
        if not resp.content:
            return {}
        try:
            result: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise EngineFailure("Simulation returned malformed data.") from exc
        return result


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    return str(body.get("message") or body.get("error") or "")


def parse_roster(data: dict[str, Any]) -> Roster:
    """Build a Roster from the ``/team`` payload.

    Players may carry ``name`` or ``first_name``/``last_name``; starters and
    rotation minutes come from the ``lineup`` block when present, else from
    per-player ``is_starter``/``target_minutes``.
    """
    team = data.get("team") or {}
    lineup = data.get("lineup") or {}
    starter_ids = {str(pid) for pid in lineup.get("starters", [])}
    minutes = {str(pid): int(m) for pid, m in (lineup.get("target_minutes") or {}).items()}

    players: list[RosterPlayer] = []
    for raw in data.get("roster", []):
        pid = str(raw.get("id"))
        name = raw.get("name") or f"{raw.get('first_name', '')} {raw.get('last_name', '')}".strip()
        players.append(
            RosterPlayer(
                id=pid,
                name=name,
                is_starter=pid in starter_ids if starter_ids else bool(raw.get("is_starter")),
                is_injured=bool(raw.get("is_injured")),
                target_minutes=minutes.get(pid, int(raw.get("target_minutes") or 0)),
            )
        )
    return Roster(team_id=str(team.get("id", "")), players=players)
