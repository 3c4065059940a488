"""HTTP client for the guild REST backend."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from guildledger.adapters.http_resilience import ResilientClient
from guildledger.domain.errors import (
    AuthorizationDenied,
    SessionExpired,
    TransientNetworkFailure,
    ValidationRejected,
)
from guildledger.domain.ports import LoginResult

from .schema import (
    ErrorResponse,
    LoginResponse,
    ResourceInventoryPayload,
    SettlementPayload,
    TaskPagePayload,
    TaskPayload,
    UserPayload,
)
from .translator import (
    entry_update_body,
    new_player_body,
    new_settlement_body,
    new_task_body,
    parse_account,
    parse_entry,
    parse_settlement,
    parse_task,
    parse_task_page,
    settlement_update_body,
    task_update_body,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from guildledger.config.api import GuildApiConfig
    from guildledger.config.http_resilience import ResilienceConfig
    from guildledger.domain.model import (
        Account,
        ResourceCategory,
        ResourceInventoryEntry,
        Settlement,
        Task,
        TaskFilters,
        TaskPage,
    )
    from guildledger.domain.requests import (
        EntryUpdate,
        NewPlayer,
        NewSettlement,
        NewTask,
        SettlementChanges,
        TaskChanges,
        TaskReport,
    )
    from guildledger.domain.session import Session

log = getLogger(__name__)

_SETTLEMENT_LIST = TypeAdapter(list[SettlementPayload])
_ENTRY_LIST = TypeAdapter(list[ResourceInventoryPayload])
_TASK_LIST = TypeAdapter(list[TaskPayload])
_USER_LIST = TypeAdapter(list[UserPayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _error_message(response: httpx.Response) -> ErrorResponse:
    try:
        return ErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        text = response.text.strip() or response.reason_phrase or "request failed"
        return ErrorResponse(error=text)


class GuildApiClient:
    """``GuildBackend`` over HTTP.

    Every request except login carries the session's bearer token. A 401 on
    an authenticated request closes the session (which discards the cached
    read models through its close listeners) and raises ``SessionExpired``.
    """

    def __init__(
        self,
        *,
        config: GuildApiConfig,
        session: Session,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config
        self._session = session
        self._client = client_factory(config.resilience)

    async def __aenter__(self) -> GuildApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport helpers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        params: dict[str, str | int] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers: dict[str, str] = {}
        if authenticated:
            headers["Authorization"] = f"Bearer {self._session.require_token()}"

        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            log.warning("%s %s could not complete: %s", method, path, exc)
            raise TransientNetworkFailure(f"{method} {path} could not complete: {exc}") from exc

        self._raise_for_status(method, path, response, authenticated=authenticated)

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransientNetworkFailure(f"{method} {path} returned invalid JSON") from exc

    def _raise_for_status(
        self, method: str, path: str, response: httpx.Response, *, authenticated: bool
    ) -> None:
        status = response.status_code
        if status < 400:
            return
        error = _error_message(response)

        if status == httpx.codes.UNAUTHORIZED:
            if not authenticated:
                raise AuthorizationDenied(error.error)
            log.warning("Session rejected by backend on %s %s; signing out", method, path)
            self._session.close(reason="expired")
            raise SessionExpired(error.error)
        if status == httpx.codes.FORBIDDEN:
            raise AuthorizationDenied(error.error)
        if status >= 500:
            log.warning("%s %s failed with %s: %s", method, path, status, error.error)
            raise TransientNetworkFailure(f"{method} {path} failed with {status}: {error.error}")
        raise ValidationRejected(
            error.error, status_code=status, code=error.code, details=error.details
        )

    @staticmethod
    def _validate[M: BaseModel](model: type[M], payload: object) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise TransientNetworkFailure(
                f"Unexpected {model.__name__} payload from backend"
            ) from exc

    @staticmethod
    def _validate_list[T](adapter: TypeAdapter[list[T]], payload: object) -> list[T]:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            raise TransientNetworkFailure("Unexpected list payload from backend") from exc

    # ------------------------------------------------------------------
    # Auth

    async def login(self, username: str, password: str) -> LoginResult:
        payload = await self._request(
            "POST",
            "auth/login",
            json={"username": username, "password": password},
            authenticated=False,
        )
        response = self._validate(LoginResponse, payload)
        return LoginResult(token=response.token, account=parse_account(response.user))

    async def logout(self) -> None:
        await self._request("POST", "auth/logout")

    async def current_account(self) -> Account:
        payload = await self._request("GET", "auth/me")
        return parse_account(self._validate(UserPayload, payload))

    # ------------------------------------------------------------------
    # Settlements and inventory

    async def list_settlements(self) -> list[Settlement]:
        payload = await self._request("GET", "settlements")
        return [parse_settlement(item) for item in self._validate_list(_SETTLEMENT_LIST, payload)]

    async def get_settlement(self, settlement_id: str) -> Settlement:
        payload = await self._request("GET", f"settlements/{settlement_id}")
        return parse_settlement(self._validate(SettlementPayload, payload))

    async def create_settlement(self, request: NewSettlement) -> Settlement:
        payload = await self._request("POST", "settlements", json=new_settlement_body(request))
        return parse_settlement(self._validate(SettlementPayload, payload))

    async def update_settlement(
        self, settlement_id: str, changes: SettlementChanges
    ) -> Settlement:
        payload = await self._request(
            "PUT", f"settlements/{settlement_id}", json=settlement_update_body(changes)
        )
        return parse_settlement(self._validate(SettlementPayload, payload))

    async def delete_settlement(self, settlement_id: str) -> None:
        await self._request("DELETE", f"settlements/{settlement_id}")

    async def list_resource_entries(
        self, settlement_id: str, category: ResourceCategory | None = None
    ) -> list[ResourceInventoryEntry]:
        params: dict[str, str | int] = {"category": str(category)} if category else {}
        payload = await self._request(
            "GET", f"settlements/{settlement_id}/resources", params=params
        )
        return [parse_entry(item) for item in self._validate_list(_ENTRY_LIST, payload)]

    async def update_resource_entry(
        self, settlement_id: str, entry_id: str, update: EntryUpdate
    ) -> ResourceInventoryEntry:
        payload = await self._request(
            "PUT",
            f"settlements/{settlement_id}/resources/{entry_id}",
            json=entry_update_body(update),
        )
        return parse_entry(self._validate(ResourceInventoryPayload, payload))

    # ------------------------------------------------------------------
    # Tasks

    async def list_tasks(self, filters: TaskFilters) -> TaskPage:
        payload = await self._request("GET", "tasks", params=filters.as_params())
        return parse_task_page(self._validate(TaskPagePayload, payload))

    async def my_tasks(self) -> list[Task]:
        payload = await self._request("GET", "tasks/my")
        return [parse_task(item) for item in self._validate_list(_TASK_LIST, payload)]

    async def create_task(self, request: NewTask) -> Task:
        payload = await self._request("POST", "tasks", json=new_task_body(request))
        return parse_task(self._validate(TaskPayload, payload))

    async def update_task(self, task_id: str, changes: TaskChanges | TaskReport) -> Task:
        payload = await self._request("PUT", f"tasks/{task_id}", json=task_update_body(changes))
        return parse_task(self._validate(TaskPayload, payload))

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"tasks/{task_id}")

    # ------------------------------------------------------------------
    # Players

    async def list_players(self) -> list[Account]:
        payload = await self._request("GET", "players")
        return [parse_account(item) for item in self._validate_list(_USER_LIST, payload)]

    async def get_player(self, player_id: str) -> Account:
        payload = await self._request("GET", f"players/{player_id}")
        return parse_account(self._validate(UserPayload, payload))

    async def create_player(self, request: NewPlayer) -> Account:
        payload = await self._request("POST", "players", json=new_player_body(request))
        return parse_account(self._validate(UserPayload, payload))
