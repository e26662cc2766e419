"""Arke REST API adapter used by job handles."""

from __future__ import annotations

import logging
from typing import Any, Final
from urllib.parse import quote

import httpx

from klados_worker.domain import OutputEntityDraft, TargetEntity

from .arke_errors import (
    ArkeApiConnectionError,
    ArkeApiError,
    ArkeApiTimeoutError,
    ArkeNotFoundError,
    ArkePermissionError,
    ArkeRequestError,
    ArkeServerError,
)
from .interfaces import ArkeClientPort

logger = logging.getLogger("klados_worker.adapters")


def _adapter_path_segment(identifier: str) -> str:
    """Percent-encode one identifier as a single URL path segment."""

    return quote(str(identifier), safe="")


class ArkeApiClient(ArkeClientPort):
    """Async adapter for the Arke entity, batch, and rhiza endpoints."""

    _USER_AGENT: Final[str] = "klados-worker/1.0 (Python/httpx)"
    _NETWORK_HEADER: Final[str] = "X-Arke-Network"

    def __init__(
        self,
        api_base: str,
        auth_token: str,
        network: str = "main",
        request_timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Arke API adapter.

        Args:
            api_base: Arke API base URL.
            auth_token: Agent API key sent with every request.
            network: Arke network label (`main` or `test`).
            request_timeout_seconds: HTTP request timeout in seconds.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_api_base = api_base.strip()
        normalized_auth_token = auth_token.strip()
        normalized_network = network.strip()

        if not normalized_api_base:
            raise ValueError("api_base must not be blank")
        if not normalized_auth_token:
            raise ValueError("auth_token must not be blank")
        if not normalized_network:
            raise ValueError("network must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._api_base = normalized_api_base.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self._api_base,
            timeout=request_timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"ApiKey {normalized_auth_token}",
                "User-Agent": self._USER_AGENT,
                self._NETWORK_HEADER: normalized_network,
            },
        )

    async def client_get_entity(self, entity_id: str) -> TargetEntity:
        normalized_entity_id = entity_id.strip()
        if not normalized_entity_id:
            raise ValueError("entity_id must not be blank")

        payload = await self._client_request("GET", f"/entities/{_adapter_path_segment(normalized_entity_id)}")
        if not isinstance(payload, dict):
            raise ArkeServerError("Arke entity response must be a JSON object")

        properties = payload.get("properties")
        return TargetEntity(
            id=str(payload.get("id") or normalized_entity_id),
            type=str(payload.get("type") or ""),
            properties=dict(properties) if isinstance(properties, dict) else {},
        )

    async def client_create_entity(self, draft: OutputEntityDraft) -> str:
        payload = await self._client_request("POST", "/entities", json_body=draft.draft_to_payload())
        created_id = payload.get("id") if isinstance(payload, dict) else None
        if not created_id:
            raise ArkeServerError("Arke create response missing entity id", response_body=payload)
        return str(created_id)

    async def client_update_entity(self, entity_id: str, properties: dict[str, Any]) -> None:
        await self._client_request(
            "PUT",
            f"/entities/{_adapter_path_segment(entity_id)}",
            json_body={"properties": properties},
        )

    async def client_update_batch_slot(
        self,
        batch_id: str,
        slot_index: int,
        payload: dict[str, Any],
    ) -> None:
        if slot_index < 0:
            raise ValueError("slot_index must be >= 0")
        await self._client_request(
            "POST",
            f"/batches/{_adapter_path_segment(batch_id)}/slots/{slot_index}",
            json_body=payload,
        )

    async def client_workflow_handoff(self, rhiza_id: str, payload: dict[str, Any]) -> None:
        await self._client_request(
            "POST",
            f"/rhizas/{_adapter_path_segment(rhiza_id)}/handoff",
            json_body=payload,
        )

    async def client_close(self) -> None:
        await self._http_client.aclose()

    async def _client_request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
    ) -> object:
        """Execute one API call and decode the JSON response body.

        Args:
            method: HTTP method.
            path: Path relative to the API base.
            json_body: Optional JSON request body.

        Returns:
            object: Decoded JSON payload, or None for empty bodies.

        Raises:
            ArkeApiTimeoutError: Raised when the request timed out.
            ArkeApiConnectionError: Raised for network failures.
            ArkeNotFoundError: Raised for HTTP 404.
            ArkePermissionError: Raised for HTTP 401/403.
            ArkeRequestError: Raised for other 4xx statuses.
            ArkeServerError: Raised for 5xx statuses and undecodable bodies.
        """

        logger.debug("arke_request method=%s path=%s", method, path)
        try:
            response = await self._http_client.request(method, path, json=json_body)
        except httpx.TimeoutException as error:
            raise ArkeApiTimeoutError(f"Arke request timed out: {method} {path}") from error
        except httpx.TransportError as error:
            raise ArkeApiConnectionError(f"Arke transport request failed: {method} {path}") from error

        if response.status_code >= 400:
            raise self._client_error_for_response(method=method, path=path, response=response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise ArkeServerError(
                f"Arke returned a non-JSON body: {method} {path}",
                status_code=response.status_code,
            ) from error

    def _client_error_for_response(self, method: str, path: str, response: httpx.Response) -> ArkeApiError:
        """Map one non-success response to a typed adapter error.

        Args:
            method: HTTP method.
            path: Request path.
            response: Non-success HTTP response.

        Returns:
            ArkeApiError: Typed error carrying status code and body.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        status_code = response.status_code
        try:
            response_body: object = response.json()
        except ValueError:
            response_body = response.text

        message = f"Arke returned HTTP {status_code}: {method} {path}"
        if status_code == 404:
            return ArkeNotFoundError(message, status_code=status_code, response_body=response_body)
        if status_code in (401, 403):
            return ArkePermissionError(message, status_code=status_code, response_body=response_body)
        if status_code < 500:
            return ArkeRequestError(message, status_code=status_code, response_body=response_body)
        return ArkeServerError(message, status_code=status_code, response_body=response_body)


def adapter_create_arke_client_factory(request_timeout_seconds: float = 30.0):
    """Return a factory that builds one `ArkeApiClient` per job.

    Args:
        request_timeout_seconds: HTTP timeout applied to every built client.

    Returns:
        Callable[[str, str, str], ArkeApiClient]: Client factory.

    Raises:
        ValueError: Raised when the timeout is not positive.
    """

    if request_timeout_seconds <= 0:
        raise ValueError("request_timeout_seconds must be > 0")

    def _factory(api_base: str, auth_token: str, network: str) -> ArkeApiClient:
        return ArkeApiClient(
            api_base=api_base,
            auth_token=auth_token,
            network=network,
            request_timeout_seconds=request_timeout_seconds,
        )

    return _factory
