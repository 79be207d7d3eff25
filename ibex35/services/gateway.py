"""
Remote Data Gateway - the only HTTP boundary to the IBEX 35 API.

Issues GET requests against the configured base URL, attaches the optional
bearer token, and turns every failure (status, transport, payload) into
RemoteRequestError. No retries; no timeout unless one is configured.
"""

import logging
from types import TracebackType
from typing import Any, Protocol

import httpx

from ibex35.common.config import GatewayConfig
from ibex35.errors import RemoteRequestError

logger = logging.getLogger(__name__)


class DataGateway(Protocol):
    """What the query layer needs from a gateway"""

    async def fetch(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]: ...


def clean_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Drop None values and stringify the rest (booleans as true/false)"""
    if not params:
        return {}
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned


class RemoteDataGateway:
    """Async HTTP gateway. Use as an async context manager to own the client."""

    def __init__(
        self,
        config: GatewayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.base_url = config.api_url.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if config.api_key:
            self.headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.AsyncClient(
            headers=self.headers,
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteDataGateway":
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

    def build_url(self, endpoint: str) -> str:
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.base_url}{endpoint}"

    async def fetch(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET endpoint with query params and return the decoded JSON object"""
        url = self.build_url(endpoint)
        query = clean_params(params)
        logger.debug("GET %s params=%s", url, query)

        try:
            response = await self._client.get(url, params=query)
        except httpx.HTTPError as e:
            logger.warning("Transport error calling %s: %r", url, e)
            msg = f"API request failed: {e}"
            raise RemoteRequestError(msg) from e

        if not response.is_success:
            logger.warning("API error %s %s from %s", response.status_code, response.reason_phrase, url)
            msg = f"API request failed: {response.status_code} {response.reason_phrase}"
            raise RemoteRequestError(
                msg, status_code=response.status_code, status_text=response.reason_phrase
            )

        try:
            data = response.json()
        except ValueError as e:
            msg = f"API request failed: invalid JSON from {endpoint}"
            raise RemoteRequestError(msg) from e

        if not isinstance(data, dict):
            msg = f"API request failed: expected JSON object from {endpoint}, got {type(data).__name__}"
            raise RemoteRequestError(msg)
        return data
