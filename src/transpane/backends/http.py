"""Shared HTTP plumbing for adapters that call remote or local web APIs."""

import json
from collections.abc import AsyncIterator, Mapping
from typing import Any

import httpx

from ..errors import NetworkTimeout, ProviderError
from ..log import get_logger
from .base import Adapter, AdapterDescriptor

logger = get_logger("http")

DEFAULT_TIMEOUT = 15.0


def _error_detail(response: httpx.Response) -> str:
    """Extract a readable reason from an error response body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        error = data.get("error") or data.get("message") or data.get("ErrorMessage")
        if isinstance(error, dict):
            return str(error.get("message", error))
        if error:
            return str(error)
    return response.text[:200]


class HttpAdapter(Adapter):
    """Adapter that owns a lazily created ``httpx.AsyncClient``."""

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        descriptor: AdapterDescriptor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, descriptor)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout") or DEFAULT_TIMEOUT)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    def _check_response(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise ProviderError(f"HTTP {response.status_code}: {_error_detail(response)}")

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, mapping transport failures to provider errors."""
        try:
            response = await self._get_client().request(method, url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkTimeout(f"request to {url} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"connection error: {e}") from e
        self._check_response(response)
        return response

    async def _post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._request("POST", url, json=payload, headers=headers)
        return response.json()

    async def _post_form(
        self,
        url: str,
        data: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._request("POST", url, data=data, headers=headers)
        return response.json()

    async def _stream_sse(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> AsyncIterator[dict]:
        """POST a JSON payload and yield each server-sent ``data:`` event."""
        try:
            async with self._get_client().stream(
                "POST", url, json=payload, headers=headers, timeout=self.timeout
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    self._check_response(response)
                async for line in response.aiter_lines():
                    line = line.strip()
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        return
                    try:
                        yield json.loads(data)
                    except ValueError:
                        logger.debug("skipping malformed stream event", data=data[:80])
        except httpx.TimeoutException as e:
            raise NetworkTimeout(f"stream from {url} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"connection error: {e}") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
