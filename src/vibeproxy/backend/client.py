"""HTTP client for the VibeProxy backend."""

import logging
import time
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from vibeproxy.backend.models import BackendStatus, Health, HealthPayload
from vibeproxy.core.config import BackendConfig
from vibeproxy.core.constants import HEALTH_PATH, STATUS_PATH
from vibeproxy.core.exceptions import (
    BackendRequestError,
    BackendTimeoutError,
    BackendUnavailableError,
)

logger = logging.getLogger(__name__)


class HealthProbe(Protocol):
    """Anything that can probe backend health."""

    async def health_check(self) -> Health: ...


class BackendClient:
    """Talks to the backend's HTTP API."""

    def __init__(
        self,
        config: BackendConfig,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize backend client.

        Args:
            config: Backend connection configuration
            timeout: Request timeout in seconds, defaults to config.timeout_secs
            transport: Optional httpx transport override
        """
        self._config = config
        self._timeout = timeout if timeout is not None else float(config.timeout_secs)
        self._transport = transport

    @property
    def base_url(self) -> str:
        """Get backend base URL."""
        return self._config.base_url

    def _headers(self) -> dict[str, str]:
        if self._config.api_key:
            return {"Authorization": f"Bearer {self._config.api_key}"}
        return {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with self._client() as client:
                return await client.get(path)
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(
                f"Backend did not respond within {self._timeout}s",
                url=url,
                timeout=self._timeout,
            ) from e
        except httpx.ConnectError as e:
            raise BackendUnavailableError(f"Backend unreachable: {e}", url=url) from e
        except httpx.RequestError as e:
            raise BackendRequestError(f"Backend request failed: {e}", url=url) from e
        except httpx.InvalidURL as e:
            raise BackendRequestError(f"Invalid backend URL: {e}", url=url) from e

    async def health_check(self) -> Health:
        """
        Probe the backend's health endpoint.

        Returns:
            Health with measured round-trip latency

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendTimeoutError: If the backend does not answer in time
            BackendRequestError: For any other transport failure
        """
        started = time.perf_counter()
        response = await self._get(HEALTH_PATH)
        latency_ms = max(0, int((time.perf_counter() - started) * 1000))

        if not response.is_success:
            logger.warning(f"Backend health check returned HTTP {response.status_code}")
            return Health(
                healthy=False,
                latency_ms=latency_ms,
                message=f"HTTP {response.status_code}",
            )

        return Health(
            healthy=True,
            latency_ms=latency_ms,
            message=self._health_message(response),
        )

    def _health_message(self, response: httpx.Response) -> str | None:
        try:
            data: Any = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        try:
            return HealthPayload.model_validate(data).summary()
        except ValidationError as e:
            logger.debug(f"Ignoring malformed health payload: {e}")
            return None

    async def get_status(self) -> BackendStatus:
        """
        Fetch the backend's status report.

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendTimeoutError: If the backend does not answer in time
            BackendRequestError: On error status codes or malformed payloads
        """
        url = f"{self.base_url}{STATUS_PATH}"
        response = await self._get(STATUS_PATH)

        if not response.is_success:
            raise BackendRequestError(
                f"Backend status request failed with HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return BackendStatus.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise BackendRequestError(
                f"Invalid backend status payload: {e}",
                url=url,
                status_code=response.status_code,
            ) from e
