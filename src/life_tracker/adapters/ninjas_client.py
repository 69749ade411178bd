"""API Ninjas nutrition API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from life_tracker.domain.errors import (
    MalformedResponseError,
    ServiceUnavailableError,
    UpstreamError,
    UpstreamTimeoutError,
)

_logger = logging.getLogger(__name__)


class NutritionClient(Protocol):
    """Interface for nutrition API interactions."""

    async def lookup(self, query: str) -> object:
        """Return the raw decoded JSON for an ingredient query."""


@dataclass
class HttpxNinjasClient(NutritionClient):
    """HTTPX-backed API Ninjas client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 15.0
    ) -> "HttpxNinjasClient":
        """Create a client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def lookup(self, query: str) -> object:
        """Query the nutrition endpoint for a free-text ingredient."""
        url = f"{self.base_url}/nutrition"
        try:
            response = await self.http_client.get(
                url,
                params={"query": query},
                headers={"X-Api-Key": self.api_key},
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("Nutrition lookup timed out") from exc
        except httpx.TransportError as exc:
            raise ServiceUnavailableError("Nutrition API is unreachable") from exc
        if response.is_error:
            _logger.error(
                "API Ninjas nutrition error: status=%s body=%s",
                response.status_code,
                response.text[:200],
            )
            raise UpstreamError(f"Nutrition lookup failed ({response.status_code})")
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError("Nutrition API returned invalid JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
