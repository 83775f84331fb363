"""CoordinateResolver — turns a free-text address into coordinates.

Backed by the OpenCage geocoding API.  The resolver is a pure function of
its input: no caching, no retries.  Failure policy belongs to the caller;
GeocodingPolicy names the two policies the lifecycle engine supports.

Failure mapping:
    - no API key configured             → ResolverUnavailableError
    - timeout / transport error / non-2xx / malformed body
                                         → ResolverUnavailableError
    - service answered with zero results → AddressNotFoundError
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

import httpx

from sisocc.domain.errors import AddressNotFoundError, ResolverUnavailableError
from sisocc.domain.occurrence import Coordinates

logger = logging.getLogger(__name__)

OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"


class GeocodingPolicy(str, Enum):
    """What create() does when an address cannot be resolved."""

    FALLBACK = "fallback"  # substitute the configured default coordinate
    REJECT = "reject"  # fail with a client-correctable validation error


class CoordinateResolver:
    """Async OpenCage client.

    Args:
        api_key: OpenCage key.  None means resolution is not configured.
        region_suffix: Appended to every address before lookup.
        base_url: Geocoding endpoint.
        timeout: Upper bound, in seconds, on a whole lookup.
        client: Optional shared httpx.AsyncClient (tests inject one backed
            by httpx.MockTransport).  Without one, a client is opened per call.
    """

    def __init__(
        self,
        api_key: str | None,
        region_suffix: str = "",
        base_url: str = OPENCAGE_URL,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._region_suffix = region_suffix
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    def query_for(self, address: str) -> str:
        """The query string actually sent for *address*."""
        if not self._region_suffix:
            return address
        return f"{address}, {self._region_suffix}"

    async def resolve(self, address: str) -> Coordinates:
        """Return the first coordinate pair matching *address*.

        Raises:
            ResolverUnavailableError: unconfigured, unreachable, or timed out.
            AddressNotFoundError: the lookup returned no results.
        """
        if not self._api_key:
            raise ResolverUnavailableError("Geocoding API key is not configured")

        params = {"q": self.query_for(address), "key": self._api_key, "limit": 1}
        try:
            body = await asyncio.wait_for(self._fetch(params), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ResolverUnavailableError("Geocoding service timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ResolverUnavailableError(
                f"Geocoding service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ResolverUnavailableError(f"Geocoding service unreachable: {exc}") from exc
        except ValueError as exc:
            raise ResolverUnavailableError("Geocoding service sent invalid JSON") from exc

        return self._first_match(address, body)

    async def _fetch(self, params: dict[str, Any]) -> Any:
        if self._client is not None:
            response = await self._client.get(self._base_url, params=params)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(self._base_url, params=params)
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _first_match(address: str, body: Any) -> Coordinates:
        if not isinstance(body, dict) or "results" not in body:
            raise ResolverUnavailableError("Geocoding service sent an unexpected payload")
        results = body["results"]
        if not results:
            raise AddressNotFoundError(address)

        try:
            geometry = results[0]["geometry"]
            coordinates = Coordinates(latitude=geometry["lat"], longitude=geometry["lng"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ResolverUnavailableError("Geocoding service sent an unexpected payload") from exc

        logger.debug("Resolved %r to (%s, %s)", address, coordinates.latitude, coordinates.longitude)
        return coordinates
