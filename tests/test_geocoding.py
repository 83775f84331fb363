"""Tests for the CoordinateResolver.

The OpenCage API is replaced with httpx.MockTransport so every failure
mode can be produced deterministically.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from sisocc.core.geocoding import CoordinateResolver
from sisocc.domain.errors import (
    AddressNotFoundError,
    ErrorKind,
    ResolverUnavailableError,
)

_SUFFIX = "Recife, Pernambuco, Brasil"


def _opencage_body(lat: float = -8.05, lng: float = -34.9) -> dict:
    return {
        "results": [
            {"geometry": {"lat": lat, "lng": lng}, "formatted": "100 Main St, Recife"},
            {"geometry": {"lat": 0.0, "lng": 0.0}, "formatted": "elsewhere"},
        ],
        "status": {"code": 200, "message": "OK"},
    }


def _resolver(handler, api_key: str | None = "test-key", timeout: float = 5.0) -> CoordinateResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CoordinateResolver(
        api_key=api_key,
        region_suffix=_SUFFIX,
        base_url="https://geocoder.test/v1/json",
        timeout=timeout,
        client=client,
    )


class TestResolveSuccess:
    @pytest.mark.asyncio
    async def test_returns_first_result(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(200, json=_opencage_body()))
        coords = await resolver.resolve("100 Main St")
        assert (coords.latitude, coords.longitude) == (-8.05, -34.9)

    @pytest.mark.asyncio
    async def test_query_carries_suffix_key_and_limit(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_opencage_body())

        await _resolver(handler).resolve("100 Main St")
        params = seen[0].url.params
        assert params["q"] == f"100 Main St, {_SUFFIX}"
        assert params["key"] == "test-key"
        assert params["limit"] == "1"

    def test_query_without_suffix(self) -> None:
        resolver = CoordinateResolver(api_key="k")
        assert resolver.query_for("100 Main St") == "100 Main St"


class TestResolveFailures:
    @pytest.mark.asyncio
    async def test_zero_results_is_address_not_found(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(200, json={"results": []}))
        with pytest.raises(AddressNotFoundError) as info:
            await resolver.resolve("Nowhere Lane")
        assert info.value.kind == ErrorKind.ADDRESS_NOT_FOUND

    @pytest.mark.asyncio
    async def test_missing_api_key_is_unavailable(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_opencage_body())

        with pytest.raises(ResolverUnavailableError):
            await _resolver(handler, api_key=None).resolve("100 Main St")
        assert calls == []

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(ResolverUnavailableError) as info:
            await resolver.resolve("100 Main St")
        assert info.value.kind == ErrorKind.RESOLVER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ResolverUnavailableError):
            await _resolver(handler).resolve("100 Main St")

    @pytest.mark.asyncio
    async def test_transport_timeout_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ResolverUnavailableError):
            await _resolver(handler).resolve("100 Main St")

    @pytest.mark.asyncio
    async def test_hang_is_bounded_by_timeout(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, json=_opencage_body())

        with pytest.raises(ResolverUnavailableError):
            await _resolver(handler, timeout=0.05).resolve("100 Main St")

    @pytest.mark.asyncio
    async def test_invalid_json_is_unavailable(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(ResolverUnavailableError):
            await resolver.resolve("100 Main St")

    @pytest.mark.asyncio
    async def test_unexpected_payload_is_unavailable(self) -> None:
        resolver = _resolver(
            lambda request: httpx.Response(200, json={"results": [{"formatted": "no geometry"}]})
        )
        with pytest.raises(ResolverUnavailableError):
            await resolver.resolve("100 Main St")
