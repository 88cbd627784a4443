"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from nutrilog.adapters.fdc_client import HttpxFdcClient


def test_fdc_client_search_and_get() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["api_key"] == "key"
        if request.url.path.endswith("/foods/search"):
            body = json.loads(request.content)
            assert body["query"] == "oats"
            assert body["pageSize"] == 5
            assert "Branded" in body["dataType"]
            return httpx.Response(200, json={"foods": []})
        if request.url.path.endswith("/food/123"):
            return httpx.Response(200, json={"fdcId": 123})
        return httpx.Response(404)

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key", base_url="https://api.test", http_client=async_client
    )

    search = asyncio.run(client.search_foods("oats", page_size=5))
    food = asyncio.run(client.get_food(123))

    assert search == {"foods": []}
    assert food == {"fdcId": 123}


def test_fdc_client_get_food_missing_returns_none() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    assert asyncio.run(client.get_food(999)) is None


def test_fdc_client_raises_on_server_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_food(123))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("oats"))
