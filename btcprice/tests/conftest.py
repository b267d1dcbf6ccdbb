"""Shared fixtures: canned source responses served through httpx.MockTransport."""

from collections.abc import Callable

import httpx
import pytest

from btcprice.src.sources import BaseSource, dig

Handler = Callable[[httpx.Request], httpx.Response]

HOSTS = {
    "CoinGecko": "api.coingecko.com",
    "Binance": "api.binance.com",
    "Coinbase": "api.coinbase.com",
    "CryptoCompare": "min-api.cryptocompare.com",
}


def coingecko_body(price: float) -> dict:
    return {"bitcoin": {"usd": price}}


def binance_body(price: str) -> dict:
    return {"symbol": "BTCUSDT", "price": price}


def coinbase_body(price: str) -> dict:
    return {"data": {"currency": "BTC", "rates": {"EUR": "55000.00", "USD": price}}}


def cryptocompare_body(price: float) -> dict:
    return {"USD": price}


def route(responses: dict[str, Handler | httpx.Response]) -> Handler:
    """Build a transport handler that dispatches on the request host.

    Values may be a ready response or a handler taking the request.
    Hosts without an entry get a 404.
    """
    by_host = {HOSTS.get(name, name): value for name, value in responses.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        value = by_host.get(request.url.host)
        if value is None:
            return httpx.Response(404, text="not found")
        if isinstance(value, httpx.Response):
            return httpx.Response(
                value.status_code, headers=value.headers, content=value.content
            )
        return value(request)

    return handler


def timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_source(name: str, key: str = "price") -> BaseSource:
    """Create an unregistered source at https://<name>.test/ reading ``key``."""
    cls = type(
        f"{name}Source",
        (BaseSource,),
        {
            "name": name,
            "url": f"https://{name.lower()}.test/price",
            "extract": lambda self, data: dig(data, key),
        },
    )
    return cls()


@pytest.fixture
def all_ok() -> Handler:
    """All four built-in sources answer with a valid price."""
    return route({
        "CoinGecko": httpx.Response(200, json=coingecko_body(60000)),
        "Binance": httpx.Response(200, json=binance_body("60200.00000000")),
        "Coinbase": httpx.Response(200, json=coinbase_body("59900")),
        "CryptoCompare": httpx.Response(200, json=cryptocompare_body(60100.5)),
    })
