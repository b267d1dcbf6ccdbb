"""Unit tests for FetchCoordinator."""

import asyncio
import time
from decimal import Decimal

import httpx
import pytest

from btcprice.src.FetchCoordinator import FetchCoordinator
from btcprice.src.FetchOutcome import FetchOutcome
from btcprice.src.sources import BaseSource, DEFAULT_SOURCES
from conftest import make_source, mock_client, refused, route, timeout


def fetch_all(sources, handler, fetch_timeout: float = 10.0) -> list[FetchOutcome]:
    async def run() -> list[FetchOutcome]:
        async with mock_client(handler) as client:
            return await FetchCoordinator(fetch_timeout).fetch_all(sources, client)

    return asyncio.run(run())


class TestFetchCoordinatorInit:
    """Test FetchCoordinator initialization."""

    def test_default_timeout(self) -> None:
        assert FetchCoordinator().fetch_timeout == 10.0

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError, match="fetch_timeout must be positive"):
            FetchCoordinator(fetch_timeout=0)


class TestFetchOne:
    """Test per-source outcome mapping."""

    def test_success(self) -> None:
        outcomes = fetch_all(
            [make_source("Alpha")],
            lambda r: httpx.Response(200, json={"price": "100.5"}),
        )
        assert outcomes == [FetchOutcome.ok("Alpha", Decimal("100.5"))]

    @pytest.mark.parametrize(
        ("handler", "reason"),
        [
            (timeout, "Request timeout"),
            (lambda r: httpx.Response(429, text="slow down"), "HTTP 429: slow down"),
            (lambda r: httpx.Response(200, json={"price": 0}), "Invalid price data"),
        ],
    )
    def test_failure_reason(self, handler, reason: str) -> None:
        outcomes = fetch_all([make_source("Alpha")], handler)
        assert outcomes == [FetchOutcome.failed("Alpha", reason)]

    def test_transport_failure_keeps_message(self) -> None:
        (outcome,) = fetch_all([make_source("Alpha")], refused)
        assert not outcome.success
        assert "Connection refused" in outcome.error

    def test_parse_failure(self) -> None:
        (outcome,) = fetch_all(
            [make_source("Alpha")], lambda r: httpx.Response(200, text="{oops")
        )
        assert outcome.error.startswith("Failed to parse JSON: ")

    def test_unexpected_extractor_error_is_captured(self) -> None:
        """A broken extractor yields a Failure, not an exception."""

        class Broken(BaseSource):
            name = "Broken"
            url = "https://broken.test/"

            def extract(self, data):
                return data.missing_attribute

        (outcome,) = fetch_all([Broken()], lambda r: httpx.Response(200, json={}))
        assert not outcome.success
        assert "missing_attribute" in outcome.error

    def test_slow_source_times_out(self) -> None:
        """The coordinator bounds the whole fetch, not just socket reads."""

        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"price": 1})

        started = time.monotonic()
        (outcome,) = fetch_all([make_source("Slow")], slow, fetch_timeout=0.1)
        assert outcome == FetchOutcome.failed("Slow", "Request timeout")
        assert time.monotonic() - started < 2


class TestFetchAll:
    """Test concurrent fan-out and fan-in."""

    def test_empty_sources(self) -> None:
        assert fetch_all([], lambda r: httpx.Response(200)) == []

    def test_order_follows_sources_not_completion(self) -> None:
        """Outcomes keep source order even when later sources finish first."""
        delays = {"first.test": 0.2, "second.test": 0.1, "third.test": 0.0}

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(delays[request.url.host])
            return httpx.Response(200, json={"price": 1})

        sources = [make_source("First"), make_source("Second"), make_source("Third")]
        outcomes = fetch_all(sources, handler)
        assert [o.name for o in outcomes] == ["First", "Second", "Third"]
        assert all(o.success for o in outcomes)

    def test_runs_concurrently(self) -> None:
        """Three 0.3s sources finish together, not one after another."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.3)
            return httpx.Response(200, json={"price": 1})

        sources = [make_source("A"), make_source("B"), make_source("C")]
        started = time.monotonic()
        outcomes = fetch_all(sources, handler)
        assert len(outcomes) == 3
        assert time.monotonic() - started < 0.8

    def test_failure_does_not_cancel_siblings(self) -> None:
        """A fast failure leaves slower in-flight fetches running."""

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "fast.test":
                raise httpx.ConnectError("refused", request=request)
            await asyncio.sleep(0.2)
            return httpx.Response(200, json={"price": "42"})

        outcomes = fetch_all([make_source("Fast"), make_source("Slow")], handler)
        assert not outcomes[0].success
        assert outcomes[1] == FetchOutcome.ok("Slow", Decimal("42"))

    def test_timeout_only_affects_its_own_source(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "stuck.test":
                await asyncio.sleep(5)
            return httpx.Response(200, json={"price": "7"})

        outcomes = fetch_all(
            [make_source("Stuck"), make_source("Quick")], handler, fetch_timeout=0.2
        )
        assert outcomes[0] == FetchOutcome.failed("Stuck", "Request timeout")
        assert outcomes[1] == FetchOutcome.ok("Quick", Decimal("7"))

    def test_default_sources(self, all_ok) -> None:
        outcomes = fetch_all(DEFAULT_SOURCES, all_ok)
        assert [(o.name, o.price) for o in outcomes] == [
            ("CoinGecko", Decimal("60000")),
            ("Binance", Decimal("60200.00000000")),
            ("Coinbase", Decimal("59900")),
            ("CryptoCompare", Decimal("60100.5")),
        ]

    def test_one_outcome_per_source(self) -> None:
        handler = route({"CoinGecko": timeout, "Binance": refused})
        outcomes = fetch_all(DEFAULT_SOURCES, handler)
        assert len(outcomes) == len(DEFAULT_SOURCES)
        assert not any(o.success for o in outcomes)

    def test_closes_own_client(self, monkeypatch) -> None:
        """Without a caller client, the round's client is closed afterwards."""
        created: list[httpx.AsyncClient] = []
        coordinator = FetchCoordinator()

        def new_client() -> httpx.AsyncClient:
            client = mock_client(lambda r: httpx.Response(200, json={"price": 1}))
            created.append(client)
            return client

        monkeypatch.setattr(coordinator, "new_client", new_client)
        outcomes = asyncio.run(coordinator.fetch_all([make_source("A")]))
        assert outcomes[0].success
        assert len(created) == 1
        assert created[0].is_closed

    def test_leaves_caller_client_open(self) -> None:
        async def run() -> bool:
            client = mock_client(lambda r: httpx.Response(200, json={"price": 1}))
            await FetchCoordinator().fetch_all([make_source("A")], client)
            still_open = not client.is_closed
            await client.aclose()
            return still_open

        assert asyncio.run(run())


class TestFetchOutcome:
    """Test FetchOutcome invariants."""

    def test_ok(self) -> None:
        outcome = FetchOutcome.ok("a", Decimal("1"))
        assert outcome.success
        assert outcome.error is None

    def test_failed(self) -> None:
        outcome = FetchOutcome.failed("a", "Request timeout")
        assert not outcome.success
        assert outcome.price is None

    def test_needs_exactly_one_variant(self) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            FetchOutcome("a")
        with pytest.raises(ValueError, match="exactly one"):
            FetchOutcome("a", price=Decimal("1"), error="x")

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-5"), Decimal("NaN")])
    def test_rejects_invalid_success(self, price: Decimal) -> None:
        """Success{0} and friends cannot be constructed."""
        with pytest.raises(ValueError, match="positive and finite"):
            FetchOutcome.ok("a", price)
