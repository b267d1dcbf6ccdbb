"""BitcoinPrice: Public entry points for the Bitcoin/USD average.

This module wires the source registry, the FetchCoordinator and the
PriceAggregator together:

    - get_btc_average(): full AggregationReport for one fetch round
    - get_average_price(): the average alone, as a string
    - get_source_price(): one named source's price, as a string
    - coinbase_price() and friends: get_source_price() bound to a name

Prices are Decimals everywhere inside the package; only the string helpers
and AggregationReport.to_dict() stringify them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .FetchCoordinator import FetchCoordinator
from .PriceAggregator import AggregationReport, PriceAggregator, PriceError
from .sources import DEFAULT_SOURCES, DEFAULT_TIMEOUT

if TYPE_CHECKING:
    import httpx

    from .sources import BaseSource

logger = logging.getLogger(__name__)


class NamedSourceNotFoundError(PriceError, LookupError):
    """Raised when a requested source has no price in this round.

    Either the source failed while others succeeded, or the name is unknown.

    :ivar name: Requested source name.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} price not found")


def _check_unique(sources: Sequence[BaseSource]) -> None:
    names = [source.name for source in sources]
    if len(set(names)) != len(names):
        raise ValueError(f"Source names must be unique: {names}")


async def get_btc_average(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AggregationReport:
    """Fetch every source concurrently and aggregate the successes.

    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client, left open after the call.
    :param timeout: Per-source time budget in seconds (default: 10.0).
    :returns: AggregationReport for this round.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises ValueError: If source names are not unique or timeout is invalid.

    .. code-block:: python

        >>> report = asyncio.run(get_btc_average())
        >>> report.sources, report.total_sources
        (4, 4)
    """
    if sources is None:
        sources = DEFAULT_SOURCES
    _check_unique(sources)

    coordinator = FetchCoordinator(fetch_timeout=timeout)
    outcomes = await coordinator.fetch_all(sources, client=client)
    return PriceAggregator().aggregate(outcomes, total_sources=len(sources))


def get_btc_average_sync(
    sources: Sequence[BaseSource] | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> AggregationReport:
    """Blocking wrapper around get_btc_average() for non-async callers."""
    return asyncio.run(get_btc_average(sources, timeout=timeout))


async def get_average_price(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return the average price across all successful sources as a string.

    :raises AllSourcesFailedError: If no source produced a price.
    """
    report = await get_btc_average(sources, client=client, timeout=timeout)
    return str(report.average)


async def get_source_price(
    name: str,
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return one named source's price from a fresh aggregation round.

    The name must match exactly (case-sensitive).

    :param name: Source name, e.g. "Coinbase".
    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client.
    :param timeout: Per-source time budget in seconds.
    :returns: The source's price as a string.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises NamedSourceNotFoundError: If ``name`` did not succeed this round.
    """
    report = await get_btc_average(sources, client=client, timeout=timeout)
    price = report.get_price(name)
    if price is None:
        logger.warning(f"[{name}] No price in this round")
        raise NamedSourceNotFoundError(name)
    return str(price)


async def coinbase_price(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Coinbase BTC/USD price as a string.

    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client.
    :param timeout: Per-source time budget in seconds.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises NamedSourceNotFoundError: If Coinbase failed this round.
    """
    return await get_source_price("Coinbase", sources, client=client, timeout=timeout)


async def coingecko_price(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """CoinGecko BTC/USD price as a string.

    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client.
    :param timeout: Per-source time budget in seconds.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises NamedSourceNotFoundError: If CoinGecko failed this round.
    """
    return await get_source_price("CoinGecko", sources, client=client, timeout=timeout)


async def cryptocompare_price(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """CryptoCompare BTC/USD price as a string.

    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client.
    :param timeout: Per-source time budget in seconds.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises NamedSourceNotFoundError: If CryptoCompare failed this round.
    """
    return await get_source_price(
        "CryptoCompare", sources, client=client, timeout=timeout
    )


async def binance_price(
    sources: Sequence[BaseSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Binance BTC/USDT price as a string.

    :param sources: Sources to query (default: DEFAULT_SOURCES).
    :param client: Optional HTTP client.
    :param timeout: Per-source time budget in seconds.
    :raises AllSourcesFailedError: If no source produced a price.
    :raises NamedSourceNotFoundError: If Binance failed this round.
    """
    return await get_source_price("Binance", sources, client=client, timeout=timeout)


def format_report(report: AggregationReport) -> str:
    """Format a report as the human-readable summary printed by the CLI.

    :param report: Report to format.
    :returns: Multi-line summary.
    """
    lines = ["Successfully fetched prices:", ""]
    for entry in report.prices:
        lines.append(f"✓ {entry.name}: ${entry.price:,.2f}")
    lines.append("")

    rule = "━" * 40
    plural = "s" if report.sources != 1 else ""
    lines.extend(
        [
            rule,
            f"Average Price: ${report.average:,.2f}",
            f"Sources: {report.sources} market{plural}",
            f"Range: ${report.min:,.2f} - ${report.max:,.2f}",
            f"Spread: ${report.spread:,.2f} ({report.spread_percent}%)",
            rule,
        ]
    )
    return "\n".join(lines)
