"""Bitcoin Price - Multi-Source Average

This module computes a Bitcoin/USD average from several public price sources:
- sources: One descriptor per endpoint (name, URL, extraction rule)
- FetchCoordinator: Concurrent fetching with per-source timeouts
- PriceAggregator: Average, range and spread over the successful sources
- BitcoinPrice: Public entry points and per-source lookups
"""

from .BitcoinPrice import (
    NamedSourceNotFoundError,
    binance_price,
    coinbase_price,
    coingecko_price,
    cryptocompare_price,
    format_report,
    get_average_price,
    get_btc_average,
    get_btc_average_sync,
    get_source_price,
)
from .FetchCoordinator import FetchCoordinator
from .FetchOutcome import FetchOutcome
from .PriceAggregator import (
    AggregationReport,
    AllSourcesFailedError,
    PriceAggregator,
    PriceError,
    SourcePrice,
)
from .sources import DEFAULT_SOURCES, DEFAULT_TIMEOUT

__all__ = [
    "AggregationReport",
    "AllSourcesFailedError",
    "DEFAULT_SOURCES",
    "DEFAULT_TIMEOUT",
    "FetchCoordinator",
    "FetchOutcome",
    "NamedSourceNotFoundError",
    "PriceAggregator",
    "PriceError",
    "SourcePrice",
    "binance_price",
    "coinbase_price",
    "coingecko_price",
    "cryptocompare_price",
    "format_report",
    "get_average_price",
    "get_btc_average",
    "get_btc_average_sync",
    "get_source_price",
]
