"""Bitcoin/USD price sources.

Every module here defines one public endpoint that needs no API key. Import
order is registry order, which in turn fixes the order of prices in an
aggregation report.

Usage:
    from btcprice.src.sources import DEFAULT_SOURCES, get_source

    [source.name for source in DEFAULT_SOURCES]
    # ['CoinGecko', 'Binance', 'Coinbase', 'CryptoCompare']

    source = get_source("Coinbase")
"""

# Import base classes and utilities
from .base import (
    DEFAULT_TIMEOUT,
    SOURCE_REGISTRY,
    BaseSource,
    SourceError,
    SourceHTTPError,
    SourceParseError,
    SourceTimeoutError,
    SourceTransportError,
    dig,
    get_available_sources,
    get_source,
    register_source,
    to_price,
)

# Import all source implementations to trigger registration, in order
from .coingecko import CoinGeckoSource
from .binance import BinanceSource
from .coinbase import CoinbaseSource
from .cryptocompare import CryptoCompareSource

# Process-wide registry, built once
DEFAULT_SOURCES: tuple[BaseSource, ...] = tuple(
    cls() for cls in SOURCE_REGISTRY.values()
)

__all__ = [
    # Base classes
    "BaseSource",
    "SourceError",
    "SourceHTTPError",
    "SourceParseError",
    "SourceTimeoutError",
    "SourceTransportError",
    # Helpers
    "DEFAULT_TIMEOUT",
    "dig",
    "to_price",
    # Registry
    "DEFAULT_SOURCES",
    "SOURCE_REGISTRY",
    "get_available_sources",
    "get_source",
    "register_source",
    # Source implementations
    "BinanceSource",
    "CoinbaseSource",
    "CoinGeckoSource",
    "CryptoCompareSource",
]
