"""Binance source.

Binance has no BTC/USD spot market, so the BTC/USDT ticker stands in for it.

Endpoint: https://api.binance.com/api/v3/ticker/price?symbol=BTCUSDT
Response: {"symbol": "BTCUSDT", "price": "60000.12000000"}
Rate Limit: High (no key required for public endpoints)
"""

from typing import Any

from .base import BaseSource, dig, register_source


@register_source
class BinanceSource(BaseSource):
    """Source for the Binance ticker price endpoint.

    The price is a numeric string.
    """

    name = "Binance"
    url = "https://api.binance.com/api/v3/ticker/price?symbol=BTCUSDT"

    def extract(self, data: Any) -> Any:
        return dig(data, "price")
