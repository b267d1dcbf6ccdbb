"""Coinbase source.

Endpoint: https://api.coinbase.com/v2/exchange-rates?currency=BTC
Response: {"data": {"currency": "BTC", "rates": {"USD": "60000.12", ...}}}
Rate Limit: High (no key required)
"""

from typing import Any

from .base import BaseSource, dig, register_source


@register_source
class CoinbaseSource(BaseSource):
    """Source for the Coinbase exchange rates endpoint.

    Rates are quoted as numeric strings.
    """

    name = "Coinbase"
    url = "https://api.coinbase.com/v2/exchange-rates?currency=BTC"

    def extract(self, data: Any) -> Any:
        return dig(data, "data", "rates", "USD")
