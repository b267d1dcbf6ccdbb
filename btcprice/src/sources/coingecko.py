"""CoinGecko source.

Endpoint: https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd
Response: {"bitcoin": {"usd": 60000.12}}
Rate Limit: 30 calls/min (free, no key)
"""

from typing import Any

from .base import BaseSource, dig, register_source


@register_source
class CoinGeckoSource(BaseSource):
    """Source for the CoinGecko simple price endpoint."""

    name = "CoinGecko"
    url = "https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd"

    def extract(self, data: Any) -> Any:
        return dig(data, "bitcoin", "usd")
