"""CryptoCompare source.

Endpoint: https://min-api.cryptocompare.com/data/price?fsym=BTC&tsyms=USD
Response: {"USD": 60000.12}
Rate Limit: 100,000 calls/month (free tier)
"""

import logging
from typing import Any

from .base import BaseSource, dig, register_source

logger = logging.getLogger(__name__)


@register_source
class CryptoCompareSource(BaseSource):
    """Source for the CryptoCompare min-api price endpoint.

    Errors come back as 200 responses with ``{"Response": "Error"}``.
    """

    name = "CryptoCompare"
    url = "https://min-api.cryptocompare.com/data/price?fsym=BTC&tsyms=USD"

    def extract(self, data: Any) -> Any:
        if dig(data, "Response") == "Error":
            logger.debug(f"[{self.name}] API error: {dig(data, 'Message')}")
            return None
        return dig(data, "USD")
