"""Base price source interface and shared HTTP/JSON handling.

Every price source inherits from BaseSource, declares a ``name`` and a ``url``
and implements ``extract()``, which maps the decoded JSON body to a price.
Sources are stateless; the HTTP client is passed in by the caller so that one
client serves a whole fetch round and is closed with it.

.. code-block:: python

    @register_source
    class MySource(BaseSource):
        name = "MySource"
        url = "https://api.example.com/btc/usd"

        def extract(self, data):
            return dig(data, "price")
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar

import httpx

logger = logging.getLogger(__name__)

# Default timeout for a single source request (seconds)
DEFAULT_TIMEOUT = 10.0


class SourceError(Exception):
    """Base exception for a single source's failure."""

    pass


class SourceTransportError(SourceError):
    """Raised on network level failures (connection refused, DNS, reset)."""

    pass


class SourceTimeoutError(SourceError):
    """Raised when a source does not answer within its time budget."""

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message)


class SourceHTTPError(SourceError):
    """Raised when a source answers with a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Response body (truncated).
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class SourceParseError(SourceError):
    """Raised when the body is not JSON or carries no usable price."""

    pass


def dig(data: Any, *keys: str) -> Any:
    """Walk nested JSON objects, returning None on the first missing level.

    :param data: Decoded JSON value.
    :param keys: Keys to follow in order.
    :returns: The nested value, or None.
    """
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def to_price(value: Any) -> Decimal | None:
    """Convert an extracted value to a valid price.

    Accepts numbers and numeric strings. Anything that is not a finite,
    strictly positive number (including booleans) yields None, as does any
    value outside the range of a double, which JSON readers treat as
    Infinity or zero. Valid prices are rounded to the decimal context
    precision.

    :param value: Value returned by an extraction rule.
    :returns: Price as Decimal, or None if the value is not a usable price.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, (int, float, str)):
        try:
            price = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not price.is_finite() or price <= 0:
        return None
    if not 0 < float(price) < math.inf:
        return None
    return +price


class BaseSource(ABC):
    """Abstract base class for price sources.

    Subclasses must define:
        - name: Class variable identifying the source (e.g., "Coinbase")
        - url: Endpoint with the full query baked in
        - extract(): Pure function from decoded body to price (or None)

    :cvar name: Unique identifier for this source.
    :cvar url: Endpoint URL.
    """

    name: ClassVar[str] = ""
    url: ClassVar[str] = ""

    @abstractmethod
    def extract(self, data: Any) -> Any:
        """Extract the raw price from a decoded response body.

        Must be pure: the same body always gives the same result.

        :param data: Decoded JSON body.
        :returns: Number, numeric string, or None when absent.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    async def fetch(
        self,
        client: httpx.AsyncClient,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Decimal:
        """Fetch, decode and validate this source's price.

        :param client: HTTP client to issue the request with.
        :param timeout: Request timeout in seconds.
        :returns: Validated price.
        :raises SourceTimeoutError: On request timeout.
        :raises SourceTransportError: On network errors.
        :raises SourceHTTPError: On non-2xx response.
        :raises SourceParseError: On invalid JSON or unusable price.
        """
        response = await self._get(client, timeout)

        try:
            data = response.json(parse_float=Decimal, parse_int=Decimal)
        except ValueError as e:
            raise SourceParseError(f"Failed to parse JSON: {e}") from e

        try:
            raw = self.extract(data)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            logger.debug(f"[{self.name}] Extraction raised: {e!r}")
            raw = None

        price = to_price(raw)
        if price is None:
            raise SourceParseError("Invalid price data")
        return price

    async def _get(self, client: httpx.AsyncClient, timeout: float) -> httpx.Response:
        """Make an HTTP GET request to this source's endpoint.

        :param client: HTTP client.
        :param timeout: Request timeout in seconds.
        :returns: httpx.Response with the body fully read.
        :raises SourceHTTPError: On non-2xx response.
        :raises SourceTimeoutError: On timeout.
        :raises SourceTransportError: On other network errors.
        """
        try:
            response = await client.get(self.url, timeout=timeout)
        except httpx.TimeoutException as e:
            raise SourceTimeoutError() from e
        except httpx.RequestError as e:
            raise SourceTransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                self.url,
                response.status_code,
                response.text[:200],
            )
            raise SourceHTTPError(response.status_code, response.text[:200])
        return response


# Registry of built-in sources, in declaration order
SOURCE_REGISTRY: dict[str, type[BaseSource]] = {}


def register_source(cls: type[BaseSource]) -> type[BaseSource]:
    """Decorator to register a source class in the global registry.

    :param cls: Source class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If the source has no name or url, or the name is taken.
    """
    if not cls.name or not cls.url:
        raise ValueError(f"Source {cls.__name__} must define 'name' and 'url'")
    if cls.name in SOURCE_REGISTRY:
        raise ValueError(f"Source name '{cls.name}' is already registered")
    SOURCE_REGISTRY[cls.name] = cls
    return cls


def get_source(name: str) -> BaseSource:
    """Get a source instance by name.

    :param name: Source name (case-sensitive, e.g. "Coinbase").
    :returns: Source instance.
    :raises ValueError: If the name is unknown.
    """
    if name not in SOURCE_REGISTRY:
        available = ", ".join(SOURCE_REGISTRY.keys())
        raise ValueError(f"Unknown source '{name}'. Available: {available}")
    return SOURCE_REGISTRY[name]()


def get_available_sources() -> list[str]:
    """Get the registered source names in registry order."""
    return list(SOURCE_REGISTRY.keys())
