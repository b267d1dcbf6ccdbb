"""FetchOutcome: Tagged result of one source's fetch attempt."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class FetchOutcome:
    """Success or failure of fetching a single source.

    Exactly one of ``price`` and ``error`` is set. Use the ``ok`` and
    ``failed`` constructors rather than building instances directly.

    :ivar name: Source name.
    :ivar price: Validated price on success.
    :ivar error: Failure reason on failure.
    """

    name: str
    price: Decimal | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.price is None) == (self.error is None):
            raise ValueError("FetchOutcome needs exactly one of price or error")
        if self.price is not None and not (self.price.is_finite() and self.price > 0):
            raise ValueError(f"FetchOutcome price must be positive and finite: {self.price}")

    @classmethod
    def ok(cls, name: str, price: Decimal) -> FetchOutcome:
        return cls(name=name, price=price)

    @classmethod
    def failed(cls, name: str, error: str) -> FetchOutcome:
        return cls(name=name, error=error)

    @property
    def success(self) -> bool:
        """Check if the source produced a price."""
        return self.price is not None
