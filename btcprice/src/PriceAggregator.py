"""PriceAggregator: Average and spread over the sources that succeeded.

Algorithm:
    1. Keep only successful outcomes, in source order
    2. Fail with AllSourcesFailedError if none succeeded
    3. average = sum / number of successes
    4. min, max, spread = max - min
    5. spread_percent = spread / average * 100, rounded half-up to 2 places

.. code-block:: python

    >>> aggregator = PriceAggregator()
    >>> report = aggregator.aggregate([
    ...     FetchOutcome.ok("a", Decimal("100")),
    ...     FetchOutcome.ok("b", Decimal("102")),
    ...     FetchOutcome.failed("c", "Request timeout"),
    ... ])
    >>> report.average
    Decimal('101')
    >>> report.spread_percent
    Decimal('1.98')
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_HALF_UP,
    Decimal,
    localcontext,
)
from typing import Any

from .FetchOutcome import FetchOutcome

logger = logging.getLogger(__name__)

PERCENT_QUANTUM = Decimal("0.01")


class PriceError(Exception):
    """Base exception for conditions that reach the caller."""

    pass


class AllSourcesFailedError(PriceError):
    """Raised when no source produced a usable price.

    :ivar failures: Failure reason per source name.
    """

    def __init__(self, failures: dict[str, str]):
        self.failures = failures
        super().__init__(
            "Unable to fetch Bitcoin price. All sources are currently unavailable."
        )


@dataclass(frozen=True)
class SourcePrice:
    """Price reported by one source.

    :ivar name: Source name.
    :ivar price: Validated price.
    """

    name: str
    price: Decimal


@dataclass(frozen=True)
class AggregationReport:
    """Result of one aggregation round.

    :ivar average: Mean of the successful prices.
    :ivar min: Lowest successful price.
    :ivar max: Highest successful price.
    :ivar spread: max - min.
    :ivar spread_percent: spread as a percentage of the average, 2 decimals.
    :ivar sources: Number of sources that succeeded.
    :ivar total_sources: Number of sources queried.
    :ivar prices: Successful prices in source order.
    """

    average: Decimal
    min: Decimal
    max: Decimal
    spread: Decimal
    spread_percent: Decimal
    sources: int
    total_sources: int
    prices: tuple[SourcePrice, ...]

    def get_price(self, name: str) -> Decimal | None:
        """Return the price reported by ``name`` (exact match), if it succeeded."""
        for entry in self.prices:
            if entry.name == name:
                return entry.price
        return None

    def to_dict(self) -> dict[str, Any]:
        """Render the report with string prices for JSON output."""
        return {
            "average": str(self.average),
            "min": str(self.min),
            "max": str(self.max),
            "spread": str(self.spread),
            "spreadPercent": str(self.spread_percent),
            "sources": self.sources,
            "totalSources": self.total_sources,
            "prices": [
                {"name": entry.name, "price": str(entry.price)}
                for entry in self.prices
            ],
        }


class PriceAggregator:
    """Reduces fetch outcomes to an AggregationReport.

    Only successful outcomes take part; failures are counted in
    ``total_sources`` and otherwise ignored.
    """

    def aggregate(
        self,
        outcomes: Sequence[FetchOutcome],
        *,
        total_sources: int | None = None,
    ) -> AggregationReport:
        """Aggregate outcomes into a report.

        :param outcomes: One outcome per source, in source order.
        :param total_sources: Number of sources queried (default: len(outcomes)).
        :returns: AggregationReport over the successful outcomes.
        :raises AllSourcesFailedError: If no outcome is a success.
        """
        if total_sources is None:
            total_sources = len(outcomes)

        successful = [o for o in outcomes if o.success]
        if not successful:
            failures = {o.name: o.error or "" for o in outcomes}
            logger.error(f"All {total_sources} sources failed: {failures}")
            raise AllSourcesFailedError(failures)

        # Exact sum, one rounding on division: min <= average <= max
        prices = [+o.price for o in successful]
        with localcontext() as ctx:
            ctx.prec = MAX_PREC
            ctx.Emax = MAX_EMAX
            ctx.Emin = MIN_EMIN
            total = sum(prices, Decimal(0))
        average = total / len(prices)
        low = min(prices)
        high = max(prices)
        spread = high - low
        spread_percent = (spread / average * 100).quantize(
            PERCENT_QUANTUM, rounding=ROUND_HALF_UP
        )

        report = AggregationReport(
            average=average,
            min=low,
            max=high,
            spread=spread,
            spread_percent=spread_percent,
            sources=len(successful),
            total_sources=total_sources,
            prices=tuple(
                SourcePrice(o.name, price) for o, price in zip(successful, prices)
            ),
        )
        logger.info(
            f"Aggregated {report.sources}/{report.total_sources} sources: "
            f"average={average:.2f} spread={spread_percent}%"
        )
        return report
