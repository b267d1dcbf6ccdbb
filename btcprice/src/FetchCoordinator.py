"""FetchCoordinator: Concurrent one-shot fetching from all price sources.

Architecture:
    - One task per source, all started together with asyncio.gather
    - Each task is bounded by its own timeout and turns every error into a
      Failure outcome, so one source can never abort the others
    - Outcomes are returned in source order, not completion order
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx

from .FetchOutcome import FetchOutcome
from .sources import DEFAULT_TIMEOUT, SourceError

if TYPE_CHECKING:
    from .sources import BaseSource

logger = logging.getLogger(__name__)


class FetchCoordinator:
    """Fetches every source concurrently and collects one outcome per source.

    :ivar fetch_timeout: Per-source time budget in seconds.
    """

    def __init__(self, fetch_timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the coordinator.

        :param fetch_timeout: Per-source time budget (default: 10.0).
        :raises ValueError: If the timeout is not positive.
        """
        if fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")
        self.fetch_timeout = fetch_timeout

    def new_client(self) -> httpx.AsyncClient:
        """Create the HTTP client for one fetch round."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.fetch_timeout),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
            follow_redirects=True,
        )

    async def fetch_all(
        self,
        sources: Sequence[BaseSource],
        client: httpx.AsyncClient | None = None,
    ) -> list[FetchOutcome]:
        """Fetch all sources concurrently and wait for every one to finish.

        :param sources: Sources to query.
        :param client: Optional HTTP client. When omitted a client is created
            for this round and closed before returning.
        :returns: One outcome per source, in the order of ``sources``.
        """
        if not sources:
            return []

        if client is None:
            async with self.new_client() as own_client:
                return await self._gather(sources, own_client)
        return await self._gather(sources, client)

    async def _gather(
        self,
        sources: Sequence[BaseSource],
        client: httpx.AsyncClient,
    ) -> list[FetchOutcome]:
        tasks = [self.fetch_one(source, client) for source in sources]
        return list(await asyncio.gather(*tasks))

    async def fetch_one(
        self,
        source: BaseSource,
        client: httpx.AsyncClient,
    ) -> FetchOutcome:
        """Fetch a single source with timeout. Never raises.

        :param source: Source to query.
        :param client: HTTP client.
        :returns: Success with the validated price, or Failure with a reason.
        """
        try:
            price = await asyncio.wait_for(
                source.fetch(client, timeout=self.fetch_timeout),
                timeout=self.fetch_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{source.name}] Request timeout")
            return FetchOutcome.failed(source.name, "Request timeout")
        except SourceError as e:
            logger.warning(f"[{source.name}] {e}")
            return FetchOutcome.failed(source.name, str(e))
        except Exception as e:
            logger.warning(f"[{source.name}] Unexpected error: {e!r}")
            return FetchOutcome.failed(source.name, str(e) or type(e).__name__)

        logger.debug(f"[{source.name}] Price {price}")
        return FetchOutcome.ok(source.name, price)
