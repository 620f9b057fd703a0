import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Union

from mcp_server.connectors.base_connector import BasePriceConnector
from mcp_server.models import AggregatedPrice, PriceFailure, PriceQuote

logger = logging.getLogger("mcp-server.aggregator")

DEFAULT_TIMEOUT = 5.0  # seconds, for the whole fan-out


class PriceAggregationError(Exception):
    """Base error for price aggregation"""


class AllSourcesFailedError(PriceAggregationError):
    """Raised when no source returned a price for a coin"""

    def __init__(self, coin_id: str, quotes: Sequence[PriceQuote] = ()):
        self.coin_id = coin_id
        self.quotes = list(quotes)
        super().__init__("All sources failed")


class PriceAggregator:
    """
    Fans a price request out to every connector in parallel and averages
    whatever comes back within the timeout.
    """

    def __init__(self, connectors: Sequence[BasePriceConnector], timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the aggregator.

        Args:
            connectors: Price sources to query, in display order
            timeout: Overall wait bound in seconds; sources still pending
                after it are treated as failed for that request
        """
        if not connectors:
            raise ValueError("PriceAggregator needs at least one connector")

        self.connectors = list(connectors)
        self.timeout = timeout

    @property
    def source_names(self) -> List[str]:
        return [connector.name for connector in self.connectors]

    async def get_price(self, coin_id: str) -> AggregatedPrice:
        """
        Get the average price of a coin over all sources that answered.

        Args:
            coin_id: Canonical coin id, e.g. "bitcoin"

        Returns:
            The aggregated price

        Raises:
            AllSourcesFailedError: If no source returned a price
        """
        logger.info(f"Aggregating prices for {coin_id} from {len(self.connectors)} sources in parallel")

        quotes = await self._fetch_all(coin_id)
        prices = [quote.price for quote in quotes if quote.available]

        if not prices:
            reasons = ", ".join(f"{quote.source}: {quote.error}" for quote in quotes)
            logger.error(f"All sources failed for {coin_id} ({reasons})")
            raise AllSourcesFailedError(coin_id, quotes)

        changes = [quote.change_24h for quote in quotes if quote.available and quote.change_24h is not None]

        result = AggregatedPrice(
            coin_id=coin_id,
            average_price=sum(prices) / len(prices),
            quotes={quote.source: quote.price for quote in quotes},
            change_24h=sum(changes) / len(changes) if changes else None,
        )
        logger.info(
            f"Average price for {coin_id}: {result.average_price:.2f} "
            f"from {len(prices)}/{len(quotes)} sources"
        )
        return result

    async def get_multiple_prices(
        self, coin_ids: Sequence[str]
    ) -> Dict[str, Union[AggregatedPrice, PriceFailure]]:
        """
        Get prices for several coins, one after the other.

        A coin for which every source fails is reported as a PriceFailure
        and does not abort the rest of the batch.
        """
        results: Dict[str, Union[AggregatedPrice, PriceFailure]] = {}

        for coin_id in coin_ids:
            try:
                results[coin_id] = await self.get_price(coin_id)
            except PriceAggregationError as e:
                results[coin_id] = PriceFailure(coin_id=coin_id, reason=str(e))

        return results

    async def _fetch_all(self, coin_id: str) -> List[PriceQuote]:
        tasks = [
            asyncio.ensure_future(connector.fetch_price(coin_id))
            for connector in self.connectors
        ]
        done, pending = await asyncio.wait(tasks, timeout=self.timeout)

        # Late results are discarded
        for task in pending:
            task.cancel()

        quotes = []
        for connector, task in zip(self.connectors, tasks):
            quotes.append(self._collect(connector, task, done))
        return quotes

    @staticmethod
    def _collect(connector: BasePriceConnector, task: asyncio.Future, done: set) -> PriceQuote:
        if task not in done:
            logger.warning(f"{connector.name} did not answer within the aggregation timeout")
            return PriceQuote(source=connector.name, error="Timed out")

        error: Optional[BaseException] = task.exception()
        if error is not None:
            logger.error(f"{connector.name} raised while fetching: {error}")
            return PriceQuote(source=connector.name, error=str(error) or type(error).__name__)

        return task.result()
