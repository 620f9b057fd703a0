import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from mcp_server.models import PriceQuote

DEFAULT_TIMEOUT = 5.0  # seconds, per upstream call


class PriceSourceError(Exception):
    """
    Raised while reading an upstream response that does not carry a usable price
    """


class CoinIdMap:
    """
    Translates canonical coin ids (e.g. "bitcoin") into the identifier a
    price source expects (e.g. "BTC").

    Ids missing from the table go through the fallback rule, which returns
    them unchanged unless another rule is given.
    """

    def __init__(
        self,
        table: Optional[Dict[str, str]] = None,
        fallback: Optional[Callable[[str], str]] = None,
    ):
        self.table = dict(table or {})
        self.fallback = fallback

    def __call__(self, coin_id: str) -> str:
        if coin_id in self.table:
            return self.table[coin_id]
        if self.fallback is not None:
            return self.fallback(coin_id)
        return coin_id

    def extend(self, entries: Dict[str, str]) -> "CoinIdMap":
        """Return a copy of this map with extra entries"""
        return CoinIdMap({**self.table, **entries}, self.fallback)


def to_price(value: Any) -> float:
    """Convert a raw upstream price field to float"""
    if value is None:
        raise PriceSourceError("Price not found")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise PriceSourceError(f"Parse error: unreadable price {value!r}")


def to_optional_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class BasePriceConnector(ABC):
    """
    Base class for all price sources to implement

    A connector is bound to exactly one upstream API. It makes one request
    per call, never retries, and reports every failure as a PriceQuote
    without a price instead of raising.
    """

    name = "base"
    default_id_map = CoinIdMap()

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        id_map: Optional[CoinIdMap] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the connector

        Args:
            timeout: Timeout for the upstream request in seconds
            id_map: Optional coin id translation, defaults to the source's table
            transport: Optional httpx transport (used to fake the upstream API)
        """
        self.timeout = timeout
        self.id_map = id_map or self.default_id_map
        self.transport = transport
        self.logger = logging.getLogger(f"mcp-server.{self.name}")

    @abstractmethod
    def build_url(self, native_id: str) -> str:
        """
        Build the upstream URL for a native coin identifier
        """
        pass

    @abstractmethod
    def extract(self, native_id: str, data: Any) -> Tuple[float, Optional[float]]:
        """
        Read the price out of a decoded response body

        Args:
            native_id: The identifier the request was made with
            data: The decoded JSON body

        Returns:
            Tuple of (price in USD, 24h change in percent or None)

        Raises:
            PriceSourceError: If the body has no usable price
        """
        pass

    async def fetch_price(self, coin_id: str) -> PriceQuote:
        """
        Fetch the current USD price of a coin from this source
        """
        native_id = self.id_map(coin_id)
        url = self.build_url(native_id)
        self.logger.info(f"{self.name} fetching: {coin_id} ({native_id})")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            return self._failure(coin_id, "Request timed out")
        except httpx.HTTPError as e:
            return self._failure(coin_id, f"Network error: {str(e) or type(e).__name__}")

        if response.status_code != 200:
            return self._failure(coin_id, f"HTTP error {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            return self._failure(coin_id, "Parse error: response is not JSON")

        try:
            price, change_24h = self.extract(native_id, data)
        except PriceSourceError as e:
            return self._failure(coin_id, str(e))

        self.logger.info(f"{self.name} price for {coin_id}: {price}")
        return PriceQuote(source=self.name, price=price, change_24h=change_24h)

    def _failure(self, coin_id: str, reason: str) -> PriceQuote:
        self.logger.error(f"{self.name} error for {coin_id}: {reason}")
        return PriceQuote(source=self.name, error=reason)
