from typing import Any, Optional, Tuple

from mcp_server.connectors.base_connector import (
    BasePriceConnector,
    CoinIdMap,
    PriceSourceError,
    to_price,
)

COINBASE_API_URL = "https://api.coinbase.com/v2"

# Coinbase quotes by ticker symbol
COINBASE_TICKERS = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "solana": "SOL",
}


class CoinbaseConnector(BasePriceConnector):
    """
    Price connector for the Coinbase spot price API

    Unknown coin ids are upper-cased and used as the ticker.
    """

    name = "Coinbase"
    default_id_map = CoinIdMap(COINBASE_TICKERS, fallback=str.upper)

    def __init__(self, base_url: str = COINBASE_API_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    def build_url(self, native_id: str) -> str:
        return f"{self.base_url}/prices/{native_id}-USD/spot"

    def extract(self, native_id: str, data: Any) -> Tuple[float, Optional[float]]:
        spot = data.get("data") if isinstance(data, dict) else None
        if not isinstance(spot, dict):
            raise PriceSourceError("Price not found")

        # The spot endpoint has no 24h change
        return to_price(spot.get("amount")), None
