from typing import Any, Optional, Tuple

from mcp_server.connectors.base_connector import (
    BasePriceConnector,
    CoinIdMap,
    PriceSourceError,
    to_optional_float,
    to_price,
)

COINCAP_API_URL = "https://api.coincap.io/v2"

# CoinCap asset ids for the coins we know about
COINCAP_IDS = {
    "bitcoin": "bitcoin",
    "ethereum": "ethereum",
    "solana": "solana",
}


class CoinCapConnector(BasePriceConnector):
    """
    Price connector for CoinCap

    CoinCap returns numbers as strings: {"data": {"priceUsd": "45220.5", ...}}
    """

    name = "CoinCap"
    default_id_map = CoinIdMap(COINCAP_IDS)

    def __init__(self, base_url: str = COINCAP_API_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    def build_url(self, native_id: str) -> str:
        return f"{self.base_url}/assets/{native_id}"

    def extract(self, native_id: str, data: Any) -> Tuple[float, Optional[float]]:
        asset = data.get("data") if isinstance(data, dict) else None
        if not isinstance(asset, dict):
            raise PriceSourceError("Price not found")

        return to_price(asset.get("priceUsd")), to_optional_float(asset.get("changePercent24Hr"))
