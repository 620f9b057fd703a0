from typing import Any, Optional, Tuple

from mcp_server.connectors.base_connector import (
    BasePriceConnector,
    CoinIdMap,
    PriceSourceError,
    to_optional_float,
    to_price,
)

COINGECKO_API_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoConnector(BasePriceConnector):
    """
    Price connector for CoinGecko

    CoinGecko is keyed by the canonical coin id, so the default map is empty.
    It is also the only source here that reports a 24h change directly.
    """

    name = "CoinGecko"
    default_id_map = CoinIdMap()

    def __init__(self, base_url: str = COINGECKO_API_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    def build_url(self, native_id: str) -> str:
        return (
            f"{self.base_url}/simple/price?ids={native_id}"
            "&vs_currencies=usd&include_24hr_change=true"
        )

    def extract(self, native_id: str, data: Any) -> Tuple[float, Optional[float]]:
        entry = data.get(native_id) if isinstance(data, dict) else None
        if not isinstance(entry, dict):
            raise PriceSourceError("Price not found")

        return to_price(entry.get("usd")), to_optional_float(entry.get("usd_24h_change"))
