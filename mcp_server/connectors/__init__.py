"""
Upstream price sources for the crypto price server
"""

from mcp_server.connectors.base_connector import BasePriceConnector, CoinIdMap, PriceSourceError
from mcp_server.connectors.coinbase_connector import CoinbaseConnector
from mcp_server.connectors.coincap_connector import CoinCapConnector
from mcp_server.connectors.coingecko_connector import CoinGeckoConnector


def default_connectors(timeout: float = 5.0):
    """Create one connector per supported upstream source"""
    return [
        CoinGeckoConnector(timeout=timeout),
        CoinCapConnector(timeout=timeout),
        CoinbaseConnector(timeout=timeout),
    ]


__all__ = [
    "BasePriceConnector",
    "CoinIdMap",
    "PriceSourceError",
    "CoinGeckoConnector",
    "CoinCapConnector",
    "CoinbaseConnector",
    "default_connectors",
]
