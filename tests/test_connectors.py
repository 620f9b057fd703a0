import httpx

from mcp_server.connectors import CoinbaseConnector, CoinCapConnector, CoinGeckoConnector, CoinIdMap
from tests.helpers import run


def transport_for(handler, seen=None):
    def wrapped(request):
        if seen is not None:
            seen.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped)


class TestCoinIdMap:
    def test_known_ids_are_translated(self):
        id_map = CoinIdMap({"bitcoin": "BTC"})
        assert id_map("bitcoin") == "BTC"

    def test_unknown_ids_pass_through(self):
        assert CoinIdMap({"bitcoin": "BTC"})("dogecoin") == "dogecoin"

    def test_fallback_rule(self):
        assert CoinIdMap({}, fallback=str.upper)("doge") == "DOGE"

    def test_extend_leaves_base_map_unchanged(self):
        base = CoinIdMap({"bitcoin": "BTC"})
        extended = base.extend({"cardano": "ADA"})
        assert extended("cardano") == "ADA"
        assert extended("bitcoin") == "BTC"
        assert base("cardano") == "cardano"


class TestCoinGeckoConnector:
    def test_fetch_price(self):
        seen = []
        transport = transport_for(
            lambda r: httpx.Response(200, json={"bitcoin": {"usd": 45245.0, "usd_24h_change": 1.25}}),
            seen,
        )
        quote = run(CoinGeckoConnector(transport=transport).fetch_price("bitcoin"))

        assert quote.source == "CoinGecko"
        assert quote.price == 45245.0
        assert quote.change_24h == 1.25
        assert quote.error is None
        assert seen[0].url.params["ids"] == "bitcoin"
        assert seen[0].url.params["vs_currencies"] == "usd"

    def test_missing_coin_is_a_failure(self):
        transport = transport_for(lambda r: httpx.Response(200, json={}))
        quote = run(CoinGeckoConnector(transport=transport).fetch_price("doge-unknown"))

        assert quote.price is None
        assert quote.error == "Price not found"

    def test_non_200_status(self):
        transport = transport_for(lambda r: httpx.Response(429, text="slow down"))
        quote = run(CoinGeckoConnector(transport=transport).fetch_price("bitcoin"))

        assert not quote.available
        assert quote.error == "HTTP error 429"

    def test_body_that_is_not_json(self):
        transport = transport_for(lambda r: httpx.Response(200, text="<html>oops</html>"))
        quote = run(CoinGeckoConnector(transport=transport).fetch_price("bitcoin"))

        assert not quote.available
        assert quote.error.startswith("Parse error")


class TestCoinCapConnector:
    def test_fetch_price_from_string_fields(self):
        seen = []
        transport = transport_for(
            lambda r: httpx.Response(200, json={"data": {"priceUsd": "45220.50", "changePercent24Hr": "-0.5"}}),
            seen,
        )
        quote = run(CoinCapConnector(transport=transport).fetch_price("bitcoin"))

        assert quote.price == 45220.50
        assert quote.change_24h == -0.5
        assert seen[0].url.path == "/v2/assets/bitcoin"

    def test_unreadable_price(self):
        transport = transport_for(lambda r: httpx.Response(200, json={"data": {"priceUsd": "n/a"}}))
        quote = run(CoinCapConnector(transport=transport).fetch_price("bitcoin"))

        assert not quote.available
        assert quote.error.startswith("Parse error")

    def test_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        quote = run(CoinCapConnector(transport=httpx.MockTransport(refuse)).fetch_price("bitcoin"))

        assert not quote.available
        assert quote.error.startswith("Network error")


class TestCoinbaseConnector:
    def test_known_coin_uses_ticker(self):
        seen = []
        transport = transport_for(lambda r: httpx.Response(200, json={"data": {"amount": "2400.10"}}), seen)
        quote = run(CoinbaseConnector(transport=transport).fetch_price("ethereum"))

        assert quote.price == 2400.10
        assert quote.change_24h is None
        assert seen[0].url.path == "/v2/prices/ETH-USD/spot"

    def test_unknown_coin_is_upper_cased(self):
        seen = []
        transport = transport_for(lambda r: httpx.Response(404, json={"errors": []}), seen)
        quote = run(CoinbaseConnector(transport=transport).fetch_price("doge"))

        assert seen[0].url.path == "/v2/prices/DOGE-USD/spot"
        assert quote.error == "HTTP error 404"

    def test_injected_id_map(self):
        seen = []
        transport = transport_for(lambda r: httpx.Response(200, json={"data": {"amount": "0.45"}}), seen)
        connector = CoinbaseConnector(
            transport=transport,
            id_map=CoinbaseConnector.default_id_map.extend({"cardano": "ADA"}),
        )
        quote = run(connector.fetch_price("cardano"))

        assert quote.price == 0.45
        assert seen[0].url.path == "/v2/prices/ADA-USD/spot"

    def test_timeout(self):
        def hang(request):
            raise httpx.ReadTimeout("timed out", request=request)

        quote = run(CoinbaseConnector(transport=httpx.MockTransport(hang)).fetch_price("bitcoin"))

        assert quote.error == "Request timed out"
