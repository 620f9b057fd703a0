import httpx
import pytest

from mcp_server.aggregator import AllSourcesFailedError, PriceAggregator
from mcp_server.connectors import CoinbaseConnector, CoinCapConnector, CoinGeckoConnector
from mcp_server.models import AggregatedPrice, PriceFailure
from tests.helpers import FakeConnector, bitcoin_aggregator, run


class TestGetPrice:
    def test_average_excludes_failed_sources(self):
        aggregator = PriceAggregator([
            FakeConnector("A", {"bitcoin": 100.0}),
            FakeConnector("B", {"bitcoin": 200.0}),
            FakeConnector("C", {}),
        ])
        result = run(aggregator.get_price("bitcoin"))

        assert result.average_price == 150.0
        assert result.quotes == {"A": 100.0, "B": 200.0, "C": None}
        assert result.available_sources == ["A", "B"]

    def test_single_source_is_enough(self):
        aggregator = PriceAggregator([FakeConnector("A", {}), FakeConnector("B", {"solana": 150.25})])
        result = run(aggregator.get_price("solana"))

        assert result.average_price == 150.25

    def test_all_sources_failing_raises(self):
        aggregator = PriceAggregator([FakeConnector("A"), FakeConnector("B"), FakeConnector("C")])

        with pytest.raises(AllSourcesFailedError) as excinfo:
            run(aggregator.get_price("doge-unknown"))

        assert str(excinfo.value) == "All sources failed"
        assert [quote.source for quote in excinfo.value.quotes] == ["A", "B", "C"]

    def test_slow_source_is_treated_as_failed(self):
        result = run(bitcoin_aggregator().get_price("bitcoin"))

        assert result.average_price == pytest.approx(45232.75)
        assert result.quotes["Coinbase"] is None

    def test_sources_are_queried_concurrently(self):
        connectors = [FakeConnector(name, {"bitcoin": 10.0}, delay=0.2) for name in ("A", "B", "C")]
        # Sequential calls would need 0.6s
        aggregator = PriceAggregator(connectors, timeout=0.5)

        result = run(aggregator.get_price("bitcoin"))

        assert result.available_sources == ["A", "B", "C"]

    def test_no_connectors(self):
        with pytest.raises(ValueError):
            PriceAggregator([])

    def test_bitcoin_scenario_with_real_connectors(self):
        def coingecko(request):
            return httpx.Response(200, json={"bitcoin": {"usd": 45245.00, "usd_24h_change": 2.0}})

        def coincap(request):
            return httpx.Response(200, json={"data": {"priceUsd": "45220.50", "changePercent24Hr": "1.0"}})

        def coinbase(request):
            raise httpx.ReadTimeout("timed out", request=request)

        aggregator = PriceAggregator([
            CoinGeckoConnector(transport=httpx.MockTransport(coingecko)),
            CoinCapConnector(transport=httpx.MockTransport(coincap)),
            CoinbaseConnector(transport=httpx.MockTransport(coinbase)),
        ])
        result = run(aggregator.get_price("bitcoin"))

        assert result.average_price == 45232.75
        assert result.quotes == {"CoinGecko": 45245.00, "CoinCap": 45220.50, "Coinbase": None}
        assert result.change_24h == 1.5


class TestGetMultiplePrices:
    def test_failed_id_does_not_abort_batch(self):
        results = run(bitcoin_aggregator().get_multiple_prices(["bitcoin", "doge-unknown"]))

        assert list(results) == ["bitcoin", "doge-unknown"]
        assert isinstance(results["bitcoin"], AggregatedPrice)
        assert results["bitcoin"].average_price == pytest.approx(45232.75)
        assert isinstance(results["doge-unknown"], PriceFailure)
        assert results["doge-unknown"].reason == "All sources failed"

    def test_ids_are_fetched_one_after_the_other(self):
        connector = FakeConnector("A", {"bitcoin": 1.0, "ethereum": 2.0})
        run(PriceAggregator([connector]).get_multiple_prices(["ethereum", "bitcoin"]))

        assert connector.calls == ["ethereum", "bitcoin"]

    def test_empty_batch(self):
        assert run(bitcoin_aggregator().get_multiple_prices([])) == {}
