import asyncio
import json
from typing import Dict, List, Optional

import httpx

from llm.models import EngineReply, ToolCall
from mcp_server.aggregator import PriceAggregator
from mcp_server.connectors.base_connector import BasePriceConnector
from mcp_server.dispatcher import RpcDispatcher
from mcp_server.models import PriceQuote


def run(coro):
    return asyncio.run(coro)


class FakeConnector(BasePriceConnector):
    """Connector with canned prices and an optional delay"""

    def __init__(self, name: str, prices: Optional[Dict[str, float]] = None, delay: float = 0.0):
        self.name = name
        super().__init__()
        self.prices = prices or {}
        self.delay = delay
        self.calls: List[str] = []

    def build_url(self, native_id):
        return f"https://prices.test/{native_id}"

    def extract(self, native_id, data):
        raise NotImplementedError

    async def fetch_price(self, coin_id):
        self.calls.append(coin_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if coin_id in self.prices:
            return PriceQuote(source=self.name, price=self.prices[coin_id])
        return PriceQuote(source=self.name, error="Price not found")


def bitcoin_aggregator(timeout: float = 0.3) -> PriceAggregator:
    """CoinGecko and CoinCap know bitcoin, Coinbase is too slow to answer"""
    return PriceAggregator(
        [
            FakeConnector("CoinGecko", {"bitcoin": 45245.00, "ethereum": 2400.0}),
            FakeConnector("CoinCap", {"bitcoin": 45220.50}),
            FakeConnector("Coinbase", {"bitcoin": 1.0}, delay=5.0),
        ],
        timeout=timeout,
    )


def dispatcher_transport(dispatcher: RpcDispatcher, seen: Optional[list] = None) -> httpx.MockTransport:
    """Route HTTP requests straight into a dispatcher"""

    async def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if seen is not None:
            seen.append(body)
        return httpx.Response(200, json=await dispatcher.handle(body))

    return httpx.MockTransport(handler)


def text_reply(text: str) -> EngineReply:
    return EngineReply(text=text)


def tool_reply(tool_name: str, **arguments) -> EngineReply:
    return EngineReply(tool_call=ToolCall(tool_name=tool_name, arguments=arguments))


class ScriptedLLM:
    """Reasoning engine stand-in that plays back a list of replies"""

    def __init__(self, replies=None, always=None, delay: float = 0.0):
        self.model = "scripted"
        self.replies = list(replies or [])
        self.always = always
        self.delay = delay
        self.calls = []

    async def generate(self, history, tools):
        self.calls.append((list(history), list(tools)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.always is not None:
            return self.always
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
