"""
Tools exposed by the crypto price server

Each tool has a pydantic model for its arguments, a JSON schema advertised
through tools/list, and an async handler that renders its result as text.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Type

from pydantic import BaseModel, Field

from mcp_server.aggregator import PriceAggregator
from mcp_server.models import AggregatedPrice, PriceFailure


class GetCryptoPriceArgs(BaseModel):
    coin_id: str = Field(min_length=1)


class GetMultiplePricesArgs(BaseModel):
    coin_ids: List[str]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    args_model: Type[BaseModel]
    handler: Callable[[PriceAggregator, Any], Awaitable[str]]

    def describe(self) -> Dict[str, Any]:
        """Protocol-shaped description used by tools/list"""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def format_price(price: Any) -> str:
    return f"${price:,.2f}" if price is not None else "N/A"


def format_price_result(result: AggregatedPrice) -> str:
    """Render one aggregated price as a text summary"""
    lines = [
        f"🪙 {result.coin_id.upper()}",
        f"💵 Average Price: {format_price(result.average_price)}",
        "📊 Sources:",
    ]
    for source, price in result.quotes.items():
        lines.append(f"   • {source}: {format_price(price)}")

    change = f"{result.change_24h:+.2f}%" if result.change_24h is not None else "N/A"
    lines.append(f"📈 24h Change: {change}")
    lines.append(f"⏰ Updated: {result.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC")
    return "\n".join(lines)


def format_failure(failure: PriceFailure) -> str:
    return f"🪙 {failure.coin_id.upper()}\n❌ Failed to fetch price: {failure.reason}"


async def get_crypto_price(aggregator: PriceAggregator, args: GetCryptoPriceArgs) -> str:
    result = await aggregator.get_price(args.coin_id)
    return format_price_result(result)


async def get_multiple_prices(aggregator: PriceAggregator, args: GetMultiplePricesArgs) -> str:
    results = await aggregator.get_multiple_prices(args.coin_ids)

    summaries = []
    for result in results.values():
        if isinstance(result, PriceFailure):
            summaries.append(format_failure(result))
        else:
            summaries.append(format_price_result(result))
    return "\n".join(summaries)


PRICE_TOOLS = [
    ToolDefinition(
        name="get_crypto_price",
        description="Get current price of a cryptocurrency from multiple sources",
        input_schema={
            "type": "object",
            "properties": {
                "coin_id": {
                    "type": "string",
                    "description": "Cryptocurrency ID (e.g., bitcoin, ethereum, solana)",
                }
            },
            "required": ["coin_id"],
        },
        args_model=GetCryptoPriceArgs,
        handler=get_crypto_price,
    ),
    ToolDefinition(
        name="get_multiple_prices",
        description="Get prices for multiple cryptocurrencies at once",
        input_schema={
            "type": "object",
            "properties": {
                "coin_ids": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of cryptocurrency IDs",
                }
            },
            "required": ["coin_ids"],
        },
        args_model=GetMultiplePricesArgs,
        handler=get_multiple_prices,
    ),
]
