"""
Price Server Data Models

This module defines the data models passed between the price connectors,
the aggregator and the tool handlers.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PriceQuote(BaseModel):
    """A single price reported by one upstream source"""
    source: str
    price: Optional[float] = None
    change_24h: Optional[float] = None
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.price is not None


class AggregatedPrice(BaseModel):
    """Average price of a coin over the sources that answered"""
    coin_id: str
    average_price: float
    quotes: Dict[str, Optional[float]]
    change_24h: Optional[float] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def available_sources(self) -> List[str]:
        return [source for source, price in self.quotes.items() if price is not None]


class PriceFailure(BaseModel):
    """Marks a coin id for which no source returned a price"""
    coin_id: str
    reason: str
