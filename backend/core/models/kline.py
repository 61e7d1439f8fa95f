"""K-line (candlestick) data models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field

# Decimals travel as JSON numbers
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Timeframe(str, Enum):
    """Candle periods accepted by the market-data endpoint."""

    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1H"
    H4 = "4H"
    D1 = "1D"


class Kline(BaseModel):
    """K-line (candlestick) data model.

    Sequences of klines are ordered oldest first with strictly increasing
    timestamps. The high/low envelope is not checked against open/close.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    timeframe: str
    timestamp: int  # epoch milliseconds
    open: Price = Field(gt=0)
    high: Price = Field(gt=0)
    low: Price = Field(gt=0)
    close: Price = Field(gt=0)
    volume: Price = Field(ge=0)

    @computed_field
    @property
    def open_time(self) -> datetime:
        """Candle open time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


def closes_of(klines: list[Kline]) -> list[Decimal]:
    """Get list of close prices."""
    return [k.close for k in klines]
