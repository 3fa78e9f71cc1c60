from pydantic import BaseModel, Field, field_validator


class ExchangeRequest(BaseModel):
    """A single conversion of `amount` units of `from_symbol` into `to_symbol`"""

    amount: float = Field(..., gt=0, description="Amount to convert")
    from_symbol: str = Field(..., min_length=1, description="Source symbol, e.g. USD")
    to_symbol: str = Field(..., min_length=1, description="Destination symbol, e.g. BTC")

    model_config = {"frozen": True}

    @field_validator("from_symbol", "to_symbol")
    @classmethod
    def _uppercase(cls, value: str) -> str:
        return value.upper()


# ---------------------------------------------------------------------------
# CoinMarketCap /v2/tools/price-conversion payload
#
# {"data": {"USD": {"quote": {"BTC": {"price": 0.0000153}}}}}
#
# Only the fields the client reads are modelled. Decoding is strict, so a
# price sent as a string or boolean is rejected. Absent keys and explicit
# nulls both decode as None; the client reads them as "not there" (data,
# quote) or zero (price).
# ---------------------------------------------------------------------------


class CmcQuote(BaseModel):
    """Converted price in one destination symbol"""

    price: float | None = None

    model_config = {"strict": True}


class CmcConversionData(BaseModel):
    """Conversion data for one source symbol"""

    quote: dict[str, CmcQuote | None] | None = None

    model_config = {"strict": True}


class CmcPriceConversionResponse(BaseModel):
    """Top-level price-conversion response"""

    data: dict[str, CmcConversionData | None] | None = None

    model_config = {"strict": True}
