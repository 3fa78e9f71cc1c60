from .exchange import (
    ExchangeRequest,
    CmcQuote,
    CmcConversionData,
    CmcPriceConversionResponse,
)

__all__ = [
    # Exchange
    "ExchangeRequest",
    # CoinMarketCap payload
    "CmcQuote",
    "CmcConversionData",
    "CmcPriceConversionResponse",
]
