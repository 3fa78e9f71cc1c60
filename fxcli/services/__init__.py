# Services module - contains the provider clients

from .cmc_client import (
    CmcClient,
    CmcClientError,
    CmcTransportError,
    CmcReadError,
    CmcStatusError,
    CmcDecodeError,
    CmcMissingDataError,
    CmcMissingQuoteError,
)

__all__ = [
    "CmcClient",
    "CmcClientError",
    "CmcTransportError",
    "CmcReadError",
    "CmcStatusError",
    "CmcDecodeError",
    "CmcMissingDataError",
    "CmcMissingQuoteError",
]
