"""
CoinMarketCap Price Conversion Client

Converts an amount between two symbols with a single call to
GET /v2/tools/price-conversion and returns the converted price.

Every failure point raises its own exception type so callers can tell a
network problem from a bad status, a broken payload or an unknown symbol.
Task cancellation and caller deadlines are never caught here; they reach
the caller as asyncio.CancelledError / TimeoutError.
"""

import logging

import httpx
from pydantic import ValidationError

from fxcli.schemas.exchange import (
    CmcConversionData,
    CmcPriceConversionResponse,
    ExchangeRequest,
)

logger = logging.getLogger(__name__)

# Constants
PRICE_CONVERSION_PATH = "/v2/tools/price-conversion"
API_KEY_HEADER = "X-CMC_PRO_API_KEY"
DEFAULT_TIMEOUT = 5.0  # seconds, transport level


class CmcClientError(Exception):
    """Base exception for the CoinMarketCap client"""
    pass


class CmcTransportError(CmcClientError):
    """Request could not be sent or no response was received"""
    pass


class CmcReadError(CmcClientError):
    """Response body could not be read"""
    pass


class CmcStatusError(CmcClientError):
    """Provider answered with a status other than 200"""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"CMC unexpected status code: {status}")


class CmcDecodeError(CmcClientError):
    """Response body is not a valid price-conversion payload"""
    pass


class CmcMissingDataError(CmcClientError):
    """Source symbol is absent from the response data"""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f'missing data for "{symbol}"')


class CmcMissingQuoteError(CmcClientError):
    """Destination symbol is absent from the source symbol's quotes"""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f'missing quote for "{symbol}"')


class CmcClient:
    """
    Client for the CoinMarketCap price-conversion endpoint.

    Holds only immutable configuration (base URL, API key, timeout) and a
    lazily created HTTP client, so one instance can serve any number of
    sequential exchanges.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        try:
            self.base_url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise CmcClientError(f"failed to create api client: {e}") from e

        self._api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for API calls"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "CmcClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # =========================================================================
    # Exchange
    # =========================================================================

    async def exchange(self, request: ExchangeRequest) -> float:
        """
        Convert request.amount of request.from_symbol into request.to_symbol.

        Args:
            request: validated exchange request (symbols already uppercase)

        Returns:
            price found at data[from].quote[to].price, unchecked

        Raises:
            CmcTransportError: request could not be sent
            CmcReadError: response body could not be read
            CmcStatusError: status other than 200
            CmcDecodeError: body is not a price-conversion payload
            CmcMissingDataError: source symbol absent
            CmcMissingQuoteError: destination symbol absent
        """
        client = await self._get_http_client()
        http_request = self._build_request(client, request)

        logger.debug(f"Requesting price conversion: {http_request.url}")

        try:
            response = await client.send(http_request, stream=True)
        except httpx.TransportError as e:
            logger.warning(f"CMC request failed: {e!r}")
            raise CmcTransportError(f"could not get data from CMC: {e}") from e

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            logger.warning(f"CMC response read failed: {e!r}")
            raise CmcReadError(f"could not read data from CMC: {e}") from e
        finally:
            await response.aclose()

        if response.status_code != httpx.codes.OK:
            logger.warning(f"CMC returned status {response.status_code}")
            raise CmcStatusError(response.status_code, response.reason_phrase)

        payload = self._decode(body)

        # null behaves like an empty object: keys under it are simply absent
        conversions = payload.data or {}
        if request.from_symbol not in conversions:
            raise CmcMissingDataError(request.from_symbol)

        data = conversions[request.from_symbol] or CmcConversionData()
        quotes = data.quote or {}
        if request.to_symbol not in quotes:
            raise CmcMissingQuoteError(request.to_symbol)

        quote = quotes[request.to_symbol]
        price = quote.price if quote is not None and quote.price is not None else 0.0

        logger.debug(
            f"Converted {request.from_symbol} -> {request.to_symbol}: {price}"
        )
        return price

    def _build_request(
        self,
        client: httpx.AsyncClient,
        request: ExchangeRequest,
    ) -> httpx.Request:
        """Build the authenticated price-conversion GET request"""
        try:
            url = self.base_url.join(PRICE_CONVERSION_PATH)
            return client.build_request(
                "GET",
                url,
                params={
                    "amount": f"{request.amount:.2f}",
                    "symbol": request.from_symbol,
                    "convert": request.to_symbol,
                },
                headers={
                    "Accept": "application/json",
                    API_KEY_HEADER: self._api_key,
                },
            )
        except httpx.InvalidURL as e:
            raise CmcClientError(f"could not create request: {e}") from e

    @staticmethod
    def _decode(body: bytes) -> CmcPriceConversionResponse:
        """Decode a price-conversion payload"""
        try:
            return CmcPriceConversionResponse.model_validate_json(body)
        except ValidationError as e:
            raise CmcDecodeError(f"could not decode data from CMC: {e}") from e
