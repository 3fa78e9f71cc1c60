"""Test configuration and fixtures."""
import httpx
import pytest

from fxcli.core.config import Settings
from fxcli.schemas.exchange import ExchangeRequest
from fxcli.services.cmc_client import CmcClient

BASE_URL = "https://cmc.test"
API_KEY = "test-key"


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file"""
    return Settings(
        _env_file=None,
        cmc_base_url=BASE_URL,
        cmc_api_key=API_KEY,
    )


@pytest.fixture
def usd_to_btc():
    """Sample exchange request"""
    return ExchangeRequest(amount=123.45, from_symbol="USD", to_symbol="BTC")


@pytest.fixture
def make_cmc_client():
    """
    Build a CmcClient whose HTTP calls are answered by `handler`.

    `handler` receives the outgoing httpx.Request and returns an
    httpx.Response (or raises, to simulate transport failures).
    """
    def factory(handler, base_url: str = BASE_URL) -> CmcClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CmcClient(base_url, API_KEY, http_client=http_client)

    return factory


