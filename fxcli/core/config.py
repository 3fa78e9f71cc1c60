from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "fxcli"
    app_version: str = "0.1.0"
    log_level: str = "WARNING"

    # CoinMarketCap
    cmc_base_url: str = "https://sandbox-api.coinmarketcap.com"
    cmc_api_key: str = ""

    # Timeouts
    http_timeout_seconds: float = 5.0  # transport level, per request
    exchange_timeout_seconds: float = 3.0  # deadline for the whole exchange call

    class Config:
        env_prefix = "FXCLI_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        frozen = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
