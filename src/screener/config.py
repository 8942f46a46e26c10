"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Binance USD-M futures public market data settings."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    timeout_ms: int = 10000
    enable_rate_limit: bool = True


class ScreenerSettings(BaseSettings):
    """Liquidity, volatility and funding-stability screen.

    All thresholds are strict except min_volatility (>=) and
    max_abs_funding_rate (<=).
    """

    model_config = SettingsConfigDict(env_prefix="SCREENER_")

    reference_symbol: str = "BTCUSDT"
    quote_asset: str = "USDT"
    min_quote_volume: Decimal = Decimal("10000000")  # 10M USDT
    min_open_interest: Decimal = Decimal("1000000")  # 1M
    min_volatility: Decimal = Decimal("2")  # abs 24h change, percentage points
    max_abs_funding_rate: Decimal = Decimal("0.001")  # 0.1%
    max_candidates: int = 5
    trend_threshold: Decimal = Decimal("1")  # reference 24h change, percent


class SentimentSettings(BaseSettings):
    """Lexicons and classification thresholds for lexical sentiment scoring."""

    model_config = SettingsConfigDict(env_prefix="SENTIMENT_", frozen=True)

    bullish_terms: tuple[str, ...] = (
        "pump",
        "moon",
        "bullish",
        "breakout",
        "ath",
        "listing",
        "rocket",
        "surge",
        "rally",
        "partnership",
        "upgrade",
    )
    bearish_terms: tuple[str, ...] = (
        "dump",
        "scam",
        "bearish",
        "rekt",
        "crash",
        "hacked",
        "sec",
        "lawsuit",
        "selloff",
        "exploit",
        "rug",
    )
    influencers: tuple[str, ...] = ("elonmusk", "cz_binance", "saylor")
    media_outlets: tuple[str, ...] = ("cointelegraph", "watcher_guru", "whalechart")

    baseline: float = 50.0
    term_weight: float = 10.0
    influencer_weight: float = 25.0
    media_weight: float = 10.0

    bullish_threshold: float = 66.0  # score >= this -> Bullish
    bearish_threshold: float = 39.0  # score <= this -> Bearish


class AdvisorySettings(BaseSettings):
    """Generative analyst (Gemini) settings."""

    model_config = SettingsConfigDict(env_prefix="ADVISORY_")

    api_key: SecretStr = SecretStr("")
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.6
    timeout_seconds: float = 60.0
    max_picks: int = 3


class ScanSettings(BaseSettings):
    """Scan cycle cadence."""

    model_config = SettingsConfigDict(env_prefix="SCAN_")

    scan_interval: int = 15 * 60  # seconds between auto-scan cycles
    status_interval: float = 1.5  # seconds between status narration updates


class ApiSettings(BaseSettings):
    """JSON API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchange: ExchangeSettings = ExchangeSettings()
    screener: ScreenerSettings = ScreenerSettings()
    sentiment: SentimentSettings = SentimentSettings()
    advisory: AdvisorySettings = AdvisorySettings()
    scan: ScanSettings = ScanSettings()
    api: ApiSettings = ApiSettings()
