"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class FactorSettings(BaseSettings):
    """Trigger thresholds and weight scales for the eight signal factors.

    Percentages are in percent units (0.3 means 0.3%). All fields
    configurable via FACTOR_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="FACTOR_")

    # 1. Rate vs 30-day average
    avg_diff_threshold_pct: Decimal = Decimal("0.3")
    avg_diff_scale_pct: Decimal = Decimal("1.5")  # diff that earns full weight

    # 2. Momentum oscillator
    rsi_bullish: Decimal = Decimal("58")
    rsi_bearish: Decimal = Decimal("42")
    rsi_scale: Decimal = Decimal("40")

    # 3. Trend crossover (MACD line vs signal line)
    macd_gap_threshold: Decimal = Decimal("0.02")
    macd_gap_multiplier: Decimal = Decimal("8")

    # 4. Position in 30-day range
    percentile_bullish: Decimal = Decimal("65")
    percentile_bearish: Decimal = Decimal("35")
    percentile_scale: Decimal = Decimal("40")

    # 5. SMA7 vs SMA20
    sma_gap_scale_pct: Decimal = Decimal("0.5")
    sma_importance: Decimal = Decimal("1.5")  # most predictive near-term

    # 6. This week's movement (absolute rupee change)
    week_change_threshold: Decimal = Decimal("0.15")
    week_change_scale: Decimal = Decimal("0.4")
    week_importance: Decimal = Decimal("1.5")

    # 7. Volatility regime (30-day, percent)
    volatility_calm: Decimal = Decimal("0.8")
    volatility_risky: Decimal = Decimal("1.5")
    volatility_calm_weight: Decimal = Decimal("0.4")
    volatility_risky_weight: Decimal = Decimal("0.8")

    # 8. 90-day range position
    range_bullish: Decimal = Decimal("60")
    range_bearish: Decimal = Decimal("40")
    range_scale: Decimal = Decimal("40")


class DecisionSettings(BaseSettings):
    """Consensus gates and confidence bands for the timing decision.

    All fields configurable via DECISION_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="DECISION_")

    min_consensus_factors: int = 4
    bullish_share_threshold: Decimal = Decimal("65")  # percent of bullish + bearish weight
    bearish_share_threshold: Decimal = Decimal("60")

    # Spike detection for URGENT
    spike_percentile: Decimal = Decimal("85")
    spike_week_change: Decimal = Decimal("0.3")

    urgent_bonus: Decimal = Decimal("10")
    urgent_ceiling: Decimal = Decimal("90")
    send_bonus: Decimal = Decimal("2")
    send_ceiling: Decimal = Decimal("85")
    wait_ceiling: Decimal = Decimal("82")

    # Mixed / weak band
    mixed_min_factors: int = 3
    mixed_base: Decimal = Decimal("50")
    mixed_divisor: Decimal = Decimal("4")
    mixed_ceiling: Decimal = Decimal("62")
    neutral_confidence: Decimal = Decimal("50")


class ForecastSettings(BaseSettings):
    """Direction-score contributions for the short-horizon forecast.

    All fields configurable via FORECAST_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="FORECAST_")

    # Oscillator mean reversion tiers
    rsi_extreme_high: Decimal = Decimal("80")
    rsi_overbought: Decimal = Decimal("70")
    rsi_elevated: Decimal = Decimal("60")
    rsi_extreme_low: Decimal = Decimal("20")
    rsi_oversold: Decimal = Decimal("30")
    rsi_depressed: Decimal = Decimal("40")
    rsi_extreme_points: int = 60
    rsi_strong_points: int = 30
    rsi_mild_points: int = 10

    macd_gap_threshold: Decimal = Decimal("0.03")
    macd_points: int = 20

    sma_band: Decimal = Decimal("0.002")  # 0.2% either side of SMA20
    sma_points: int = 15

    recent_threshold_pct: Decimal = Decimal("0.15")  # last-3 vs last-7 mean
    recent_points: int = 15

    direction_threshold: int = 20
    high_volatility: Decimal = Decimal("1.2")  # 7-day volatility, percent
    directional_ceiling: int = 85
    steady_ceiling: int = 70


class BacktestSettings(BaseSettings):
    """Walk-forward backtest configuration.

    All fields configurable via BACKTEST_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="BACKTEST_")

    min_history: int = 30
    look_ahead: int = 5
    stride: int = 3
    confidence_floor: int = 60
    reference_amount: Decimal = Decimal("2000")  # AUD per notional transfer
    send_now_tolerance: Decimal = Decimal("0.997")
    wait_improvement: Decimal = Decimal("1.002")


class EngineSettings(BaseSettings):
    """Everything the analytical core reads, grouped for one-argument passing."""

    factors: FactorSettings = FactorSettings()
    decision: DecisionSettings = DecisionSettings()
    forecast: ForecastSettings = ForecastSettings()
    backtest: BacktestSettings = BacktestSettings()


class RateSourceSettings(BaseSettings):
    """Rate source selection and live-fetch parameters.

    All fields configurable via RATES_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="RATES_")

    mode: Literal["live", "synthetic"] = "live"
    wise_base_url: str = "https://wise.com/rates"
    wise_history_days: int = 30  # Wise daily history reaches back about a month
    frankfurter_base_url: str = "https://api.frankfurter.app"
    best_rate_margin: Decimal = Decimal("0.0034")  # best platform rate below mid-market
    history_days: int = 180
    request_timeout: float = 15.0
    min_history_points: int = 30  # shorter histories are rejected by every source
    synthetic_seed: int | None = None
    fallback_mid_market: Decimal = Decimal("64.10")


class CacheSettings(BaseSettings):
    """In-memory and persisted intelligence cache policy."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    ttl_seconds: int = 3600
    persisted_freshness_hours: int = 6


class StoreSettings(BaseSettings):
    """SQLite rate store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    enabled: bool = True
    db_path: str = "data/remitiq.db"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    default_amount: Decimal = Decimal("2000")
    max_amount: Decimal = Decimal("1000000")
    alert_min_target: Decimal = Decimal("55")
    alert_max_target: Decimal = Decimal("75")


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    engine: EngineSettings = EngineSettings()
    rates: RateSourceSettings = RateSourceSettings()
    cache: CacheSettings = CacheSettings()
    store: StoreSettings = StoreSettings()
    api: ApiSettings = ApiSettings()
