"""Typed SQLite read/write abstraction for daily rates and cached intelligence.

Provides RateStore with typed methods for persisting daily AUD/INR rates,
the last computed intelligence payload, provider fee overrides and
subscriber rate alerts. All SQL is isolated behind this interface.

CRITICAL: All rate values stored as TEXT in SQLite, restored as Decimal on read.
"""

import json
import time
from datetime import date
from decimal import Decimal

from remitiq.data.database import RateDatabase
from remitiq.data.models import (
    AlertType,
    CachedIntelligence,
    DailyRate,
    ProviderConfig,
    RateAlert,
)
from remitiq.logging import get_logger
from remitiq.models import RateDataPoint

logger = get_logger(__name__)

_MS_PER_HOUR = 3_600_000

_ALERT_COLUMNS = (
    "id, email, target_rate, alert_type, is_active, "
    "created_at, triggered_at, trigger_rate"
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _opt_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _opt_str(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


class RateStore:
    """Async SQLite store for daily rates and the intelligence cache.

    Wraps RateDatabase with typed read/write methods. All SQL access
    goes through self._database.db (the aiosqlite Connection).

    Usage:
        async with RateDatabase("data/remitiq.db") as database:
            store = RateStore(database)
            await store.insert_daily_rates(points, source="frankfurter")
    """

    def __init__(self, database: RateDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Daily rates
    # ──────────────────────────────────────────────

    async def insert_daily_rate(
        self, point: RateDataPoint, source: str = "frankfurter"
    ) -> bool:
        """Insert one day, ignoring the row if that date is already stored.

        Returns True if a new row was inserted.
        """
        return await self.insert_daily_rates([point], source) == 1

    async def insert_daily_rates(
        self, points: list[RateDataPoint], source: str = "frankfurter"
    ) -> int:
        """Insert daily rates, ignoring duplicates via INSERT OR IGNORE.

        Returns the number of actually inserted rows (excludes ignored duplicates).
        """
        if not points:
            return 0

        fetched_at = _now_ms()
        data = [
            (
                p.date.isoformat(),
                str(p.mid_market),
                str(p.rate),
                _opt_str(p.volume),
                source,
                fetched_at,
            )
            for p in points
        ]

        cursor = await self._database.db.executemany(
            "INSERT OR IGNORE INTO daily_rates "
            "(date, mid_market, best_rate, volume, source, fetched_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            data,
        )
        await self._database.db.commit()

        inserted = cursor.rowcount
        logger.debug(
            "inserted_daily_rates",
            total=len(points),
            inserted=inserted,
            source=source,
        )
        return inserted

    async def get_recent_rates(self, days: int = 180) -> list[DailyRate]:
        """Get the most recent ``days`` rows, ordered oldest first."""
        cursor = await self._database.db.execute(
            "SELECT date, mid_market, best_rate, source, fetched_at, volume "
            "FROM daily_rates ORDER BY date DESC LIMIT ?",
            (days,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_daily_rate(row) for row in reversed(rows)]

    async def get_latest_rate(self) -> DailyRate | None:
        """Get the row for the most recent date, or None if the table is empty."""
        cursor = await self._database.db.execute(
            "SELECT date, mid_market, best_rate, source, fetched_at, volume "
            "FROM daily_rates ORDER BY date DESC LIMIT 1"
        )
        row = await cursor.fetchone()
        return self._row_to_daily_rate(row) if row is not None else None

    async def get_rate_count(self) -> int:
        """Total number of persisted daily rates."""
        cursor = await self._database.db.execute("SELECT COUNT(*) FROM daily_rates")
        return (await cursor.fetchone())[0]

    @staticmethod
    def _row_to_daily_rate(row: tuple) -> DailyRate:
        return DailyRate(
            date=date.fromisoformat(row[0]),
            mid_market=Decimal(row[1]),
            best_rate=Decimal(row[2]),
            source=row[3],
            fetched_at_ms=row[4],
            volume=_opt_decimal(row[5]),
        )

    # ──────────────────────────────────────────────
    # Intelligence cache
    # ──────────────────────────────────────────────

    async def cache_intelligence(
        self,
        payload: dict,
        mid_market_rate: Decimal,
        data_source: str,
        computed_at_ms: int | None = None,
    ) -> None:
        """Replace the cached intelligence payload with a new one."""
        computed_at = computed_at_ms if computed_at_ms is not None else _now_ms()
        await self._database.db.execute(
            "INSERT OR REPLACE INTO intelligence_cache "
            "(id, computed_at, mid_market_rate, data_source, data_json) "
            "VALUES (1, ?, ?, ?, ?)",
            (computed_at, str(mid_market_rate), data_source, json.dumps(payload)),
        )
        await self._database.db.commit()
        logger.debug("intelligence_cached", computed_at=computed_at, data_source=data_source)

    async def get_cached_intelligence(self) -> CachedIntelligence | None:
        """Return the cached payload, or None if nothing has been cached yet."""
        cursor = await self._database.db.execute(
            "SELECT computed_at, mid_market_rate, data_source, data_json "
            "FROM intelligence_cache WHERE id = 1"
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return CachedIntelligence(
            computed_at_ms=row[0],
            mid_market_rate=Decimal(row[1]),
            data_source=row[2],
            payload=json.loads(row[3]),
        )

    async def is_intelligence_fresh(
        self, max_age_hours: int = 24, now_ms: int | None = None
    ) -> bool:
        """True if a cached payload exists and is younger than ``max_age_hours``."""
        cached = await self.get_cached_intelligence()
        if cached is None:
            return False
        now = now_ms if now_ms is not None else _now_ms()
        return now - cached.computed_at_ms < max_age_hours * _MS_PER_HOUR

    # ──────────────────────────────────────────────
    # Provider configs
    # ──────────────────────────────────────────────

    async def upsert_provider_config(self, config: ProviderConfig) -> None:
        """Insert or update a provider's margin and fee override."""
        await self._database.db.execute(
            "INSERT OR REPLACE INTO provider_configs "
            "(provider_id, margin_pct, base_fee, fee_pct, promo_margin_pct, promo_cap, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                config.provider_id,
                str(config.margin_pct),
                str(config.base_fee),
                str(config.fee_pct),
                _opt_str(config.promo_margin_pct),
                _opt_str(config.promo_cap),
                _now_ms(),
            ),
        )
        await self._database.db.commit()
        logger.info("provider_config_updated", provider_id=config.provider_id)

    async def get_provider_configs(self) -> list[ProviderConfig]:
        """All stored provider overrides, ordered by provider id."""
        cursor = await self._database.db.execute(
            "SELECT provider_id, margin_pct, base_fee, fee_pct, "
            "promo_margin_pct, promo_cap, updated_at "
            "FROM provider_configs ORDER BY provider_id"
        )
        rows = await cursor.fetchall()
        return [
            ProviderConfig(
                provider_id=row[0],
                margin_pct=Decimal(row[1]),
                base_fee=Decimal(row[2]),
                fee_pct=Decimal(row[3]),
                promo_margin_pct=_opt_decimal(row[4]),
                promo_cap=_opt_decimal(row[5]),
                updated_at_ms=row[6],
            )
            for row in rows
        ]

    # ──────────────────────────────────────────────
    # Rate alerts
    # ──────────────────────────────────────────────

    async def insert_rate_alert(
        self,
        email: str,
        target_rate: Decimal,
        alert_type: AlertType = AlertType.BOTH,
    ) -> int:
        """Store a new active alert and return its id."""
        cursor = await self._database.db.execute(
            "INSERT INTO rate_alerts (email, target_rate, alert_type, created_at) "
            "VALUES (?, ?, ?, ?)",
            (email, str(target_rate), alert_type.value, _now_ms()),
        )
        await self._database.db.commit()
        alert_id = cursor.lastrowid
        logger.info(
            "rate_alert_created",
            alert_id=alert_id,
            target_rate=str(target_rate),
            alert_type=alert_type.value,
        )
        return alert_id

    async def get_rate_alert(self, alert_id: int) -> RateAlert | None:
        cursor = await self._database.db.execute(
            f"SELECT {_ALERT_COLUMNS} FROM rate_alerts WHERE id = ?",
            (alert_id,),
        )
        row = await cursor.fetchone()
        return self._row_to_alert(row) if row is not None else None

    async def get_active_rate_alerts(self, current_rate: Decimal) -> list[RateAlert]:
        """Active rate-target alerts whose target is at or below ``current_rate``.

        Targets are stored as TEXT, so the threshold is applied on the
        restored Decimals rather than in SQL.
        """
        cursor = await self._database.db.execute(
            f"SELECT {_ALERT_COLUMNS} FROM rate_alerts "
            "WHERE is_active = 1 AND alert_type IN (?, ?) ORDER BY id",
            (AlertType.RATE.value, AlertType.BOTH.value),
        )
        rows = await cursor.fetchall()
        alerts = [self._row_to_alert(row) for row in rows]
        return [a for a in alerts if a.target_rate <= current_rate]

    async def mark_alert_triggered(
        self,
        alert_id: int,
        trigger_rate: Decimal,
        triggered_at_ms: int | None = None,
    ) -> int:
        """Deactivate an alert and record the rate that fired it.

        Returns the trigger timestamp in epoch milliseconds.
        """
        triggered_at = triggered_at_ms if triggered_at_ms is not None else _now_ms()
        await self._database.db.execute(
            "UPDATE rate_alerts SET is_active = 0, triggered_at = ?, trigger_rate = ? "
            "WHERE id = ?",
            (triggered_at, str(trigger_rate), alert_id),
        )
        await self._database.db.commit()
        logger.info("rate_alert_triggered", alert_id=alert_id, trigger_rate=str(trigger_rate))
        return triggered_at

    async def get_alert_counts(self) -> tuple[int, int]:
        """Return (active, total) alert counts."""
        cursor = await self._database.db.execute(
            "SELECT COALESCE(SUM(is_active), 0), COUNT(*) FROM rate_alerts"
        )
        active, total = await cursor.fetchone()
        return active, total

    @staticmethod
    def _row_to_alert(row: tuple) -> RateAlert:
        return RateAlert(
            id=row[0],
            email=row[1],
            target_rate=Decimal(row[2]),
            alert_type=AlertType(row[3]),
            is_active=bool(row[4]),
            created_at_ms=row[5],
            triggered_at_ms=row[6],
            trigger_rate=_opt_decimal(row[7]),
        )
