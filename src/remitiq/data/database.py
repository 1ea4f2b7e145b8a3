"""SQLite connection and schema management for the rate store.

The schema is built from an ordered list of migrations. On connect, every
migration newer than the stored ``schema_version`` is applied in order, so an
existing database file picks up new tables without being recreated.
"""

import os
from typing import Self

import aiosqlite

from remitiq.logging import get_logger

logger = get_logger(__name__)

_MEMORY_PATH = ":memory:"

#: (version, script). Versions are contiguous and start at 1.
MIGRATIONS: tuple[tuple[int, str], ...] = (
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS daily_rates (
            date TEXT PRIMARY KEY,
            mid_market TEXT NOT NULL,
            best_rate TEXT NOT NULL,
            volume TEXT,
            source TEXT NOT NULL DEFAULT 'frankfurter',
            fetched_at INTEGER NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_daily_rates_date ON daily_rates(date DESC);

        CREATE TABLE IF NOT EXISTS intelligence_cache (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            computed_at INTEGER NOT NULL,
            mid_market_rate TEXT NOT NULL,
            data_source TEXT NOT NULL,
            data_json TEXT NOT NULL
        );
        """,
    ),
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS provider_configs (
            provider_id TEXT PRIMARY KEY,
            margin_pct TEXT NOT NULL,
            base_fee TEXT NOT NULL,
            fee_pct TEXT NOT NULL,
            promo_margin_pct TEXT,
            promo_cap TEXT,
            updated_at INTEGER NOT NULL
        );
        """,
    ),
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS rate_alerts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL,
            target_rate TEXT NOT NULL,
            alert_type TEXT NOT NULL DEFAULT 'both',
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at INTEGER NOT NULL,
            triggered_at INTEGER,
            trigger_rate TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_rate_alerts_active ON rate_alerts(is_active, alert_type);
        """,
    ),
)

SCHEMA_VERSION = MIGRATIONS[-1][0]


class RateDatabase:
    """Owns the aiosqlite connection for the rate store.

    File databases run in WAL mode; ``":memory:"`` databases (tests) skip
    directory creation and the journal pragma.

    Usage:
        async with RateDatabase("data/remitiq.db") as database:
            store = RateStore(database)
    """

    def __init__(self, db_path: str = "data/remitiq.db") -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection.

        Raises:
            RuntimeError: If ``connect()`` has not been awaited.
        """
        if self._conn is None:
            raise RuntimeError("Rate database is not connected; await connect() first")
        return self._conn

    async def connect(self) -> None:
        """Open the connection and bring the schema up to date."""
        file_backed = self._db_path != _MEMORY_PATH
        if file_backed:
            parent = os.path.dirname(self._db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)

        self._conn = await aiosqlite.connect(self._db_path)
        if file_backed:
            await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA synchronous=NORMAL")

        applied = await self._migrate()
        logger.info(
            "rate_db_connected",
            db_path=self._db_path,
            schema_version=await self.schema_version(),
            migrations_applied=applied,
        )

    async def schema_version(self) -> int:
        """Highest applied migration, 0 for a fresh database."""
        await self.db.execute(
            "CREATE TABLE IF NOT EXISTS schema_version (version INTEGER PRIMARY KEY)"
        )
        cursor = await self.db.execute("SELECT MAX(version) FROM schema_version")
        row = await cursor.fetchone()
        return row[0] if row and row[0] is not None else 0

    async def _migrate(self) -> int:
        current = await self.schema_version()
        pending = [(v, script) for v, script in MIGRATIONS if v > current]

        for version, script in pending:
            await self.db.executescript(script)
            await self.db.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            await self.db.commit()
            logger.info("schema_migrated", version=version)

        return len(pending)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("rate_db_closed", db_path=self._db_path)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
