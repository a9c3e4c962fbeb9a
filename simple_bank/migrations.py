"""
Database Migration System

Simple migration system for managing the ledger schema without external
dependencies. Supports both PostgreSQL and SQLite backends; the in-memory
backend has implicit tables and treats every migration as applied.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
import hashlib
import logging

from .storage import StorageInterface


logger = logging.getLogger("simple_bank.migrations")


# Dialect-specific column fragments substituted into the DDL templates
DIALECT_TYPES = {
    "sqlite": {
        "pk": "INTEGER PRIMARY KEY AUTOINCREMENT",
        "timestamp": "TEXT NOT NULL",
    },
    "postgresql": {
        "pk": "BIGSERIAL PRIMARY KEY",
        "timestamp": "TIMESTAMPTZ NOT NULL DEFAULT now()",
    },
}

SCHEMA_MIGRATIONS_TABLE = "schema_migrations"


class Migration:
    """Represents a single database migration"""

    def __init__(self, version: int, name: str, up_sql: str, down_sql: Optional[str] = None):
        self.version = version
        self.name = name
        self.up_sql = up_sql
        self.down_sql = down_sql
        self.applied_at: Optional[datetime] = None

    def render_up(self, dialect: str) -> str:
        return self.up_sql.format(**DIALECT_TYPES[dialect])

    def render_down(self, dialect: str) -> Optional[str]:
        if self.down_sql is None:
            return None
        return self.down_sql.format(**DIALECT_TYPES[dialect])

    def __str__(self) -> str:
        return f"Migration v{self.version:03d}: {self.name}"

    def __repr__(self) -> str:
        return f"Migration(version={self.version}, name='{self.name}')"


class MigrationManager:
    """Manages database migrations"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.migrations: List[Migration] = []
        self._init_migrations()
        if self.uses_sql:
            self._ensure_migration_table()

    @property
    def uses_sql(self) -> bool:
        return self.storage.dialect in DIALECT_TYPES

    def _init_migrations(self) -> None:
        """Initialize built-in migrations"""

        self.add_migration(1, "Create users table", """
            CREATE TABLE users (
                id {pk},
                username VARCHAR NOT NULL,
                full_name VARCHAR NOT NULL,
                email VARCHAR NOT NULL,
                created_at {timestamp},
                CONSTRAINT users_username_key UNIQUE (username)
            );
        """, """
            DROP TABLE users;
        """)

        self.add_migration(2, "Create accounts table", """
            CREATE TABLE accounts (
                id {pk},
                owner VARCHAR NOT NULL REFERENCES users (username),
                balance BIGINT NOT NULL,
                currency VARCHAR NOT NULL,
                created_at {timestamp},
                CONSTRAINT accounts_owner_currency_key UNIQUE (owner, currency)
            );
            CREATE INDEX accounts_owner_idx ON accounts (owner);
        """, """
            DROP TABLE accounts;
        """)

        self.add_migration(3, "Create transfers table", """
            CREATE TABLE transfers (
                id {pk},
                from_account_id BIGINT NOT NULL REFERENCES accounts (id),
                to_account_id BIGINT NOT NULL REFERENCES accounts (id),
                amount BIGINT NOT NULL,
                created_at {timestamp},
                CONSTRAINT transfers_amount_positive CHECK (amount > 0),
                CONSTRAINT transfers_distinct_accounts CHECK (from_account_id <> to_account_id)
            );
            CREATE INDEX transfers_from_account_id_idx ON transfers (from_account_id);
            CREATE INDEX transfers_to_account_id_idx ON transfers (to_account_id);
            CREATE INDEX transfers_from_to_idx ON transfers (from_account_id, to_account_id);
        """, """
            DROP TABLE transfers;
        """)

        # amount is signed: negative for the debited side
        self.add_migration(4, "Create entries table", """
            CREATE TABLE entries (
                id {pk},
                account_id BIGINT NOT NULL REFERENCES accounts (id),
                transfer_id BIGINT NOT NULL REFERENCES transfers (id),
                amount BIGINT NOT NULL,
                created_at {timestamp}
            );
            CREATE INDEX entries_account_id_idx ON entries (account_id);
            CREATE INDEX entries_transfer_id_idx ON entries (transfer_id);
        """, """
            DROP TABLE entries;
        """)

    def _ensure_migration_table(self) -> None:
        """Ensure the migration tracking table exists"""
        self.storage.execute_script(f"""
            CREATE TABLE IF NOT EXISTS {SCHEMA_MIGRATIONS_TABLE} (
                version INTEGER PRIMARY KEY,
                name VARCHAR NOT NULL,
                checksum VARCHAR NOT NULL,
                applied_at VARCHAR NOT NULL
            );
        """)

    def add_migration(self, version: int, name: str, up_sql: str, down_sql: Optional[str] = None) -> None:
        """Add a migration to the manager"""
        if any(m.version == version for m in self.migrations):
            raise ValueError(f"Duplicate migration version {version}")
        migration = Migration(version, name, up_sql, down_sql)
        self.migrations.append(migration)
        # Keep migrations sorted by version
        self.migrations.sort(key=lambda m: m.version)

    @property
    def latest_version(self) -> int:
        return max((m.version for m in self.migrations), default=0)

    def get_current_version(self) -> int:
        """Get the current database version"""
        if not self.uses_sql:
            return self.latest_version
        rows = self.storage.query(f"SELECT MAX(version) AS version FROM {SCHEMA_MIGRATIONS_TABLE}")
        if not rows or rows[0]["version"] is None:
            return 0
        return int(rows[0]["version"])

    def get_pending_migrations(self, target_version: Optional[int] = None) -> List[Migration]:
        """Get list of pending migrations"""
        current_version = self.get_current_version()
        max_version = target_version or self.latest_version

        return [m for m in self.migrations if current_version < m.version <= max_version]

    def get_applied_migrations(self) -> List[Dict[str, Any]]:
        """Get list of applied migrations"""
        if not self.uses_sql:
            return []
        return self.storage.query(
            f"SELECT version, name, checksum, applied_at FROM {SCHEMA_MIGRATIONS_TABLE} ORDER BY version"
        )

    def migrate_up(self, target_version: Optional[int] = None) -> List[Migration]:
        """Apply pending migrations up to target version"""
        pending = self.get_pending_migrations(target_version)
        applied = []

        if not pending:
            logger.info("No pending migrations to apply")
            return applied

        logger.info(f"Applying {len(pending)} pending migrations")

        for migration in pending:
            try:
                logger.info(f"Applying {migration}")
                applied_at = datetime.now(timezone.utc).isoformat()
                self._execute_in_transaction(
                    migration.render_up(self.storage.dialect),
                    f"INSERT INTO {SCHEMA_MIGRATIONS_TABLE} (version, name, checksum, applied_at) "
                    f"VALUES ({migration.version}, {_quote(migration.name)}, "
                    f"{_quote(self._calculate_checksum(migration.up_sql))}, {_quote(applied_at)});"
                )
                migration.applied_at = datetime.fromisoformat(applied_at)
                applied.append(migration)
                logger.info(f"Successfully applied {migration}")

            except Exception as e:
                logger.error(f"Failed to apply {migration}: {e}")
                raise RuntimeError(f"Migration failed: {migration}") from e

        logger.info(f"Successfully applied {len(applied)} migrations")
        return applied

    def migrate_down(self, target_version: int) -> List[Migration]:
        """Rollback migrations down to target version"""
        current_version = self.get_current_version()

        if not self.uses_sql or target_version >= current_version:
            logger.info("Target version is not lower than current version")
            return []

        rollback_migrations = [
            m for m in reversed(self.migrations)
            if target_version < m.version <= current_version
        ]

        rolledback = []

        logger.info(f"Rolling back {len(rollback_migrations)} migrations")

        for migration in rollback_migrations:
            down_sql = migration.render_down(self.storage.dialect)
            if not down_sql:
                raise RuntimeError(f"No rollback SQL for {migration}")

            try:
                logger.info(f"Rolling back {migration}")
                self._execute_in_transaction(
                    down_sql,
                    f"DELETE FROM {SCHEMA_MIGRATIONS_TABLE} WHERE version = {migration.version};"
                )
                rolledback.append(migration)
                logger.info(f"Successfully rolled back {migration}")

            except Exception as e:
                logger.error(f"Failed to rollback {migration}: {e}")
                raise RuntimeError(f"Rollback failed: {migration}") from e

        logger.info(f"Successfully rolled back {len(rolledback)} migrations")
        return rolledback

    def _execute_in_transaction(self, *statements: str) -> None:
        """Run DDL plus its bookkeeping statement as one script"""
        script = "\n".join(statements)
        if self.storage.dialect == "sqlite":
            # executescript commits implicitly, so the script carries its own transaction
            script = f"BEGIN;\n{script}\nCOMMIT;"
        logger.debug(f"Executing SQL: {script[:100]}...")
        self.storage.execute_script(script)

    def _calculate_checksum(self, sql: str) -> str:
        """Calculate checksum for migration SQL"""
        return hashlib.md5(sql.encode()).hexdigest()

    def validate_migrations(self) -> bool:
        """Validate that applied migrations match expected checksums"""
        for applied_migration in self.get_applied_migrations():
            version = applied_migration["version"]
            stored_checksum = applied_migration.get("checksum", "")

            migration = next((m for m in self.migrations if m.version == version), None)
            if not migration:
                logger.warning(f"Applied migration v{version} not found in definitions")
                continue

            expected_checksum = self._calculate_checksum(migration.up_sql)
            if stored_checksum != expected_checksum:
                logger.error(f"Checksum mismatch for v{version}: expected {expected_checksum}, got {stored_checksum}")
                return False

        logger.info("All applied migrations validated successfully")
        return True

    def get_migration_status(self) -> Dict[str, Any]:
        """Get detailed migration status"""
        current_version = self.get_current_version()
        pending = self.get_pending_migrations()
        applied = self.get_applied_migrations()

        return {
            "dialect": self.storage.dialect,
            "current_version": current_version,
            "latest_version": self.latest_version,
            "pending_count": len(pending),
            "applied_count": len(applied),
            "pending_migrations": [
                {"version": m.version, "name": m.name} for m in pending
            ],
            "needs_migration": len(pending) > 0
        }


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"
