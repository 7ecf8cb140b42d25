"""
PostgreSQL repository adapter - Implements the Storage protocol.

This module provides the PostgreSQL implementation of the domain's
storage port using psycopg3 with raw SQL.

Consistency Design:
------------------
Operations that touch more than one row run inside a single
``conn.transaction()`` block, with the rows they depend on locked via
SELECT ... FOR UPDATE:

1. **adjust_stock**: stock update and ledger insert commit together;
   a failed ledger insert rolls the stock change back.

2. **complete_registration**: user insert and pending-row delete
   commit together; the pending row is locked so two concurrent
   completions cannot both create a user.

3. **Primary address**: address writes first lock the owning users row,
   so clearing the flag on a user's other addresses and writing the new
   primary commit together and never interleave; a partial unique index
   rejects a second primary outright.

All column names equal the domain dataclass field names, so rows map
straight onto entities. Dynamic UPDATE column lists are restricted to
known fields and quoted with ``psycopg.sql.Identifier``.
"""

import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from storefront.domain.exceptions import EmailAlreadyRegistered, NotFoundError, ValidationError
from storefront.domain.inventory import clamp_stock
from storefront.domain.models import (
    ContactMessage,
    InventoryLogEntry,
    LogType,
    PendingRegistration,
    Product,
    User,
    UserAddress,
    UserPreference,
)

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def _columns(model: type, *, exclude: tuple[str, ...] = ("id",)) -> list[str]:
    return [f.name for f in fields(model) if f.name not in exclude]


def _insert_sql(table: str, columns: list[str]) -> sql.Composed:
    return sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        sql.SQL(", ").join(sql.Placeholder() for _ in columns),
    )


def _update_sql(table: str, columns: list[str], where: str) -> sql.Composed:
    return sql.SQL("UPDATE {} SET {} WHERE {} RETURNING *").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.SQL("{} = %s").format(sql.Identifier(c)) for c in columns),
        sql.SQL(where),
    )


def _checked_changes(model: type, changes: dict[str, Any]) -> dict[str, Any]:
    allowed = set(_columns(model))
    unknown = set(changes) - allowed - {"id"}
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    return {k: v for k, v in changes.items() if k in allowed}


def _log_from_row(row: dict[str, Any]) -> InventoryLogEntry:
    return InventoryLogEntry(**{**row, "type": LogType(row["type"])})


def _lock_owner(cursor: Any, user_id: int) -> None:
    """Serialize address writes per user on the owning users row."""
    cursor.execute("SELECT id FROM users WHERE id = %s FOR UPDATE", (user_id,))


class PostgresStorage:
    """
    Implements Storage protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def _fetch_one(self, query: Any, params: tuple = ()) -> dict[str, Any] | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()

    def _fetch_all(self, query: Any, params: tuple = ()) -> list[dict[str, Any]]:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            return cursor.fetchall()

    def _insert(self, table: str, entity: Any, exclude: tuple[str, ...]) -> dict[str, Any]:
        values = asdict(entity)
        columns = _columns(type(entity), exclude=exclude)
        return self._fetch_one(_insert_sql(table, columns), tuple(values[c] for c in columns))

    def _update(
        self, table: str, model: type, where: str, key: tuple, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        changes = _checked_changes(model, changes)
        if not changes:
            return self._fetch_one(
                sql.SQL("SELECT * FROM {} WHERE {}").format(sql.Identifier(table), sql.SQL(where)),
                key,
            )
        return self._fetch_one(
            _update_sql(table, list(changes), where), (*changes.values(), *key)
        )

    # Users

    def create_user(self, user: User) -> User:
        exclude = ("id",) if user.created_at else ("id", "created_at")
        return User(**self._insert("users", user, exclude))

    def get_user(self, user_id: int) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = %s", (user_id,))
        return User(**row) if row else None

    def get_user_by_email(self, email: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE email = %s", (email,))
        return User(**row) if row else None

    def update_user(self, user_id: int, **changes: Any) -> User:
        row = self._update("users", User, "id = %s", (user_id,), changes)
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)

    def list_users(self) -> list[User]:
        return [User(**row) for row in self._fetch_all("SELECT * FROM users ORDER BY id")]

    # Pending registrations

    def create_pending_registration(self, pending: PendingRegistration) -> PendingRegistration:
        """
        Upsert the pending row for an email.

        Uses INSERT ... ON CONFLICT DO UPDATE so a resend replaces the
        previous code and expiry atomically.
        """
        upsert_sql = """
            INSERT INTO pending_registrations (email, code, expires_at, created_at)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (email) DO UPDATE
            SET code = EXCLUDED.code,
                expires_at = EXCLUDED.expires_at,
                created_at = EXCLUDED.created_at
            RETURNING *
        """
        with self._pool.connection() as conn, conn.transaction():
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute("SELECT 1 FROM users WHERE email = %s", (pending.email,))
                if cursor.fetchone() is not None:
                    raise EmailAlreadyRegistered(pending.email)
                cursor.execute(
                    upsert_sql,
                    (pending.email, pending.code, pending.expires_at, pending.created_at),
                )
                return PendingRegistration(**cursor.fetchone())

    def get_pending_registration(self, email: str) -> PendingRegistration | None:
        row = self._fetch_one("SELECT * FROM pending_registrations WHERE email = %s", (email,))
        return PendingRegistration(**row) if row else None

    def complete_registration(self, email: str, password_hash: str) -> User:
        with self._pool.connection() as conn, conn.transaction():
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    "SELECT email FROM pending_registrations WHERE email = %s FOR UPDATE",
                    (email,),
                )
                if cursor.fetchone() is None:
                    raise NotFoundError("No pending registration found for this email")
                cursor.execute(
                    """
                    INSERT INTO users (email, password_hash, is_verified)
                    VALUES (%s, %s, TRUE)
                    RETURNING *
                    """,
                    (email, password_hash),
                )
                user = User(**cursor.fetchone())
                cursor.execute("DELETE FROM pending_registrations WHERE email = %s", (email,))
                return user

    # Products

    def list_products(self) -> list[Product]:
        return [Product(**row) for row in self._fetch_all("SELECT * FROM products ORDER BY id")]

    def list_featured_products(self) -> list[Product]:
        rows = self._fetch_all("SELECT * FROM products WHERE featured ORDER BY id")
        return [Product(**row) for row in rows]

    def list_products_by_category(self, category: str) -> list[Product]:
        rows = self._fetch_all(
            "SELECT * FROM products WHERE category = %s ORDER BY id", (category,)
        )
        return [Product(**row) for row in rows]

    def get_product(self, product_id: int) -> Product | None:
        row = self._fetch_one("SELECT * FROM products WHERE id = %s", (product_id,))
        return Product(**row) if row else None

    def create_product(self, product: Product) -> Product:
        return Product(**self._insert("products", product, ("id", "created_at")))

    def update_product(self, product_id: int, **changes: Any) -> Product:
        row = self._update("products", Product, "id = %s", (product_id,), changes)
        if row is None:
            raise NotFoundError("Product not found")
        return Product(**row)

    def delete_product(self, product_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM products WHERE id = %s", (product_id,))
            return cursor.rowcount == 1

    # Inventory

    def adjust_stock(
        self, product_id: int, delta: int, log_type: LogType, note: str | None
    ) -> Product:
        with self._pool.connection() as conn, conn.transaction():
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    "SELECT stock FROM products WHERE id = %s FOR UPDATE", (product_id,)
                )
                row = cursor.fetchone()
                if row is None:
                    raise NotFoundError("Product not found")

                cursor.execute(
                    "UPDATE products SET stock = %s WHERE id = %s RETURNING *",
                    (clamp_stock(row["stock"], delta), product_id),
                )
                product = Product(**cursor.fetchone())
                cursor.execute(
                    """
                    INSERT INTO inventory_logs (product_id, quantity, type, note)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (product_id, delta, LogType(log_type).value, note),
                )
                return product

    def append_inventory_log(self, entry: InventoryLogEntry) -> InventoryLogEntry:
        row = self._fetch_one(
            """
            INSERT INTO inventory_logs (product_id, quantity, type, note)
            VALUES (%s, %s, %s, %s)
            RETURNING *
            """,
            (entry.product_id, entry.quantity, LogType(entry.type).value, entry.note),
        )
        return _log_from_row(row)

    def list_inventory_logs(self, product_id: int | None = None) -> list[InventoryLogEntry]:
        if product_id is None:
            rows = self._fetch_all("SELECT * FROM inventory_logs ORDER BY timestamp DESC, id DESC")
        else:
            rows = self._fetch_all(
                """
                SELECT * FROM inventory_logs
                WHERE product_id = %s
                ORDER BY timestamp DESC, id DESC
                """,
                (product_id,),
            )
        return [_log_from_row(row) for row in rows]

    # Preferences

    def get_preferences(self, user_id: int) -> UserPreference | None:
        row = self._fetch_one("SELECT * FROM user_preferences WHERE user_id = %s", (user_id,))
        return UserPreference(**row) if row else None

    def create_preferences(self, preferences: UserPreference) -> UserPreference:
        return UserPreference(**self._insert("user_preferences", preferences, ("id",)))

    def update_preferences(self, user_id: int, **changes: Any) -> UserPreference:
        changes = _checked_changes(UserPreference, changes)
        changes.pop("user_id", None)
        row = self._update("user_preferences", UserPreference, "user_id = %s", (user_id,), changes)
        if row is not None:
            return UserPreference(**row)
        return self.create_preferences(UserPreference(user_id=user_id, **changes))

    # Addresses

    def list_addresses(self, user_id: int) -> list[UserAddress]:
        rows = self._fetch_all(
            """
            SELECT * FROM user_addresses
            WHERE user_id = %s
            ORDER BY is_primary DESC, created_at ASC, id ASC
            """,
            (user_id,),
        )
        return [UserAddress(**row) for row in rows]

    def create_address(self, address: UserAddress) -> UserAddress:
        columns = _columns(UserAddress, exclude=("id", "created_at"))
        values = asdict(address)
        with self._pool.connection() as conn, conn.transaction():
            with conn.cursor(row_factory=dict_row) as cursor:
                _lock_owner(cursor, address.user_id)
                if address.is_primary:
                    cursor.execute(
                        "UPDATE user_addresses SET is_primary = FALSE WHERE user_id = %s",
                        (address.user_id,),
                    )
                cursor.execute(
                    _insert_sql("user_addresses", columns), tuple(values[c] for c in columns)
                )
                return UserAddress(**cursor.fetchone())

    def update_address(self, address_id: int, user_id: int, **changes: Any) -> UserAddress:
        changes = _checked_changes(UserAddress, changes)
        changes.pop("user_id", None)
        with self._pool.connection() as conn, conn.transaction():
            with conn.cursor(row_factory=dict_row) as cursor:
                _lock_owner(cursor, user_id)
                cursor.execute(
                    "SELECT * FROM user_addresses WHERE id = %s AND user_id = %s FOR UPDATE",
                    (address_id, user_id),
                )
                row = cursor.fetchone()
                if row is None:
                    raise NotFoundError("Address not found or doesn't belong to user")
                if not changes:
                    return UserAddress(**row)
                if changes.get("is_primary"):
                    cursor.execute(
                        """
                        UPDATE user_addresses SET is_primary = FALSE
                        WHERE user_id = %s AND id <> %s
                        """,
                        (user_id, address_id),
                    )
                cursor.execute(
                    _update_sql("user_addresses", list(changes), "id = %s AND user_id = %s"),
                    (*changes.values(), address_id, user_id),
                )
                return UserAddress(**cursor.fetchone())

    def delete_address(self, address_id: int, user_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                "DELETE FROM user_addresses WHERE id = %s AND user_id = %s",
                (address_id, user_id),
            )
            return cursor.rowcount == 1

    # Contact

    def create_contact_message(self, message: ContactMessage) -> ContactMessage:
        return ContactMessage(**self._insert("contact_messages", message, ("id",)))


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    if not MIGRATIONS_DIR.exists():
        logger.warning(f"Migrations directory not found: {MIGRATIONS_DIR}")
        return

    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
