import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from core.config import DB_PATH
from .errors import DuplicateKey, StoreUnavailable, ValidationFailed

log = logging.getLogger(__name__)

DB_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS products (
  id           INTEGER PRIMARY KEY,
  name         TEXT NOT NULL,
  description  TEXT NOT NULL,
  price        INTEGER NOT NULL,
  stock        INTEGER NOT NULL,
  category     TEXT NOT NULL,                -- bento | fruit
  image_url    TEXT NOT NULL,
  created_at   TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);
CREATE INDEX IF NOT EXISTS idx_products_name ON products(name);

CREATE TABLE IF NOT EXISTS orders (
  id           INTEGER PRIMARY KEY,
  user_id      INTEGER NOT NULL,
  order_date   TEXT NOT NULL,
  status       TEXT NOT NULL,                -- pending | processing | shipped | delivered | cancelled
  total_price  INTEGER NOT NULL,
  items_json   TEXT NOT NULL                 -- snapshot of OrderItem list
);
CREATE INDEX IF NOT EXISTS idx_orders_user_id ON orders(user_id);
CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status);
CREATE INDEX IF NOT EXISTS idx_orders_order_date ON orders(order_date);

CREATE TABLE IF NOT EXISTS users (
  id           INTEGER PRIMARY KEY,
  name         TEXT NOT NULL,
  email        TEXT NOT NULL,
  role         TEXT NOT NULL DEFAULT 'user', -- user | admin
  created_at   TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users(email);

CREATE TABLE IF NOT EXISTS cart (
  product_id   INTEGER PRIMARY KEY,          -- one line per product
  quantity     INTEGER NOT NULL CHECK (quantity >= 1)
);

CREATE TABLE IF NOT EXISTS settings (
  key          TEXT PRIMARY KEY,
  value        TEXT
);
"""

# store name -> primary key column
STORES = {
    "products": "id",
    "orders": "id",
    "users": "id",
    "cart": "product_id",
    "settings": "key",
}

INDEXES = {
    "products": ("category", "name"),
    "orders": ("user_id", "status", "order_date"),
    "users": ("email",),
}


def connect(db_path: str | None = None, timeout: float = 5.0) -> sqlite3.Connection:
    """Open the local store. Transactions are managed explicitly via `transaction()`."""
    path = str(db_path or DB_PATH)
    try:
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        con = sqlite3.connect(path, timeout=timeout, check_same_thread=False, isolation_level=None)
        con.row_factory = sqlite3.Row
        con.execute("PRAGMA journal_mode=WAL;")
    except (OSError, sqlite3.Error) as e:
        raise StoreUnavailable(f"cannot open store at {path}: {e}") from e
    return con


def init(con: sqlite3.Connection) -> None:
    """Declare collections and indexes when the stored version is behind DB_VERSION."""
    try:
        version = con.execute("PRAGMA user_version;").fetchone()[0]
        if version >= DB_VERSION:
            return
        con.executescript(SCHEMA)
        con.execute(f"PRAGMA user_version = {DB_VERSION};")
    except sqlite3.Error as e:
        raise StoreUnavailable(f"cannot initialise store: {e}") from e
    log.info("[store] schema upgraded v%s -> v%s", version, DB_VERSION)


@contextmanager
def transaction(con: sqlite3.Connection, mode: str = "readonly") -> Iterator[sqlite3.Connection]:
    """
    Scoped transaction. "readwrite" takes the write lock immediately so a
    read-modify-write inside the block cannot interleave with another writer.
    Any exception rolls the block back and propagates.
    """
    if mode not in ("readonly", "readwrite"):
        raise ValueError(f"unknown transaction mode: {mode}")
    readonly = mode == "readonly"
    try:
        if readonly:
            con.execute("PRAGMA query_only=ON;")
        con.execute("BEGIN" if readonly else "BEGIN IMMEDIATE")
    except sqlite3.OperationalError as e:
        if readonly:
            con.execute("PRAGMA query_only=OFF;")
        raise StoreUnavailable(f"cannot start transaction: {e}") from e
    try:
        yield con
    except BaseException:
        # sqlite may already have rolled back on its own (e.g. SQLITE_FULL)
        if con.in_transaction:
            con.execute("ROLLBACK")
        raise
    else:
        try:
            con.execute("COMMIT")
        except sqlite3.Error as e:
            if con.in_transaction:
                con.execute("ROLLBACK")
            raise StoreUnavailable(f"cannot commit transaction: {e}") from e
    finally:
        if readonly:
            con.execute("PRAGMA query_only=OFF;")


def execute(con: sqlite3.Connection, sql: str, params: Sequence[Any] = (), store: str = "store") -> sqlite3.Cursor:
    """Run one statement, mapping sqlite failures onto the StoreError types."""
    try:
        return con.execute(sql, params)
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            raise DuplicateKey(f"{store}: {e}") from e
        raise ValidationFailed(f"{store}: {e}") from e
    except sqlite3.Error as e:
        raise StoreUnavailable(f"{store}: {e}") from e


def _key_column(store: str) -> str:
    try:
        return STORES[store]
    except KeyError:
        raise ValueError(f"unknown store: {store}") from None


def _columns(record: dict) -> list[str]:
    cols = list(record)
    bad = [c for c in cols if not c.isidentifier()]
    if bad:
        raise ValueError(f"invalid column names: {bad}")
    return cols


def get(con: sqlite3.Connection, store: str, key: Any) -> Optional[dict]:
    sql = f"SELECT * FROM {store} WHERE {_key_column(store)} = ?;"
    row = execute(con, sql, (key,), store).fetchone()
    return dict(row) if row else None


def get_all(con: sqlite3.Connection, store: str) -> list[dict]:
    _key_column(store)
    return [dict(r) for r in execute(con, f"SELECT * FROM {store};", store=store).fetchall()]


def get_by_index(con: sqlite3.Connection, store: str, column: str, value: Any) -> list[dict]:
    _key_column(store)
    if column not in INDEXES.get(store, ()):
        raise ValueError(f"no index {column!r} on {store}")
    sql = f"SELECT * FROM {store} WHERE {column} = ?;"
    return [dict(r) for r in execute(con, sql, (value,), store).fetchall()]


def add(con: sqlite3.Connection, store: str, record: dict) -> None:
    """Insert; fails with DuplicateKey when the key (or a unique index) already exists."""
    _key_column(store)
    cols = _columns(record)
    execute(
        con,
        f"INSERT INTO {store}({', '.join(cols)}) VALUES({', '.join('?' for _ in cols)});",
        [record[c] for c in cols],
        store,
    )


def put(con: sqlite3.Connection, store: str, record: dict) -> None:
    """Insert or replace the record with the same key."""
    key = _key_column(store)
    cols = _columns(record)
    updates = ", ".join(f"{c} = excluded.{c}" for c in cols if c != key)
    sql = (
        f"INSERT INTO {store}({', '.join(cols)}) VALUES({', '.join('?' for _ in cols)}) "
        f"ON CONFLICT({key}) DO " + (f"UPDATE SET {updates};" if updates else "NOTHING;")
    )
    execute(con, sql, [record[c] for c in cols], store)


def delete(con: sqlite3.Connection, store: str, key: Any) -> None:
    execute(con, f"DELETE FROM {store} WHERE {_key_column(store)} = ?;", (key,), store)


def clear(con: sqlite3.Connection, store: str) -> None:
    _key_column(store)
    execute(con, f"DELETE FROM {store};", store=store)
