import pytest

from db import DuplicateKey, StoreUnavailable, connect, init, transaction
from db import db as store


def _tables(con):
    rows = con.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    return {r[0] for r in rows}


def test_init_declares_collections_and_is_idempotent(con):
    init(con)
    assert {"products", "orders", "users", "cart", "settings"} <= _tables(con)
    assert con.execute("PRAGMA user_version").fetchone()[0] == store.DB_VERSION


def test_connect_fails_with_store_unavailable(tmp_path):
    # a directory cannot be opened as a database file
    with pytest.raises(StoreUnavailable):
        connect(str(tmp_path))


def test_readonly_transaction_rejects_writes(con):
    with pytest.raises(StoreUnavailable):
        with transaction(con, "readonly"):
            store.put(con, "settings", {"key": "theme", "value": "dark"})
    with transaction(con, "readonly"):
        assert store.get(con, "settings", "theme") is None


def test_failed_transaction_rolls_back_its_writes(con):
    with pytest.raises(RuntimeError):
        with transaction(con, "readwrite"):
            store.put(con, "settings", {"key": "theme", "value": "dark"})
            raise RuntimeError("boom")
    with transaction(con, "readonly"):
        assert store.get_all(con, "settings") == []


def test_write_is_visible_to_next_read(con):
    with transaction(con, "readwrite"):
        store.put(con, "settings", {"key": "theme", "value": "dark"})
    with transaction(con, "readwrite"):
        store.put(con, "settings", {"key": "theme", "value": "light"})
    with transaction(con, "readonly"):
        assert store.get(con, "settings", "theme") == {"key": "theme", "value": "light"}


def test_unique_email_index_rejects_duplicates(con):
    user = {"id": 1, "name": "Hana", "email": "hana@example.com", "role": "user",
            "created_at": "2025-01-01T00:00:00Z"}
    with transaction(con, "readwrite"):
        store.add(con, "users", user)
    with pytest.raises(DuplicateKey):
        with transaction(con, "readwrite"):
            store.add(con, "users", {**user, "id": 2})


def test_delete_missing_key_is_noop(con):
    with transaction(con, "readwrite"):
        store.delete(con, "cart", 12345)


def test_unknown_store_and_unindexed_column(con):
    with transaction(con, "readonly"):
        with pytest.raises(ValueError):
            store.get_all(con, "wishlist")
        with pytest.raises(ValueError):
            store.get_by_index(con, "products", "price", 100)


def test_unknown_transaction_mode(con):
    with pytest.raises(ValueError):
        with transaction(con, "exclusive"):
            pass


def test_sqlite_errors_surface_as_store_errors(con):
    with transaction(con, "readonly"):
        with pytest.raises(StoreUnavailable):
            store.execute(con, "SELECT * FROM wishlist;")


def test_original_error_kept_when_sqlite_already_rolled_back(con):
    with pytest.raises(RuntimeError, match="disk full"):
        with transaction(con, "readwrite"):
            store.put(con, "settings", {"key": "theme", "value": "dark"})
            con.execute("ROLLBACK")
            raise RuntimeError("disk full")
    assert not con.in_transaction
    with transaction(con, "readonly"):
        assert store.get(con, "settings", "theme") is None


def test_write_lock_timeout_raises_store_unavailable(con, db_path):
    waiter = connect(db_path, timeout=0.1)
    con.execute("BEGIN IMMEDIATE")
    try:
        with pytest.raises(StoreUnavailable):
            with transaction(waiter, "readwrite"):
                pass
        assert not waiter.in_transaction
    finally:
        con.execute("ROLLBACK")
        waiter.close()
