import sqlite3

from core.config import DB_PATH
from db import connect, ValidationFailed


def get_db():
    con: sqlite3.Connection = connect(DB_PATH)
    try:
        yield con
    finally:
        con.close()


def parse_id(raw: str, what: str = "id") -> int:
    """Path ids arrive as text so a non-integer gets a 400 rather than a 422."""
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed(f"invalid {what}: {raw!r}") from None
