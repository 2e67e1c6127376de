import json
import sqlite3
from typing import List, Optional

from core.time import to_iso
from schemas import ORDER_STATUSES, Order, OrderItem
from . import db
from .errors import NotFound, ValidationFailed

STORE = "orders"


def _to_row(order: Order) -> dict:
    items = [i.model_dump(mode="json", by_alias=True) for i in order.items]
    return {
        "id": order.id,
        "user_id": order.user_id,
        "order_date": to_iso(order.order_date),
        "status": order.status,
        "total_price": order.total_price,
        "items_json": json.dumps(items, ensure_ascii=False),
    }


def _from_row(row: dict) -> Order:
    return Order(
        id=row["id"],
        user_id=row["user_id"],
        order_date=row["order_date"],
        status=row["status"],
        total_price=row["total_price"],
        items=[OrderItem.model_validate(i) for i in json.loads(row["items_json"])],
    )


def get_all(con: sqlite3.Connection) -> List[Order]:
    with db.transaction(con, "readonly"):
        rows = db.get_all(con, STORE)
    return [_from_row(r) for r in rows]


def get_by_id(con: sqlite3.Connection, order_id: int) -> Optional[Order]:
    with db.transaction(con, "readonly"):
        row = db.get(con, STORE, order_id)
    return _from_row(row) if row else None


def get_by_user(con: sqlite3.Connection, user_id: int) -> List[Order]:
    with db.transaction(con, "readonly"):
        rows = db.get_by_index(con, STORE, "user_id", user_id)
    return [_from_row(r) for r in rows]


def get_by_status(con: sqlite3.Connection, status: str) -> List[Order]:
    with db.transaction(con, "readonly"):
        rows = db.get_by_index(con, STORE, "status", status)
    return [_from_row(r) for r in rows]


def add(con: sqlite3.Connection, order: Order) -> None:
    """Append a new order; DuplicateKey if the id is taken."""
    with db.transaction(con, "readwrite"):
        db.add(con, STORE, _to_row(order))


def update_status(con: sqlite3.Connection, order_id: int, status: str) -> Order:
    """
    Set the order's status and write the record back.
    Any status may follow any other.
    """
    if status not in ORDER_STATUSES:
        raise ValidationFailed(f"unknown order status: {status}")
    with db.transaction(con, "readwrite"):
        row = db.get(con, STORE, order_id)
        if row is None:
            raise NotFound(f"order {order_id} not found")
        row["status"] = status
        db.put(con, STORE, row)
    return _from_row(row)
