import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, Query

from db import NotFound, orders
from schemas import Order, OrderStatus, StatusUpdate
from .deps import get_db, parse_id

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
def list_orders(
        user_id: Optional[int] = Query(None, alias="userId"),
        status: Optional[OrderStatus] = Query(None),
        con: sqlite3.Connection = Depends(get_db),
):
    if user_id is not None:
        found = orders.get_by_user(con, user_id)
        if status is not None:
            found = [o for o in found if o.status == status]
    elif status is not None:
        found = orders.get_by_status(con, status)
    else:
        found = orders.get_all(con)
    found.sort(key=lambda o: o.order_date, reverse=True)
    return {"success": True, "data": found}


@router.get("/{order_id}")
def get_order(order_id: str, con: sqlite3.Connection = Depends(get_db)):
    oid = parse_id(order_id, "order id")
    order = orders.get_by_id(con, oid)
    if order is None:
        raise NotFound(f"order {oid} not found")
    return {"success": True, "data": order}


@router.post("", status_code=201)
def create_order(payload: Order, con: sqlite3.Connection = Depends(get_db)):
    orders.add(con, payload)
    return {"success": True, "data": payload}


@router.patch("/{order_id}/status")
def update_order_status(order_id: str, payload: StatusUpdate, con: sqlite3.Connection = Depends(get_db)):
    oid = parse_id(order_id, "order id")
    return {"success": True, "data": orders.update_status(con, oid, payload.status)}
