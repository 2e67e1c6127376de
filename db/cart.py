import logging
import sqlite3
from typing import List, Optional

from core.config import SHIPPING_FEE
from schemas import CartItem, CartLine, Product
from . import db
from .errors import ValidationFailed

log = logging.getLogger(__name__)

STORE = "cart"


def get_all(con: sqlite3.Connection) -> List[CartItem]:
    """
    Cart lines joined against the current products.
    A line whose product no longer exists is left out of the result.
    """
    with db.transaction(con, "readonly"):
        rows = db.execute(
            con,
            """
            SELECT c.product_id AS line_product_id, c.quantity,
                   p.id, p.name, p.description, p.price, p.stock,
                   p.category, p.image_url, p.created_at
            FROM cart c
            LEFT JOIN products p ON p.id = c.product_id
            ORDER BY c.product_id ASC
            """
        ).fetchall()

    items = []
    for r in rows:
        if r["id"] is None:
            log.debug("[cart] dropping orphan line product_id=%s", r["line_product_id"])
            continue
        product = Product.model_validate({k: r[k] for k in Product.model_fields})
        items.append(CartItem(product=product, quantity=r["quantity"]))
    return items


def get_lines(con: sqlite3.Connection) -> List[CartLine]:
    """Stored lines as-is, orphans included."""
    with db.transaction(con, "readonly"):
        rows = db.get_all(con, STORE)
    return [CartLine.model_validate(r) for r in rows]


def _check_bound(product_id: int, quantity: int, max_quantity: Optional[int]) -> None:
    if max_quantity is not None and quantity > max_quantity:
        raise ValidationFailed(
            f"quantity {quantity} for product {product_id} exceeds available {max_quantity}"
        )


def add_item(con: sqlite3.Connection, product_id: int, quantity: int,
             max_quantity: Optional[int] = None) -> int:
    """
    Add `quantity` to the product's line, creating it if needed.
    Returns the new line quantity. With `max_quantity`, a result above it is
    rejected and nothing is written.
    """
    if quantity < 1:
        raise ValidationFailed(f"quantity must be >= 1, got {quantity}")
    # write lock is held from the read to the put
    with db.transaction(con, "readwrite"):
        existing = db.get(con, STORE, product_id)
        new_quantity = existing["quantity"] + quantity if existing else quantity
        _check_bound(product_id, new_quantity, max_quantity)
        db.put(con, STORE, {"product_id": product_id, "quantity": new_quantity})
    return new_quantity


def update_quantity(con: sqlite3.Connection, product_id: int, quantity: int,
                    max_quantity: Optional[int] = None) -> None:
    """Set the line to `quantity`; zero or less removes it."""
    with db.transaction(con, "readwrite"):
        if quantity <= 0:
            db.delete(con, STORE, product_id)
            return
        _check_bound(product_id, quantity, max_quantity)
        db.put(con, STORE, {"product_id": product_id, "quantity": quantity})


def remove_item(con: sqlite3.Connection, product_id: int) -> None:
    with db.transaction(con, "readwrite"):
        db.delete(con, STORE, product_id)


def clear(con: sqlite3.Connection) -> None:
    with db.transaction(con, "readwrite"):
        db.clear(con, STORE)


def totals(items: List[CartItem], shipping_fee: int = SHIPPING_FEE) -> dict:
    subtotal = sum(i.product.price * i.quantity for i in items)
    fee = shipping_fee if items else 0
    return {
        "itemCount": sum(i.quantity for i in items),
        "subtotal": subtotal,
        "shippingFee": fee,
        "total": subtotal + fee,
    }
