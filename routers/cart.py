import sqlite3

from fastapi import APIRouter, Depends

from db import NotFound, ValidationFailed, cart, products
from schemas import CartAdd, QuantityUpdate
from .deps import get_db, parse_id

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_view(con: sqlite3.Connection) -> dict:
    items = cart.get_all(con)
    return {"success": True, "data": {"items": items, **cart.totals(items)}}


def _product_or_404(con: sqlite3.Connection, product_id: int):
    product = products.get_by_id(con, product_id)
    if product is None:
        raise NotFound(f"product {product_id} not found")
    return product


@router.get("")
def get_cart(con: sqlite3.Connection = Depends(get_db)):
    return _cart_view(con)


@router.post("/items")
def add_to_cart(payload: CartAdd, con: sqlite3.Connection = Depends(get_db)):
    product = _product_or_404(con, payload.product_id)
    if product.stock == 0:
        raise ValidationFailed(f"product {product.id} is out of stock")
    cart.add_item(con, product.id, payload.quantity, max_quantity=product.stock)
    return _cart_view(con)


@router.put("/items/{product_id}")
def set_quantity(product_id: str, payload: QuantityUpdate, con: sqlite3.Connection = Depends(get_db)):
    pid = parse_id(product_id, "product id")
    if payload.quantity <= 0:
        cart.remove_item(con, pid)
    else:
        product = _product_or_404(con, pid)
        cart.update_quantity(con, pid, payload.quantity, max_quantity=product.stock)
    return _cart_view(con)


@router.delete("/items/{product_id}")
def remove_from_cart(product_id: str, con: sqlite3.Connection = Depends(get_db)):
    cart.remove_item(con, parse_id(product_id, "product id"))
    return _cart_view(con)


@router.delete("")
def clear_cart(con: sqlite3.Connection = Depends(get_db)):
    cart.clear(con)
    return _cart_view(con)
