import sqlite3
from typing import List, Optional

from core.config import DEFAULT_IMAGE_URL
from core.time import now_utc, to_iso
from schemas import Product, ProductIn
from . import db
from .errors import NotFound

STORE = "products"


def _to_row(product: Product) -> dict:
    row = product.model_dump()
    row["created_at"] = to_iso(product.created_at)
    return row


def _from_row(row: dict) -> Product:
    return Product.model_validate(row)


def get_all(con: sqlite3.Connection) -> List[Product]:
    """Every product. Callers must not rely on the order."""
    with db.transaction(con, "readonly"):
        rows = db.get_all(con, STORE)
    return [_from_row(r) for r in rows]


def get_by_id(con: sqlite3.Connection, product_id: int) -> Optional[Product]:
    with db.transaction(con, "readonly"):
        row = db.get(con, STORE, product_id)
    return _from_row(row) if row else None


def get_by_category(con: sqlite3.Connection, category: str) -> List[Product]:
    with db.transaction(con, "readonly"):
        rows = db.get_by_index(con, STORE, "category", category)
    return [_from_row(r) for r in rows]


def add(con: sqlite3.Connection, product: Product) -> None:
    """Insert a new product; DuplicateKey if the id is taken."""
    with db.transaction(con, "readwrite"):
        db.add(con, STORE, _to_row(product))


def update(con: sqlite3.Connection, product: Product) -> None:
    """Write the product as given, creating it when the id does not exist yet."""
    with db.transaction(con, "readwrite"):
        db.put(con, STORE, _to_row(product))


def delete(con: sqlite3.Connection, product_id: int) -> None:
    with db.transaction(con, "readwrite"):
        db.delete(con, STORE, product_id)


def search(con: sqlite3.Connection, query: str) -> List[Product]:
    """Case-insensitive substring match on name or description (full scan)."""
    q = query.lower()
    return [p for p in get_all(con) if q in p.name.lower() or q in p.description.lower()]


def _max_id(con: sqlite3.Connection) -> int:
    return db.execute(con, f"SELECT COALESCE(MAX(id), 0) FROM {STORE};", store=STORE).fetchone()[0]


def next_id(con: sqlite3.Connection) -> int:
    with db.transaction(con, "readonly"):
        return _max_id(con) + 1


def create(con: sqlite3.Connection, data: ProductIn) -> Product:
    """Admin create: id = max(existing) + 1, stamped with the current time."""
    with db.transaction(con, "readwrite"):
        product = Product(
            id=_max_id(con) + 1,
            name=data.name,
            description=data.description,
            price=data.price,
            stock=data.stock,
            category=data.category,
            image_url=data.image_url or DEFAULT_IMAGE_URL,
            created_at=now_utc(),
        )
        db.add(con, STORE, _to_row(product))
    return product


def replace(con: sqlite3.Connection, product_id: int, data: ProductIn) -> Product:
    """Admin edit: replace editable fields, keep createdAt and (if none given) the image."""
    with db.transaction(con, "readwrite"):
        row = db.get(con, STORE, product_id)
        if row is None:
            raise NotFound(f"product {product_id} not found")
        current = _from_row(row)
        product = current.model_copy(update={
            "name": data.name,
            "description": data.description,
            "price": data.price,
            "stock": data.stock,
            "category": data.category,
            "image_url": data.image_url or current.image_url,
        })
        db.put(con, STORE, _to_row(product))
    return product
