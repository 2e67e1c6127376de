import math
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.config import PAGE_LIMIT
from db import NotFound, products
from schemas import ProductIn
from .deps import get_db, parse_id

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
def list_products(
        category: Optional[str] = Query(None),
        search: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(PAGE_LIMIT, ge=1),
        con: sqlite3.Connection = Depends(get_db),
):
    by_category = category and category != "all"
    if search:
        items = products.search(con, search)
        if by_category:
            items = [p for p in items if p.category == category]
    elif by_category:
        items = products.get_by_category(con, category)
    else:
        items = products.get_all(con)
    items.sort(key=lambda p: p.id)

    start = (page - 1) * limit
    return {
        "success": True,
        "data": {
            "products": items[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": len(items),
                "totalPages": math.ceil(len(items) / limit),
            },
        },
    }


@router.post("", status_code=201)
def create_product(payload: ProductIn, con: sqlite3.Connection = Depends(get_db)):
    return {"success": True, "data": products.create(con, payload)}


@router.get("/{product_id}")
def get_product(product_id: str, con: sqlite3.Connection = Depends(get_db)):
    pid = parse_id(product_id, "product id")
    product = products.get_by_id(con, pid)
    if product is None:
        raise NotFound(f"product {pid} not found")
    return {"success": True, "data": product}


@router.put("/{product_id}")
def update_product(product_id: str, payload: ProductIn, con: sqlite3.Connection = Depends(get_db)):
    pid = parse_id(product_id, "product id")
    return {"success": True, "data": products.replace(con, pid, payload)}


@router.delete("/{product_id}")
def delete_product(product_id: str, con: sqlite3.Connection = Depends(get_db)):
    pid = parse_id(product_id, "product id")
    product = products.get_by_id(con, pid)
    if product is None:
        raise NotFound(f"product {pid} not found")
    products.delete(con, pid)
    return {"success": True, "data": product, "message": "product deleted"}
