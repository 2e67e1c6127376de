from .db import (
    connect,
    init,
    transaction,
)
from .errors import (
    StoreError,
    StoreUnavailable,
    NotFound,
    DuplicateKey,
    ValidationFailed,
)
from . import products, cart, orders, seed

__all__ = [
    # low-level
    "connect", "init", "transaction",
    # errors
    "StoreError", "StoreUnavailable", "NotFound", "DuplicateKey", "ValidationFailed",
    # repositories
    "products", "cart", "orders", "seed",
]
