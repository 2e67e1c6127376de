from .config import (
    BASE, DB_PATH, SHIPPING_FEE, PAGE_LIMIT, DEFAULT_IMAGE_URL, SEED_ON_STARTUP, LOG_LEVEL
)
from .time import now_utc, to_iso

__all__ = [
    "BASE", "DB_PATH", "SHIPPING_FEE", "PAGE_LIMIT", "DEFAULT_IMAGE_URL",
    "SEED_ON_STARTUP", "LOG_LEVEL", "now_utc", "to_iso",
]
