import logging
import sqlite3
from datetime import datetime, timezone

from schemas import Product
from . import products
from .errors import DuplicateKey

log = logging.getLogger(__name__)

SEED_CREATED_AT = datetime(2025, 1, 1, tzinfo=timezone.utc)

SAMPLE_PRODUCTS = [
    {
        "id": 1,
        "name": "特製幕の内弁当",
        "description": "栄養バランスの取れた人気のお弁当です。白米、焼き魚、煮物、サラダなど、バラエティ豊かなおかずが詰まっています。",
        "price": 680,
        "stock": 50,
        "category": "bento",
        "imageUrl": "/images/bento1.jpg",
    },
    {
        "id": 2,
        "name": "唐揚げ弁当",
        "description": "ジューシーな唐揚げがメインのお弁当。特製タレで味付けした唐揚げと、ご飯、副菜がセットになっています。",
        "price": 580,
        "stock": 30,
        "category": "bento",
        "imageUrl": "/images/bento2.jpg",
    },
    {
        "id": 3,
        "name": "青森りんご",
        "description": "甘くて新鮮な青森産りんご。シャキシャキとした食感と自然な甘さが特徴です。",
        "price": 150,
        "stock": 100,
        "category": "fruit",
        "imageUrl": "/images/apple.jpg",
    },
    {
        "id": 4,
        "name": "熊本みかん",
        "description": "ジューシーで甘い熊本産みかん。ビタミンCが豊富で、皮も薄く食べやすいです。",
        "price": 120,
        "stock": 80,
        "category": "fruit",
        "imageUrl": "/images/orange.jpg",
    },
    {
        "id": 5,
        "name": "海鮮弁当",
        "description": "新鮮な海鮮がたっぷり入った豪華なお弁当です。",
        "price": 980,
        "stock": 20,
        "category": "bento",
        "imageUrl": "/images/seafood.jpg",
    },
    {
        "id": 6,
        "name": "山形さくらんぼ",
        "description": "甘くてジューシーな山形産さくらんぼです。",
        "price": 300,
        "stock": 60,
        "category": "fruit",
        "imageUrl": "/images/cherry.jpg",
    },
]


def sample_products() -> list[Product]:
    return [Product(**p, createdAt=SEED_CREATED_AT) for p in SAMPLE_PRODUCTS]


def initialize(con: sqlite3.Connection) -> int:
    """
    Insert the sample products when the products collection is empty.
    Any existing product, even a partial seed, skips seeding entirely.
    Returns the number of products actually inserted.
    """
    if products.get_all(con):
        return 0

    samples = sample_products()
    inserted = 0
    for p in samples:
        try:
            products.add(con, p)
            inserted += 1
        except DuplicateKey:
            # another process seeded the same id first
            log.warning("[seed] product %s already present, skipped", p.id)
    log.info("[seed] inserted %d/%d products", inserted, len(samples))
    return inserted
