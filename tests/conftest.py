from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from db import connect, init, seed
from routers.deps import get_db
from schemas import Product


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "store.db")


@pytest.fixture
def con(db_path):
    c = connect(db_path)
    init(c)
    yield c
    c.close()


@pytest.fixture
def seeded(con):
    seed.initialize(con)
    return con


@pytest.fixture
def make_product():
    def _make(id=7, name="Salmon Bento", description="Grilled salmon on rice",
              price=700, stock=10, category="bento", image_url=None):
        return Product(
            id=id, name=name, description=description, price=price, stock=stock,
            category=category, image_url=image_url or f"/images/{id}.jpg",
            created_at=datetime(2025, 3, 1, 12, tzinfo=timezone.utc),
        )
    return _make


@pytest.fixture
def client(seeded):
    from app import app

    def _get_db():
        yield seeded

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
