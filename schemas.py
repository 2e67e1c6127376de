"""
Schemas for the Bento & Fruit store

Each stored model maps to one collection in the local store:
- Product -> "products"
- CartLine -> "cart"
- Order -> "orders" (items kept as a JSON snapshot)

Attributes are snake_case; the JSON surface uses the camelCase aliases.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Category = Literal["bento", "fruit"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]

CATEGORIES = ("bento", "fruit")
ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


def _assume_utc(value: datetime) -> datetime:
    """Naive timestamps are taken as UTC so every stored timestamp is comparable."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Product(_Model):
    id: int = Field(..., description="Unique product id")
    name: str
    description: str
    price: int = Field(..., gt=0, description="Price in yen")
    stock: int = Field(..., ge=0, description="Units in stock")
    category: Category
    image_url: str = Field(..., alias="imageUrl")
    created_at: datetime = Field(..., alias="createdAt")

    utc_created_at = field_validator("created_at")(_assume_utc)


class ProductIn(_Model):
    """Body of the admin create/edit form."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: int = Field(..., gt=0)
    stock: int = Field(..., ge=0)
    category: Category
    image_url: Optional[str] = Field(None, alias="imageUrl")


class CartLine(_Model):
    product_id: int = Field(..., alias="productId")
    quantity: int = Field(..., ge=1)


class CartItem(_Model):
    product: Product
    quantity: int


class CartAdd(_Model):
    product_id: int = Field(..., alias="productId")
    quantity: int = Field(1, ge=1)


class QuantityUpdate(_Model):
    quantity: int


class OrderItem(_Model):
    id: int
    order_id: int = Field(..., alias="orderId")
    product_id: int = Field(..., alias="productId")
    product: Product = Field(..., description="Snapshot of the product at order time")
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0, description="Unit price at order time")


class Order(_Model):
    id: int
    user_id: int = Field(..., alias="userId")
    order_date: datetime = Field(..., alias="orderDate")
    status: OrderStatus = "pending"
    total_price: int = Field(..., ge=0, alias="totalPrice")
    items: List[OrderItem] = Field(default_factory=list)

    utc_order_date = field_validator("order_date")(_assume_utc)


class StatusUpdate(_Model):
    status: OrderStatus
