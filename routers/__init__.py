from . import cart, orders, products

__all__ = ["cart", "orders", "products"]
