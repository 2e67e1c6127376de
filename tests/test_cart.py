import threading

import pytest

from db import ValidationFailed, cart, connect, products
from schemas import CartLine


def test_add_update_remove_scenario(seeded):
    assert cart.get_all(seeded) == []

    cart.add_item(seeded, 3, 2)
    items = cart.get_all(seeded)
    assert len(items) == 1
    assert items[0].product.id == 3
    assert items[0].quantity == 2

    cart.add_item(seeded, 3, 1)
    assert [i.quantity for i in cart.get_all(seeded)] == [3]

    cart.update_quantity(seeded, 3, 0)
    assert cart.get_all(seeded) == []


def test_repeated_adds_accumulate_on_one_line(seeded):
    assert cart.add_item(seeded, 1, 4) == 4
    assert cart.add_item(seeded, 1, 5) == 9
    assert cart.get_lines(seeded) == [CartLine(product_id=1, quantity=9)]


def test_update_quantity_is_absolute(seeded):
    cart.add_item(seeded, 2, 5)
    cart.update_quantity(seeded, 2, 1)
    assert cart.get_all(seeded)[0].quantity == 1


def test_negative_update_removes_line(seeded):
    cart.add_item(seeded, 2, 1)
    cart.update_quantity(seeded, 2, -3)
    assert cart.get_lines(seeded) == []


def test_add_requires_positive_quantity(seeded):
    with pytest.raises(ValidationFailed):
        cart.add_item(seeded, 1, 0)
    assert cart.get_lines(seeded) == []


def test_orphan_line_is_omitted(seeded, make_product):
    products.add(seeded, make_product(id=99))
    cart.add_item(seeded, 99, 1)
    cart.add_item(seeded, 4, 2)
    products.delete(seeded, 99)

    items = cart.get_all(seeded)
    assert [i.product.id for i in items] == [4]
    # the stored line itself is untouched
    assert {l.product_id for l in cart.get_lines(seeded)} == {4, 99}


def test_cart_reflects_live_product_data(seeded):
    cart.add_item(seeded, 3, 1)
    apple = products.get_by_id(seeded, 3)
    products.update(seeded, apple.model_copy(update={"price": 200}))
    assert cart.get_all(seeded)[0].product.price == 200


def test_max_quantity_rejects_without_writing(seeded):
    cart.add_item(seeded, 5, 18, max_quantity=20)
    with pytest.raises(ValidationFailed):
        cart.add_item(seeded, 5, 3, max_quantity=20)
    assert cart.get_all(seeded)[0].quantity == 18
    with pytest.raises(ValidationFailed):
        cart.update_quantity(seeded, 5, 21, max_quantity=20)
    assert cart.get_all(seeded)[0].quantity == 18


def test_no_stock_bound_by_default(seeded):
    # product 5 has 20 in stock
    cart.add_item(seeded, 5, 50)
    assert cart.get_all(seeded)[0].quantity == 50


def test_remove_and_clear(seeded):
    cart.add_item(seeded, 1, 1)
    cart.add_item(seeded, 2, 1)
    cart.remove_item(seeded, 1)
    cart.remove_item(seeded, 1)
    assert [i.product.id for i in cart.get_all(seeded)] == [2]
    cart.clear(seeded)
    assert cart.get_all(seeded) == []


def test_totals(seeded):
    cart.add_item(seeded, 1, 2)   # 680
    cart.add_item(seeded, 3, 3)   # 150
    t = cart.totals(cart.get_all(seeded), shipping_fee=500)
    assert t == {"itemCount": 5, "subtotal": 1810, "shippingFee": 500, "total": 2310}
    assert cart.totals([], shipping_fee=500)["total"] == 0


def test_concurrent_adds_do_not_lose_increments(seeded, db_path):
    per_thread = 20

    def worker():
        c = connect(db_path)
        try:
            for _ in range(per_thread):
                cart.add_item(c, 1, 1)
        finally:
            c.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cart.get_all(seeded)[0].quantity == 2 * per_thread
