from unittest.mock import patch

from shopcart.services.cart_service import CartService
from shopcart.tasks.cleanup import cleanup_inactive_lines_task


def test_cleanup_task_removes_inactive_lines(session_factory, catalog):
    db = session_factory()
    svc = CartService(db, catalog)
    svc.add_item("u1", "kbd", "kbd-us", 5)
    svc.add_item("u2", "mouse", "mouse-std", 1)
    catalog.set_stock("kbd", "kbd-us", 2)
    svc.get_cart("u1")
    db.close()

    with patch("shopcart.tasks.cleanup.SessionLocal", session_factory), \
         patch("shopcart.tasks.cleanup.HttpVariantResolver", return_value=catalog):
        result = cleanup_inactive_lines_task()

    assert result == {"carts_cleaned": 1}
    db = session_factory()
    assert CartService(db, catalog).get_cart("u1").inactive_items == []
    db.close()
