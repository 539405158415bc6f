"""
Unit tests for the cart aggregate (recompute, line activity, reasons).
"""

from decimal import Decimal

from shopcart.domain.cart import Cart, CartLine, InactiveReason, VariantSnapshot


def snap(price="10.00", stock=10, available=True, variant_type="default"):
    return VariantSnapshot(variant_type=variant_type, price=Decimal(price), stock=stock, available=available)


def assert_invariants(cart: Cart):
    keys = [line.key for line in cart.lines]
    assert len(keys) == len(set(keys))
    for line in cart.lines:
        assert line.subtotal == line.quantity * line.snapshot.price
        s = line.snapshot
        assert line.line_active == (s.available and s.stock > 0 and line.quantity <= s.stock)
    active = [l for l in cart.lines if l.line_active]
    assert cart.total_quantity == sum(l.quantity for l in active)
    assert cart.total_value == sum((l.subtotal for l in active), Decimal("0"))
    assert cart.cart_active == bool(active)


class TestRecompute:
    """Tests for Cart.recompute."""

    def test_empty_cart(self):
        cart = Cart(owner_id="u1")
        cart.recompute()

        assert cart.total_quantity == 0
        assert cart.total_value == Decimal("0")
        assert cart.cart_active is False

    def test_totals_only_count_active_lines(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 2, snap("10.00", stock=5))
        cart.merge_line("p2", "v1", 3, snap("4.50", stock=0))
        cart.merge_line("p3", "v1", 4, snap("1.00", stock=2))

        assert cart.total_quantity == 2
        assert cart.total_value == Decimal("20.00")
        assert cart.cart_active is True
        assert [l.product_id for l in cart.inactive_lines] == ["p2", "p3"]
        assert_invariants(cart)

    def test_inactive_lines_keep_subtotal(self):
        cart = Cart(owner_id="u1")
        line = cart.merge_line("p1", "v1", 3, snap("2.00", stock=1))

        assert line.line_active is False
        assert line.subtotal == Decimal("6.00")
        assert cart.total_value == Decimal("0")
        assert cart.cart_active is False

    def test_recompute_is_idempotent(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 2, snap("3.33", stock=5))
        cart.merge_line("p2", "v2", 7, snap("1.10", stock=6))

        first = [(l.subtotal, l.line_active) for l in cart.lines], cart.total_quantity, cart.total_value, cart.cart_active
        cart.recompute()
        second = [(l.subtotal, l.line_active) for l in cart.lines], cart.total_quantity, cart.total_value, cart.cart_active

        assert first == second

    def test_stale_stored_values_are_overwritten(self):
        line = CartLine("p1", "v1", 2, snap("5.00", stock=5), subtotal=Decimal("999"), line_active=False)
        cart = Cart(owner_id="u1", lines=[line], total_quantity=42)

        cart.recompute()

        assert line.subtotal == Decimal("10.00")
        assert line.line_active is True
        assert cart.total_quantity == 2
        assert_invariants(cart)


class TestMutators:
    """Tests for Cart mutators."""

    def test_merge_same_pair_keeps_one_line(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 2, snap(stock=10))
        cart.merge_line("p1", "v1", 3, snap(stock=10))

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 5
        assert cart.lines[0].subtotal == Decimal("50.00")
        assert_invariants(cart)

    def test_merge_overwrites_snapshot(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 1, snap("10.00", stock=10))
        cart.merge_line("p1", "v1", 1, snap("12.00", stock=8))

        assert cart.lines[0].snapshot.price == Decimal("12.00")
        assert cart.lines[0].snapshot.stock == 8
        assert cart.total_value == Decimal("24.00")

    def test_insertion_order_is_stable(self):
        cart = Cart(owner_id="u1")
        for pid in ("a", "b", "c"):
            cart.merge_line(pid, "v", 1, snap())
        cart.merge_line("a", "v", 1, snap())
        cart.refresh_snapshot("b", "v", snap(stock=0))

        assert [l.product_id for l in cart.lines] == ["a", "b", "c"]

    def test_refresh_snapshot_never_changes_quantity(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 3, snap(stock=10))

        changed = cart.refresh_snapshot("p1", "v1", snap(stock=2))

        assert changed is True
        assert cart.lines[0].quantity == 3
        assert cart.lines[0].line_active is False

    def test_refresh_snapshot_same_facts_is_noop(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 1, snap())

        assert cart.refresh_snapshot("p1", "v1", snap()) is False

    def test_remove_line(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 1, snap())
        cart.merge_line("p2", "v1", 1, snap())

        assert cart.remove_line("p1", "v1") is True
        assert cart.remove_line("p1", "v1") is False
        assert [l.product_id for l in cart.lines] == ["p2"]
        assert_invariants(cart)

    def test_remove_inactive_lines(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 1, snap(stock=5))
        cart.merge_line("p2", "v1", 1, snap(available=False))
        cart.merge_line("p3", "v1", 9, snap(stock=2))

        removed = cart.remove_inactive_lines()

        assert removed == 2
        assert [l.product_id for l in cart.lines] == ["p1"]
        assert_invariants(cart)

    def test_clear(self):
        cart = Cart(owner_id="u1")
        cart.merge_line("p1", "v1", 2, snap())
        cart.clear()

        assert cart.lines == []
        assert cart.total_quantity == 0
        assert cart.total_value == Decimal("0")
        assert cart.cart_active is False


class TestInactiveReason:
    """Reason precedence: UNAVAILABLE, then OUT_OF_STOCK, then INSUFFICIENT_STOCK."""

    def test_active_line_has_no_reason(self):
        line = CartLine("p", "v", 1, snap(stock=1))
        assert line.inactive_reason() is None

    def test_unavailable_wins_over_out_of_stock(self):
        line = CartLine("p", "v", 1, snap(stock=0, available=False))
        assert line.inactive_reason() is InactiveReason.UNAVAILABLE

    def test_out_of_stock(self):
        line = CartLine("p", "v", 1, snap(stock=0))
        assert line.inactive_reason() is InactiveReason.OUT_OF_STOCK

    def test_insufficient_stock(self):
        line = CartLine("p", "v", 3, snap(stock=2))
        assert line.inactive_reason() is InactiveReason.INSUFFICIENT_STOCK

    def test_not_found_snapshot_keeps_type_and_price(self):
        previous = snap("7.00", stock=4, variant_type="500 g")
        gone = VariantSnapshot.unavailable(previous)

        assert gone.stock == 0
        assert gone.available is False
        assert gone.price == Decimal("7.00")
        assert gone.variant_type == "500 g"

    def test_snapshot_price_is_rounded_to_cents(self):
        assert snap("1.999").price == Decimal("2.00")
        assert snap("1.994").price == Decimal("1.99")
        assert snap("5").price == Decimal("5.00")
