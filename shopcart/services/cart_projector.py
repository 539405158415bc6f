# shopcart/services/cart_projector.py
from typing import Optional

from shopcart.domain.cart import Cart, CartLine, VariantSnapshot
from shopcart.domain.schemas import CartItemOut, CartView, VariantOut
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.product_client import VariantResolver
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartProjector:
    """
    Query: widok koszyka.
    Przed zbudowaniem widoku robi pasywna rekonsyliacje: odswieza snapshoty,
    ktore rozjechaly sie z katalogiem, i zapisuje koszyk raz (jesli cos sie zmienilo).
    Nigdy nie zmienia ilosci.
    """

    def __init__(self, repo: CartRepo, resolver: VariantResolver):
        self.repo = repo
        self.resolver = resolver

    def project(self, cart: Optional[Cart], owner_id: str | None = None) -> CartView:
        if cart is None:
            return CartView(owner_id=owner_id or "")

        if self.sweep(cart):
            # VersionConflict leci wyzej, CartService ponawia caly odczyt
            self.repo.save(cart)
            logger.info(f"Koszyk {cart.cart_id} odswiezony po zmianach w katalogu, wersja {cart.version}")

        return self.to_view(cart)

    def sweep(self, cart: Cart) -> bool:
        changed = False
        for line in list(cart.lines):
            fresh = self.resolver.resolve(line.product_id, line.variant_id)
            if fresh is None:
                fresh = VariantSnapshot.unavailable(line.snapshot)
            if fresh != line.snapshot:
                logger.info(
                    f"Snapshot {line.product_id}/{line.variant_id} nieaktualny: "
                    f"{line.snapshot} -> {fresh}"
                )
                cart.refresh_snapshot(line.product_id, line.variant_id, fresh)
                changed = True
        return changed

    @staticmethod
    def to_view(cart: Cart) -> CartView:
        return CartView(
            cart_id=cart.cart_id,
            owner_id=cart.owner_id,
            active_items=[_item_out(l) for l in cart.active_lines],
            inactive_items=[_item_out(l) for l in cart.inactive_lines],
            total_quantity=cart.total_quantity,
            total_value=cart.total_value,
            cart_active=cart.cart_active,
            version=cart.version,
        )


def _item_out(line: CartLine) -> CartItemOut:
    return CartItemOut(
        line_id=line.line_id,
        product_id=line.product_id,
        variant=VariantOut(
            variant_id=line.variant_id,
            variant_type=line.snapshot.variant_type,
            price=line.snapshot.price,
            stock=line.snapshot.stock,
            available=line.snapshot.available,
        ),
        quantity=line.quantity,
        subtotal=line.subtotal,
        is_active=line.line_active,
        reason=None if line.line_active else line.inactive_reason(),
    )
