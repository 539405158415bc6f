# shopcart/services/cart_service.py
import math
import re
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopcart.domain.cart import Cart, VariantSnapshot
from shopcart.domain.errors import (
    ConcurrentModification,
    InsufficientStock,
    InvalidArgument,
    LineNotFound,
    UpstreamTimeout,
    VariantUnavailable,
)
from shopcart.domain.schemas import (
    CartPageOut,
    CartSummaryItemOut,
    CartSummaryOut,
    CartView,
    CleanupOut,
)
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.cart_projector import CartProjector
from shopcart.services.product_client import VariantResolver
from shopcart.utils.retry import VersionConflict, conflict_retry
from shopcart.utils.settings import CART_MAX_RETRIES
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class CartService:
    """
    Use case'y koszyka (CQRS):
    commands (add, set, remove, clear, cleanup) - odczyt, resolve w katalogu, zapis z wersja
    query (get) - widok przez CartProjector z pasywna rekonsyliacja

    Kazda operacja to jeden read-modify-write na jednym koszyku. Konflikt wersji
    = cala operacja od nowa, po CART_MAX_RETRIES probach ConcurrentModification.
    """

    def __init__(
        self,
        db: Session,
        resolver: VariantResolver,
        repo: CartRepo | None = None,
        max_attempts: int = CART_MAX_RETRIES,
    ):
        self.repo = repo or CartRepo(db)
        self.resolver = resolver
        self.projector = CartProjector(self.repo, resolver)
        self.max_attempts = max_attempts

    #query - odczyt

    def get_cart(self, owner_id: str) -> CartView:
        _check_id("owner_id", owner_id)

        def op():
            cart = self.repo.get_by_owner(owner_id)
            return self.projector.project(cart, owner_id)

        return self._run(owner_id, op)

    #commands

    def add_item(self, owner_id: str, product_id: str, variant_id: str, quantity: int) -> CartView:
        _check_ids(owner_id, product_id, variant_id)
        _check_quantity(quantity)

        def op():
            snapshot = self._resolve_purchasable(product_id, variant_id)
            if quantity > snapshot.stock:
                raise InsufficientStock(product_id, variant_id, quantity, snapshot.stock)

            cart = self.repo.get_by_owner(owner_id) or Cart(owner_id=owner_id)

            existing = cart.find_line(product_id, variant_id)
            if existing:
                new_qty = existing.quantity + quantity
                if new_qty > snapshot.stock:
                    # komunikat z laczna iloscia, nie tylko z przyrostem
                    raise InsufficientStock(product_id, variant_id, new_qty, snapshot.stock)
                logger.info(
                    f"Wariant {product_id}/{variant_id} juz jest w koszyku, zwiekszam ilosc "
                    f"z {existing.quantity} do {new_qty}"
                )
            else:
                logger.info(f"Dodaje nowy wariant {product_id}/{variant_id} do koszyka ownera {owner_id}")

            cart.merge_line(product_id, variant_id, quantity, snapshot)
            self.repo.save(cart)
            return CartProjector.to_view(cart)

        return self._run(owner_id, op)

    def set_quantity(self, owner_id: str, product_id: str, variant_id: str, quantity: int) -> CartView:
        _check_ids(owner_id, product_id, variant_id)
        _check_quantity(quantity)

        def op():
            cart = self.repo.get_by_owner(owner_id)
            if cart is None or cart.find_line(product_id, variant_id) is None:
                raise LineNotFound(product_id, variant_id)

            snapshot = self._resolve_purchasable(product_id, variant_id)
            if quantity > snapshot.stock:
                raise InsufficientStock(product_id, variant_id, quantity, snapshot.stock)

            cart.set_line_quantity(product_id, variant_id, quantity, snapshot)
            self.repo.save(cart)
            logger.info(f"Ustawiono ilosc {quantity} dla {product_id}/{variant_id}, wersja {cart.version}")
            return CartProjector.to_view(cart)

        return self._run(owner_id, op)

    def remove_item(self, owner_id: str, product_id: str, variant_id: str) -> CartView:
        _check_ids(owner_id, product_id, variant_id)

        def op():
            cart = self.repo.get_by_owner(owner_id)
            if cart is None:
                return CartView(owner_id=owner_id)

            # brak pozycji = sukces bez zapisu
            if cart.remove_line(product_id, variant_id):
                self.repo.save(cart)
                logger.info(f"Wariant {product_id}/{variant_id} usuniety z koszyka {cart.cart_id}")
            return CartProjector.to_view(cart)

        return self._run(owner_id, op)

    def clear_cart(self, owner_id: str) -> CartView:
        _check_id("owner_id", owner_id)

        def op():
            cart = self.repo.get_by_owner(owner_id)
            if cart is None:
                return CartView(owner_id=owner_id)

            cart.clear()
            self.repo.save(cart)
            logger.info(f"Koszyk {cart.cart_id} wyczyszczony, wersja {cart.version}")
            return CartProjector.to_view(cart)

        return self._run(owner_id, op)

    def remove_inactive_items(self, owner_id: str) -> CleanupOut:
        _check_id("owner_id", owner_id)

        def op():
            cart = self.repo.get_by_owner(owner_id)
            if cart is None:
                return CleanupOut(removed=0, cart=CartView(owner_id=owner_id))

            removed = cart.remove_inactive_lines()
            if removed:
                self.repo.save(cart)
                logger.info(f"Usunieto {removed} nieaktywnych pozycji z koszyka {cart.cart_id}")
            return CleanupOut(removed=removed, cart=CartProjector.to_view(cart))

        return self._run(owner_id, op)

    def cleanup_all_carts(self) -> int:
        """Usuwa nieaktywne pozycje ze wszystkich koszykow. Zwraca liczbe wyczyszczonych koszykow."""
        owners = self._guard(self.repo.owners_with_inactive_lines)
        cleaned = 0
        for owner_id in owners:
            try:
                if self.remove_inactive_items(owner_id).removed:
                    cleaned += 1
            except ConcurrentModification:
                # owner wlasnie modyfikuje koszyk, nastepny przebieg go zlapie
                logger.warning(f"Pominieto koszyk ownera {owner_id} - konflikt wspolbieznosci")
        logger.info(f"Wyczyszczono nieaktywne pozycje z {cleaned} koszykow")
        return cleaned

    def list_carts(self, page: int = 1, limit: int = 10, owner_id: Optional[str] = None) -> CartPageOut:
        if page < 1:
            raise InvalidArgument("page", "musi byc >= 1")
        if limit < 1 or limit > 100:
            raise InvalidArgument("limit", "musi byc w zakresie 1..100")
        if owner_id is not None:
            _check_id("owner_id", owner_id)

        total, carts = self._guard(lambda: self.repo.list_carts(page, limit, owner_id))

        return CartPageOut(
            total_items=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
            carts=[
                CartSummaryOut(
                    cart_id=cart.cart_id,
                    owner_id=cart.owner_id,
                    total_items=len(cart.lines),
                    active_items=len(cart.active_lines),
                    total_quantity=cart.total_quantity,
                    total_value=cart.total_value,
                    last_updated=updated_at,
                    items=[
                        CartSummaryItemOut(
                            product_id=l.product_id,
                            variant_id=l.variant_id,
                            variant_type=l.snapshot.variant_type,
                            quantity=l.quantity,
                            price=l.snapshot.price,
                            subtotal=l.subtotal,
                            stock=l.snapshot.stock,
                            is_active=l.line_active,
                        )
                        for l in cart.lines
                    ],
                )
                for cart, updated_at in carts
            ],
        )

    # pomocnicze

    def _resolve_purchasable(self, product_id: str, variant_id: str) -> VariantSnapshot:
        snapshot = self.resolver.resolve(product_id, variant_id)
        if snapshot is None or not snapshot.available or snapshot.stock == 0:
            raise VariantUnavailable(product_id, variant_id)
        return snapshot

    def _run(self, owner_id: str, op: Callable[[], T]) -> T:
        @conflict_retry(self.max_attempts)
        def attempt():
            try:
                return self._guard(op)
            except VersionConflict as e:
                logger.warning(f"Konflikt wersji koszyka ownera {owner_id}: {e}, ponawiam")
                raise

        try:
            return attempt()
        except VersionConflict as e:
            logger.error(f"Konflikt wersji koszyka ownera {owner_id} po {self.max_attempts} probach")
            raise ConcurrentModification(owner_id, self.max_attempts) from e

    @staticmethod
    def _guard(fn: Callable[[], T]) -> T:
        # bledy bazy nie wychodza poza serwis
        try:
            return fn()
        except SQLAlchemyError as e:
            logger.error(f"Blad warstwy persystencji: {e}")
            raise UpstreamTimeout("persistence", str(e)) from e


def _check_id(field: str, value) -> None:
    if not isinstance(value, str) or not _ID_RE.fullmatch(value):
        raise InvalidArgument(field, "dozwolone 1-64 znaki [A-Za-z0-9_-]")


def _check_ids(owner_id, product_id, variant_id) -> None:
    _check_id("owner_id", owner_id)
    _check_id("product_id", product_id)
    _check_id("variant_id", variant_id)


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidArgument("quantity", "musi byc liczba calkowita >= 1")
