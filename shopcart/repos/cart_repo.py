# shopcart/repos/cart_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from shopcart.data.models.cart import CartModel
from shopcart.data.models.cart_line import CartLineModel
from shopcart.domain.cart import Cart, CartLine, VariantSnapshot
from shopcart.utils.retry import VersionConflict
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartRepo:
    """
    Koszyk zapisywany jako jeden dokument: wiersz carts + jego pozycje.
    Zapis w jednej transakcji z warunkiem na wersje (optimistic locking).
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_owner(self, owner_id: str) -> Optional[Cart]:
        model = self.db.execute(
            select(CartModel)
            .where(CartModel.owner_id == owner_id)
            .options(selectinload(CartModel.lines))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        cart = self._to_domain(model) if model is not None else None
        self._release()
        return cart

    def save(self, cart: Cart) -> Cart:
        """
        Zapisuje caly koszyk albo nic. Rzuca VersionConflict gdy ktos inny
        zapisal koszyk od czasu odczytu (albo rownolegle go utworzyl).
        """
        now = datetime.now(timezone.utc)

        try:
            if cart.cart_id is None:
                model = CartModel(
                    owner_id=cart.owner_id,
                    version=1,
                    total_quantity=cart.total_quantity,
                    total_value=cart.total_value,
                    is_active=cart.cart_active,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(model)
                self.db.flush()
                cart_id, new_version = model.id, 1
            else:
                # np update carts set version 3 where id 1 and version 2
                result = self.db.execute(
                    update(CartModel)
                    .where(CartModel.id == cart.cart_id, CartModel.version == cart.version)
                    .values(
                        version=cart.version + 1,
                        total_quantity=cart.total_quantity,
                        total_value=cart.total_value,
                        is_active=cart.cart_active,
                        updated_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise VersionConflict(f"cart {cart.cart_id} version {cart.version}")

                cart_id, new_version = cart.cart_id, cart.version + 1
                self.db.execute(delete(CartLineModel).where(CartLineModel.cart_id == cart_id))

            self.db.add_all(self._line_models(cart_id, cart.lines))
            self.db.commit()
            self.db.expunge_all()

        except IntegrityError as e:
            # inny request utworzyl koszyk dla tego samego ownera
            self.db.rollback()
            raise VersionConflict(f"cart for owner {cart.owner_id} created concurrently") from e
        except BaseException:
            # cokolwiek przed commitem (takze anulowanie) = nic nie zapisane
            self.db.rollback()
            raise

        cart.cart_id = cart_id
        cart.version = new_version
        logger.debug(f"Zapisano koszyk {cart_id} wersja {new_version}")
        return cart

    def list_carts(
        self, page: int, limit: int, owner_id: Optional[str] = None
    ) -> Tuple[int, List[Tuple[Cart, datetime]]]:
        query = select(CartModel)
        count_query = select(func.count(CartModel.id))
        if owner_id:
            query = query.where(CartModel.owner_id == owner_id)
            count_query = count_query.where(CartModel.owner_id == owner_id)

        total = self.db.execute(count_query).scalar_one()
        models = self.db.execute(
            query.options(selectinload(CartModel.lines))
            .order_by(CartModel.updated_at.desc(), CartModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        ).scalars().all()

        carts = [(self._to_domain(m), m.updated_at) for m in models]
        self._release()
        return total, carts

    def owners_with_inactive_lines(self) -> List[str]:
        owners = self.db.execute(
            select(CartModel.owner_id)
            .join(CartLineModel, CartLineModel.cart_id == CartModel.id)
            .where(CartLineModel.is_active.is_(False))
            .distinct()
        ).scalars().all()
        self._release()
        return list(owners)

    def _release(self):
        # obiekty ORM nie zyja dluzej niz jedna operacja, koniec transakcji odczytu
        self.db.expunge_all()
        self.db.rollback()

    @staticmethod
    def _line_models(cart_id: int, lines: List[CartLine]) -> List[CartLineModel]:
        return [
            CartLineModel(
                id=line.line_id,
                cart_id=cart_id,
                position=position,
                product_id=line.product_id,
                variant_id=line.variant_id,
                quantity=line.quantity,
                variant_type=line.snapshot.variant_type,
                price=line.snapshot.price,
                stock=line.snapshot.stock,
                available=line.snapshot.available,
                subtotal=line.subtotal,
                is_active=line.line_active,
            )
            for position, line in enumerate(lines)
        ]

    @staticmethod
    def _to_domain(model: CartModel) -> Cart:
        lines = [
            CartLine(
                line_id=m.id,
                product_id=m.product_id,
                variant_id=m.variant_id,
                quantity=m.quantity,
                snapshot=VariantSnapshot(
                    variant_type=m.variant_type,
                    price=Decimal(m.price),
                    stock=m.stock,
                    available=m.available,
                ),
                subtotal=Decimal(m.subtotal),
                line_active=m.is_active,
            )
            for m in sorted(model.lines, key=lambda m: m.position)
        ]
        return Cart(
            owner_id=model.owner_id,
            cart_id=model.id,
            lines=lines,
            total_quantity=model.total_quantity,
            total_value=Decimal(model.total_value),
            cart_active=model.is_active,
            version=model.version,
        )
