# shopcart/domain/cart.py
"""
Agregat koszyka.

Koszyk trzyma kopie (snapshot) danych wariantu z chwili ostatniego dotkniecia
pozycji, zrodlem prawdy jest katalog. Kazda mutacja konczy sie wywolaniem
recompute(), ktore liczy subtotal, aktywnosc pozycji i sumy koszyka.
"""
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Tuple

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    # ceny trzymamy z dokladnoscia do groszy, tak jak kolumny Numeric(12, 2)
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class InactiveReason(str, Enum):
    UNAVAILABLE = "UNAVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


@dataclass(frozen=True)
class VariantSnapshot:
    variant_type: str
    price: Decimal
    stock: int
    available: bool

    def __post_init__(self):
        object.__setattr__(self, "price", to_money(self.price))

    @classmethod
    def unavailable(cls, previous: Optional["VariantSnapshot"] = None) -> "VariantSnapshot":
        # produkt/wariant zniknal z katalogu: stock 0, niedostepny
        if previous is None:
            return cls(variant_type="", price=ZERO, stock=0, available=False)
        return cls(
            variant_type=previous.variant_type,
            price=previous.price,
            stock=0,
            available=False,
        )


@dataclass
class CartLine:
    product_id: str
    variant_id: str
    quantity: int
    snapshot: VariantSnapshot
    line_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    subtotal: Decimal = ZERO
    line_active: bool = False

    @property
    def key(self) -> Tuple[str, str]:
        return (self.product_id, self.variant_id)

    def is_purchasable(self) -> bool:
        s = self.snapshot
        return s.available and s.stock > 0 and self.quantity <= s.stock

    def inactive_reason(self) -> Optional[InactiveReason]:
        # kolejnosc jak w is_purchasable: available, stock, quantity
        s = self.snapshot
        if not s.available:
            return InactiveReason.UNAVAILABLE
        if s.stock == 0:
            return InactiveReason.OUT_OF_STOCK
        if s.stock < self.quantity:
            return InactiveReason.INSUFFICIENT_STOCK
        return None


@dataclass
class Cart:
    owner_id: str
    cart_id: Optional[int] = None
    lines: List[CartLine] = field(default_factory=list)
    total_quantity: int = 0
    total_value: Decimal = ZERO
    cart_active: bool = False
    version: int = 0

    def find_line(self, product_id: str, variant_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.key == (product_id, variant_id):
                return line
        return None

    def recompute(self) -> None:
        total_quantity = 0
        total_value = ZERO

        for line in self.lines:
            line.subtotal = line.snapshot.price * line.quantity
            line.line_active = line.is_purchasable()
            if line.line_active:
                total_quantity += line.quantity
                total_value += line.subtotal

        self.total_quantity = total_quantity
        self.total_value = total_value
        self.cart_active = any(line.line_active for line in self.lines)

    # mutatory, kazdy konczy sie recompute()

    def merge_line(
        self, product_id: str, variant_id: str, quantity: int, snapshot: VariantSnapshot
    ) -> CartLine:
        line = self.find_line(product_id, variant_id)
        if line:
            line.quantity += quantity
            line.snapshot = snapshot
        else:
            line = CartLine(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                snapshot=snapshot,
            )
            self.lines.append(line)

        self.recompute()
        return line

    def set_line_quantity(
        self, product_id: str, variant_id: str, quantity: int, snapshot: VariantSnapshot
    ) -> Optional[CartLine]:
        line = self.find_line(product_id, variant_id)
        if line is None:
            return None
        line.quantity = quantity
        line.snapshot = snapshot
        self.recompute()
        return line

    def refresh_snapshot(self, product_id: str, variant_id: str, snapshot: VariantSnapshot) -> bool:
        """Podmienia snapshot bez ruszania ilosci. Zwraca True jesli cos sie zmienilo."""
        line = self.find_line(product_id, variant_id)
        if line is None or line.snapshot == snapshot:
            return False
        line.snapshot = snapshot
        self.recompute()
        return True

    def remove_line(self, product_id: str, variant_id: str) -> bool:
        before = len(self.lines)
        self.lines = [l for l in self.lines if l.key != (product_id, variant_id)]
        self.recompute()
        return len(self.lines) != before

    def remove_inactive_lines(self) -> int:
        self.recompute()
        before = len(self.lines)
        self.lines = [l for l in self.lines if l.line_active]
        self.recompute()
        return before - len(self.lines)

    def clear(self) -> None:
        self.lines = []
        self.recompute()

    @property
    def active_lines(self) -> List[CartLine]:
        return [l for l in self.lines if l.line_active]

    @property
    def inactive_lines(self) -> List[CartLine]:
        return [l for l in self.lines if not l.line_active]
