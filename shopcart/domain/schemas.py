# shopcart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from shopcart.domain.cart import InactiveReason

ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


class ItemIn(BaseModel):
    """Schema dla dodawania wariantu produktu do koszyka."""

    product_id: str = Field(..., pattern=ID_PATTERN, description="ID produktu")
    variant_id: str = Field(..., pattern=ID_PATTERN, description="ID wariantu")
    quantity: int = Field(1, gt=0, description="Ilosc (musi byc > 0)")


class QuantityIn(BaseModel):
    """Schema dla ustawienia ilosci istniejacej pozycji."""

    product_id: str = Field(..., pattern=ID_PATTERN)
    variant_id: str = Field(..., pattern=ID_PATTERN)
    quantity: int = Field(..., gt=0, description="Do usuniecia sluzy DELETE")


class VariantOut(BaseModel):
    variant_id: str
    variant_type: str
    price: Decimal
    stock: int
    available: bool


class CartItemOut(BaseModel):
    """Pozycja koszyka (response)."""

    line_id: str
    product_id: str
    variant: VariantOut
    quantity: int
    subtotal: Decimal
    is_active: bool
    reason: Optional[InactiveReason] = None


class CartView(BaseModel):
    """Widok koszyka: aktywne i nieaktywne pozycje oraz sumy z aktywnych."""

    cart_id: Optional[int] = None
    owner_id: str
    active_items: List[CartItemOut] = []
    inactive_items: List[CartItemOut] = []
    total_quantity: int = 0
    total_value: Decimal = Decimal("0.00")
    cart_active: bool = False
    version: int = 0


class CleanupOut(BaseModel):
    removed: int
    cart: CartView


class CartSummaryItemOut(BaseModel):
    product_id: str
    variant_id: str
    variant_type: str
    quantity: int
    price: Decimal
    subtotal: Decimal
    stock: int
    is_active: bool


class CartSummaryOut(BaseModel):
    """Podsumowanie koszyka dla panelu admina."""

    cart_id: int
    owner_id: str
    total_items: int
    active_items: int
    total_quantity: int
    total_value: Decimal
    last_updated: Optional[datetime] = None
    items: List[CartSummaryItemOut]

    model_config = ConfigDict(from_attributes=True)


class CartPageOut(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    carts: List[CartSummaryOut]


class CartsCleanupOut(BaseModel):
    carts_cleaned: int
