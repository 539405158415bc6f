# shopcart/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from shopcart.data.database import get_db
from shopcart.services.cart_service import CartService
from shopcart.services.product_client import HttpVariantResolver, VariantResolver


def get_resolver() -> VariantResolver:
    return HttpVariantResolver()


def get_service(
    db: Session = Depends(get_db),
    resolver: VariantResolver = Depends(get_resolver),
) -> CartService:
    return CartService(db=db, resolver=resolver)


def get_owner_id(x_owner_id: str = Header(..., alias="X-Owner-Id")) -> str:
    # tozsamosc ustawia gateway po uwierzytelnieniu
    return x_owner_id
