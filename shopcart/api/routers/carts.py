#shopcart/api/routers/carts.py
from fastapi import APIRouter, Depends

from shopcart.api.deps import get_owner_id, get_service
from shopcart.domain.schemas import CartView, CleanupOut, ItemIn, QuantityIn
from shopcart.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartView)
def get_cart(owner_id: str = Depends(get_owner_id), svc: CartService = Depends(get_service)):
    return svc.get_cart(owner_id)


@router.post("/items", response_model=CartView)
def add_item(
    payload: ItemIn,
    owner_id: str = Depends(get_owner_id),
    svc: CartService = Depends(get_service),
):
    return svc.add_item(
        owner_id=owner_id,
        product_id=payload.product_id,
        variant_id=payload.variant_id,
        quantity=payload.quantity,
    )


@router.put("/items", response_model=CartView)
def set_quantity(
    payload: QuantityIn,
    owner_id: str = Depends(get_owner_id),
    svc: CartService = Depends(get_service),
):
    return svc.set_quantity(
        owner_id=owner_id,
        product_id=payload.product_id,
        variant_id=payload.variant_id,
        quantity=payload.quantity,
    )


@router.delete("/items/{product_id}/{variant_id}", response_model=CartView)
def remove_item(
    product_id: str,
    variant_id: str,
    owner_id: str = Depends(get_owner_id),
    svc: CartService = Depends(get_service),
):
    return svc.remove_item(owner_id, product_id, variant_id)


@router.delete("", response_model=CartView)
def clear_cart(owner_id: str = Depends(get_owner_id), svc: CartService = Depends(get_service)):
    return svc.clear_cart(owner_id)


@router.post("/cleanup", response_model=CleanupOut)
def remove_inactive_items(owner_id: str = Depends(get_owner_id), svc: CartService = Depends(get_service)):
    return svc.remove_inactive_items(owner_id)
