# shopcart/api/routers/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopcart.api.deps import get_service
from shopcart.domain.schemas import CartPageOut, CartsCleanupOut
from shopcart.services.cart_service import CartService

router = APIRouter(prefix="/admin/carts", tags=["admin"])


@router.get("", response_model=CartPageOut)
def list_carts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    owner_id: Optional[str] = Query(None),
    svc: CartService = Depends(get_service),
):
    return svc.list_carts(page=page, limit=limit, owner_id=owner_id)


@router.post("/cleanup", response_model=CartsCleanupOut)
def cleanup_all(svc: CartService = Depends(get_service)):
    """
    Usuwa nieaktywne pozycje ze wszystkich koszykow (to samo co task celery).
    """
    return CartsCleanupOut(carts_cleaned=svc.cleanup_all_carts())
