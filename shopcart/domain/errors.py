# shopcart/domain/errors.py
from typing import Any, Dict


class CartError(Exception):
    """Bazowy blad domeny koszyka, niesie kod i szczegoly dla klienta."""

    code = "CART_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class VariantUnavailable(CartError):
    code = "VARIANT_UNAVAILABLE"

    def __init__(self, product_id: str, variant_id: str):
        super().__init__(
            f"Wariant {variant_id} produktu {product_id} jest niedostepny",
            product_id=product_id,
            variant_id=variant_id,
        )
        self.product_id = product_id
        self.variant_id = variant_id


class InsufficientStock(CartError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, variant_id: str, requested: int, available: int):
        super().__init__(
            f"Niewystarczajacy stan: zadano {requested}, dostepne {available}",
            product_id=product_id,
            variant_id=variant_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.variant_id = variant_id
        self.requested = requested
        self.available = available


class LineNotFound(CartError):
    code = "LINE_NOT_FOUND"

    def __init__(self, product_id: str, variant_id: str):
        super().__init__(
            f"Pozycja {product_id}/{variant_id} nie istnieje w koszyku",
            product_id=product_id,
            variant_id=variant_id,
        )


class ConcurrentModification(CartError):
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, owner_id: str, attempts: int):
        super().__init__(
            "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje",
            owner_id=owner_id,
            attempts=attempts,
        )


class UpstreamTimeout(CartError):
    code = "UPSTREAM_TIMEOUT"

    def __init__(self, source: str, detail: str = ""):
        super().__init__(
            f"Uplynal limit czasu lub blad uslugi: {source}",
            source=source,
            detail=detail,
        )
        self.source = source


class InvalidArgument(CartError):
    code = "INVALID_ARGUMENT"

    def __init__(self, field: str, detail: str):
        super().__init__(f"Niepoprawny argument {field}: {detail}", field=field, detail=detail)
