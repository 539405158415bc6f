# product_service/main.py
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

app = FastAPI(title="Product Service (dev mock)")


class Variant(BaseModel):
    id: str
    variant_type: str
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    available: bool = True


class Product(BaseModel):
    id: str
    name: str
    is_available: bool = True
    variants: List[Variant] = []


class VariantPatch(BaseModel):
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    available: Optional[bool] = None


PRODUCTS: Dict[str, Product] = {}


def _has_stock(product: Product) -> bool:
    return any(v.available and v.stock > 0 for v in product.variants)


def save_product(product: Product) -> Product:
    # jak pre-save w katalogu: dostepnosc produktu wynika z wariantow
    if product.variants:
        product.is_available = _has_stock(product)
    PRODUCTS[product.id] = product
    return product


def _payload(product: Product) -> dict:
    prices = [v.price for v in product.variants if v.available]
    data = product.model_dump()
    data["lowest_price"] = min(prices) if prices else None
    data["highest_price"] = max(prices) if prices else None
    return data


def seed():
    save_product(Product(id="kbd", name="Keyboard", variants=[
        Variant(id="kbd-us", variant_type="US layout", price=Decimal("199.99"), stock=10),
        Variant(id="kbd-pl", variant_type="PL layout", price=Decimal("209.99"), stock=3),
    ]))
    save_product(Product(id="mouse", name="Mouse", variants=[
        Variant(id="mouse-std", variant_type="standard", price=Decimal("49.50"), stock=25),
    ]))
    save_product(Product(id="monitor", name="Monitor", variants=[
        Variant(id="mon-27", variant_type="27 inch", price=Decimal("899.00"), stock=1),
    ]))


seed()


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return _payload(product)


@app.put("/products/{product_id}")
def put_product(product_id: str, product: Product):
    if product.id != product_id:
        raise HTTPException(status_code=400, detail="Product id mismatch")
    return _payload(save_product(product))


@app.patch("/products/{product_id}/variants/{variant_id}")
def patch_variant(product_id: str, variant_id: str, patch: VariantPatch):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    for variant in product.variants:
        if variant.id == variant_id:
            for name, value in patch.model_dump(exclude_none=True).items():
                setattr(variant, name, value)
            return _payload(save_product(product))

    raise HTTPException(status_code=404, detail="Variant not found")


@app.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: str):
    PRODUCTS.pop(product_id, None)
