# shopcart/services/product_client.py
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Protocol

import requests
from requests import RequestException

from shopcart.domain.cart import VariantSnapshot
from shopcart.domain.errors import UpstreamTimeout
from shopcart.utils.retry import http_retry
from shopcart.utils.settings import PRODUCT_SERVICE_URL, CATALOG_TIMEOUT_SECONDS
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class VariantResolver(Protocol):
    def resolve(self, product_id: str, variant_id: str) -> Optional[VariantSnapshot]:
        """Aktualny snapshot wariantu albo None (produkt/wariant niedostepny)."""
        ...


class CatalogClient:
    def __init__(self, base_url: str | None = None, timeout: float = CATALOG_TIMEOUT_SECONDS):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _get(self, url: str) -> requests.Response:
        return requests.get(url, timeout=self.timeout)

    def fetch_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"CatalogClient GET {url}")

        try:
            resp = self._get(url)
            # 404 = brak produktu, nie ponawiamy
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()
        except requests.Timeout as e:
            logger.error(f"Timeout katalogu dla produktu {product_id}: {e}")
            raise UpstreamTimeout("catalog", str(e)) from e
        except (RequestException, ValueError) as e:
            logger.error(f"Blad katalogu dla produktu {product_id}: {e}")
            raise UpstreamTimeout("catalog", str(e)) from e


class HttpVariantResolver:
    """Resolver nad product-service, bez cache poza jednym wywolaniem."""

    def __init__(self, client: CatalogClient | None = None):
        self.client = client or CatalogClient()

    def resolve(self, product_id: str, variant_id: str) -> Optional[VariantSnapshot]:
        product = self.client.fetch_product(product_id)
        if product is None:
            return None

        # ksztalt odpowiedzi sprawdzany zanim po niej chodzimy
        if not isinstance(product, dict):
            raise UpstreamTimeout("catalog", f"niepoprawny produkt w odpowiedzi: {type(product).__name__}")
        if not product.get("is_available", False):
            return None

        variants = product.get("variants", [])
        if not isinstance(variants, list):
            raise UpstreamTimeout("catalog", f"niepoprawna lista wariantow: {type(variants).__name__}")

        for variant in variants:
            if not isinstance(variant, dict):
                raise UpstreamTimeout("catalog", f"niepoprawny wariant w odpowiedzi: {variant!r}")
            if str(variant.get("id")) == variant_id:
                return _snapshot_from_payload(variant)
        return None


class InMemoryVariantResolver:
    """
    Katalog w pamieci: {product_id: {"is_available": bool, "variants": {variant_id: VariantSnapshot}}}.
    Do testow i lokalnego uruchomienia bez product-service.
    """

    def __init__(self):
        self.products: Dict[str, Dict[str, Any]] = {}

    def put_variant(
        self,
        product_id: str,
        variant_id: str,
        price: Decimal | str,
        stock: int,
        available: bool = True,
        variant_type: str = "default",
    ) -> VariantSnapshot:
        product = self.products.setdefault(product_id, {"is_available": True, "variants": {}})
        snapshot = VariantSnapshot(
            variant_type=variant_type,
            price=Decimal(str(price)),
            stock=stock,
            available=available,
        )
        product["variants"][variant_id] = snapshot
        return snapshot

    def set_stock(self, product_id: str, variant_id: str, stock: int) -> None:
        old = self.products[product_id]["variants"][variant_id]
        self.put_variant(product_id, variant_id, old.price, stock, old.available, old.variant_type)

    def set_price(self, product_id: str, variant_id: str, price: Decimal | str) -> None:
        old = self.products[product_id]["variants"][variant_id]
        self.put_variant(product_id, variant_id, price, old.stock, old.available, old.variant_type)

    def withdraw_product(self, product_id: str) -> None:
        self.products[product_id]["is_available"] = False

    def delete_variant(self, product_id: str, variant_id: str) -> None:
        self.products[product_id]["variants"].pop(variant_id, None)

    def resolve(self, product_id: str, variant_id: str) -> Optional[VariantSnapshot]:
        product = self.products.get(product_id)
        if product is None or not product["is_available"]:
            return None
        return product["variants"].get(variant_id)


def _snapshot_from_payload(variant: Dict[str, Any]) -> VariantSnapshot:
    try:
        return VariantSnapshot(
            variant_type=str(variant.get("variant_type", "")),
            price=Decimal(str(variant["price"])),
            stock=int(variant["stock"]),
            available=bool(variant.get("available", True)),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise UpstreamTimeout("catalog", f"niepoprawny wariant w odpowiedzi: {e}") from e
