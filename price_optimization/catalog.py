"""In-memory product catalog"""

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, Optional

from .core.exceptions import InvalidInput, NotFound
from .core.models import Product
from .interfaces import ProductCatalog
from .utils.validation import require_positive

logger = logging.getLogger(__name__)


class InMemoryProductCatalog(ProductCatalog):
    """Catalog keyed by product id; products are replaced, never mutated"""

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._products: Dict[str, Product] = {}
        self._lock = threading.Lock()
        for product in products or []:
            self.add(product)

    def add(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = product

    def get(self, product_id: str) -> Product:
        with self._lock:
            product = self._products.get(product_id)
        if product is None:
            raise NotFound(product_id)
        return product

    def update_price(self, product_id: str, new_price: float) -> Product:
        """Commit a new current price, keeping it inside the product's bounds"""
        new_price = require_positive(new_price, 'newPrice')
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise NotFound(product_id)
            if not product.price_floor <= new_price <= product.price_ceiling:
                raise InvalidInput(
                    f"Price {new_price} outside [{product.price_floor}, {product.price_ceiling}] for {product_id}"
                )
            updated = replace(product, current_price=new_price)
            self._products[product_id] = updated
        logger.info(f"Committed price for {product_id}: {product.current_price:.2f} -> {new_price:.2f}")
        return updated

    def record_purchase(self, product_id: str, quantity: int = 1) -> Product:
        """Take purchased units out of stock"""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput(f"quantity must be a positive integer, got {quantity!r}")
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise NotFound(product_id)
            if quantity > product.inventory:
                raise InvalidInput(
                    f"Cannot sell {quantity} units of {product_id}, only {product.inventory} in stock"
                )
            updated = replace(product, inventory=product.inventory - quantity)
            self._products[product_id] = updated
        logger.info(f"Recorded purchase of {quantity} x {product_id}, {updated.inventory} left")
        return updated
