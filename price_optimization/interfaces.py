"""Boundary collaborators of the pricing engine.

The engine depends only on these abstractions; storage technology and any
external confidence service live behind them.
"""

from abc import ABC, abstractmethod
from typing import List

from .core.models import PricingContext, PricingDecision, Product


class ProductCatalog(ABC):
    """Read access to products plus the explicit price commit."""

    @abstractmethod
    def get(self, product_id: str) -> Product:
        """Return the product or raise ``NotFound``."""

    @abstractmethod
    def update_price(self, product_id: str, new_price: float) -> Product:
        """Commit ``new_price`` as the product's current price."""


class HistoryStore(ABC):
    """Append-only ledger of pricing decisions."""

    @abstractmethod
    def append(self, decision: PricingDecision) -> None:
        """Record a decision or raise ``DuplicateKey``."""

    @abstractmethod
    def query(self, product_id: str, limit: int) -> List[PricingDecision]:
        """Up to ``limit`` most recent decisions, newest first."""


class ConfidenceOracle(ABC):
    """Optional pluggable confidence estimator."""

    @abstractmethod
    def estimate(self, context: PricingContext, total_adjustment: float) -> float:
        """Return a confidence in [0, 1] or raise ``OracleUnavailable``."""
