"""Pricing service boundary

Turns plain request records into pricing decisions, records every decision in
the history ledger and maps the error taxonomy to HTTP-equivalent status
codes. Transport framing stays outside this module.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from .core.exceptions import ConflictError, DuplicateKey, InvalidInput, PricingError
from .core.models import PricingDecision
from .history.ledger import MAX_QUERY_LIMIT
from .interfaces import HistoryStore, ProductCatalog
from .orchestrator import PricingOrchestrator
from .utils.context_builder import build_context
from .utils.validation import require_non_empty_string, require_positive

logger = logging.getLogger(__name__)

# Decisions consulted for the recent-trend signal
TREND_WINDOW = 10
TIMESTAMP_STEP = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PricingService:
    """Calculates, records and commits prices for catalog products"""

    def __init__(self, catalog: ProductCatalog, history: HistoryStore,
                 orchestrator: Optional[PricingOrchestrator] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.catalog = catalog
        self.history = history
        self.orchestrator = orchestrator or PricingOrchestrator()
        self.clock = clock

    def calculate_price(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Price one product and append the decision to the ledger"""
        if not isinstance(request, dict):
            raise InvalidInput("Request body must be an object")
        product_id = request.get('productId')
        if not product_id:
            raise InvalidInput("productId is required")
        require_non_empty_string(product_id, 'productId')

        product = self.catalog.get(product_id)
        if request.get('currentPrice') is not None:
            product = replace(product, current_price=require_positive(request['currentPrice'], 'currentPrice'))

        recent = self.history.query(product_id, TREND_WINDOW)
        now = self.clock()
        context = build_context(request, product, now, recent)

        decision = self.orchestrator.decide(product, context, self._next_timestamp(now, recent))
        decision = self._record(decision)

        logger.info(
            f"Price decision for {product_id} (user {request.get('userId', 'anonymous')}, "
            f"segment {context.user_segment}): {decision.previous_price:.2f} -> {decision.new_price:.2f} "
            f"[{decision.recommendation.value}]"
        )
        return decision.to_dict()

    @staticmethod
    def _next_timestamp(now: datetime, recent: List[PricingDecision]) -> datetime:
        """Keep ledger timestamps non-decreasing and unique per product"""
        if recent and recent[0].timestamp >= now:
            return recent[0].timestamp + TIMESTAMP_STEP
        return now

    def _record(self, decision: PricingDecision) -> PricingDecision:
        """Append, retrying once with an advanced timestamp on collision"""
        try:
            self.history.append(decision)
            return decision
        except DuplicateKey as e:
            logger.warning(f"{e}; retrying with advanced timestamp")

        latest = self.history.query(decision.product_id, 1)
        timestamp = decision.timestamp
        if latest and latest[0].timestamp > timestamp:
            timestamp = latest[0].timestamp
        retried = replace(decision, timestamp=timestamp + TIMESTAMP_STEP)
        try:
            self.history.append(retried)
        except DuplicateKey as e:
            raise ConflictError(
                f"Repeated ledger collision for {decision.product_id}; check clock or concurrent writers"
            ) from e
        return retried

    def get_price_history(self, product_id: str, limit: int = MAX_QUERY_LIMIT) -> List[Dict[str, Any]]:
        """Most recent decisions for a product, newest first"""
        require_non_empty_string(product_id, 'productId')
        return [decision.to_dict() for decision in self.history.query(product_id, limit)]

    def commit_decision(self, decision: PricingDecision):
        """Make a decision's price the product's current price"""
        return self.catalog.update_price(decision.product_id, decision.new_price)

    def handle_calculate(self, request: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """Status code and body for a price calculation request"""
        try:
            return 200, self.calculate_price(request)
        except PricingError as e:
            logger.error(f"Price calculation rejected ({e.status_code}): {e}")
            return e.status_code, {'error': str(e)}
        except Exception:
            logger.exception("Unexpected error in price calculation")
            raise

    def handle_history(self, product_id: str, limit: int = MAX_QUERY_LIMIT) -> Tuple[int, Any]:
        """Status code and body for a price history request"""
        try:
            return 200, self.get_price_history(product_id, limit)
        except PricingError as e:
            logger.error(f"Price history request rejected ({e.status_code}): {e}")
            return e.status_code, {'error': str(e)}
        except Exception:
            logger.exception("Unexpected error fetching price history")
            raise
