"""Builds a PricingContext from a request record.

Signals the caller leaves out are derived from the product, the clock and
the price history ledger.
"""

from datetime import datetime
from typing import Dict, Sequence

from .. import SEASONALITY_BY_MONTH
from ..core.exceptions import InvalidInput
from ..core.models import ExternalFactors, PricingContext, PricingDecision, Product, UserSegment
from ..history.ledger import recent_performance
from .validation import CONTEXT_LIMITS, optional_number

# Elasticity assumed for each coarse demand level
DEMAND_LEVEL_ELASTICITY = {
    'low': 0.15,
    'medium': 0.5,
    'high': 0.85
}

DEFAULT_USER_SEGMENT = UserSegment.RETURNING_CUSTOMER.value


def seasonality_for(moment: datetime) -> float:
    return SEASONALITY_BY_MONTH[moment.month - 1]


def day_of_week_for(moment: datetime) -> int:
    """Sunday = 0 through Saturday = 6"""
    return moment.isoweekday() % 7


def build_context(request: Dict, product: Product, now: datetime,
                  history: Sequence[PricingDecision] = ()) -> PricingContext:
    """Merge explicit request signals with derived defaults"""
    demand_elasticity = optional_number(request, 'demandElasticity', CONTEXT_LIMITS['demandElasticity'])
    if demand_elasticity is None:
        demand_elasticity = DEMAND_LEVEL_ELASTICITY[product.demand_level.value]

    inventory_ratio = optional_number(request, 'inventoryRatio', CONTEXT_LIMITS['inventoryRatio'])
    if inventory_ratio is None:
        inventory_ratio = product.inventory_ratio

    time_of_day = optional_number(request, 'timeOfDay', CONTEXT_LIMITS['timeOfDay'])
    day_of_week = optional_number(request, 'dayOfWeek', CONTEXT_LIMITS['dayOfWeek'])
    seasonality_index = optional_number(request, 'seasonalityIndex')

    historical_performance = optional_number(
        request, 'historicalPerformance', CONTEXT_LIMITS['historicalPerformance']
    )
    if historical_performance is None:
        historical_performance = recent_performance(history)

    user_segment = request.get('userSegment') or DEFAULT_USER_SEGMENT

    external = request.get('externalFactors') or {}
    if not isinstance(external, dict):
        raise InvalidInput("externalFactors must be an object")

    return PricingContext(
        demand_elasticity=demand_elasticity,
        inventory_ratio=inventory_ratio,
        time_of_day=now.hour if time_of_day is None else time_of_day,
        day_of_week=day_of_week_for(now) if day_of_week is None else day_of_week,
        seasonality_index=seasonality_for(now) if seasonality_index is None else seasonality_index,
        user_segment=user_segment,
        historical_performance=historical_performance,
        competitor_price=optional_number(request, 'competitorPrice'),
        external_factors=ExternalFactors(
            weather=optional_number(external, 'weather', CONTEXT_LIMITS['weather']),
            economic_indicator=optional_number(
                external, 'economicIndicator', CONTEXT_LIMITS['economicIndicator']
            )
        )
    )
