"""Master Pricing Orchestrator

Coordinates the seven pricing factors, applies weights, enforces the downside
guard and floor/ceiling bounds, and scores confidence. Every call is a pure
function of its product snapshot and context.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from . import FACTOR_WEIGHTS, SAFETY_CONTROLS, CONFIDENCE_CONTROLS, WEATHER_CATEGORIES
from .confidence import clamp_confidence, fallback_confidence
from .core.exceptions import InvalidInput, OracleUnavailable
from .core.models import (
    AdjustmentSet, ConstraintApplied, PricingContext, PricingDecision, Product, Recommendation
)
from .factors import (
    DemandElasticityFactor, InventoryLevelFactor, TimeOfDayFactor, CompetitionFactor,
    UserSegmentFactor, HistoricalPerformanceFactor, ExternalConditionsFactor
)
from .interfaces import ConfidenceOracle

logger = logging.getLogger(__name__)


def round_price(price: float) -> float:
    """Round a currency amount to cents, half-up"""
    return float(Decimal(str(price)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class PricingOrchestrator:
    """Master orchestrator for pricing decisions"""

    def __init__(self, config: Optional[Dict] = None,
                 confidence_oracle: Optional[ConfidenceOracle] = None):
        """Initialize orchestrator with optional configuration"""
        self.config = config or {}
        self.factor_weights = FACTOR_WEIGHTS.copy()
        self.safety_controls = SAFETY_CONTROLS.copy()
        self.confidence_controls = CONFIDENCE_CONTROLS.copy()
        self.confidence_oracle = confidence_oracle

        # Update with any custom configuration
        if 'factor_weights' in self.config:
            self.factor_weights.update(self.config['factor_weights'])
        if 'safety_controls' in self.config:
            self.safety_controls.update(self.config['safety_controls'])
        if 'confidence_controls' in self.config:
            self.confidence_controls.update(self.config['confidence_controls'])

        unknown = set(self.factor_weights) - set(FACTOR_WEIGHTS)
        if unknown:
            raise ValueError(f"Unknown factors in weights: {sorted(unknown)}")

        # Validate weights sum to 1.0
        weight_sum = sum(self.factor_weights.values())
        if abs(weight_sum - 1.0) > 0.001:
            raise ValueError(f"Factor weights must sum to 1.0, got {weight_sum}")

        self._initialize_factors()
        oracle_name = type(confidence_oracle).__name__ if confidence_oracle else 'none'
        logger.info(f"Pricing orchestrator initialized (confidence oracle: {oracle_name})")

    def _initialize_factors(self):
        """Initialize all pricing factor instances"""
        self.factors = {
            'demand': DemandElasticityFactor(),
            'inventory': InventoryLevelFactor(),
            'time': TimeOfDayFactor(self.config.get('time_scale_factor', 1.0)),
            'competitor': CompetitionFactor(),
            'user_segment': UserSegmentFactor(),
            'historical': HistoricalPerformanceFactor(),
            'external': ExternalConditionsFactor(
                self.config.get('weather_categories', WEATHER_CATEGORIES)
            )
        }

    def decide(self, product: Product, context: PricingContext,
               timestamp: Optional[datetime] = None) -> PricingDecision:
        """Calculate a bounded price for a product under the given context.

        ``timestamp`` should be timezone-aware; it defaults to the current UTC
        time. A naive value is read as UTC and every decision carries its
        timestamp in UTC so ledger entries stay comparable.
        """
        if not isinstance(product, Product):
            raise InvalidInput(f"Expected a Product, got {type(product).__name__}")
        if not isinstance(context, PricingContext):
            raise InvalidInput(f"Expected a PricingContext, got {type(context).__name__}")

        factor_results = self.calculate_all_factors(product, context)
        adjustments = AdjustmentSet(**{
            name: result['adjustment'] for name, result in factor_results.items()
        })
        total_adjustment = self.combine_adjustments(adjustments)

        current_price = product.current_price
        new_price, constraint = self.apply_price_bounds(product, current_price * (1 + total_adjustment))

        confidence, confidence_source = self.calculate_confidence(adjustments, context, total_adjustment)

        decision = PricingDecision(
            product_id=product.id,
            timestamp=timestamp or datetime.now(timezone.utc),
            previous_price=current_price,
            new_price=new_price,
            confidence=confidence,
            adjustments=adjustments,
            constraint_applied=constraint,
            recommendation=self.recommend(current_price, new_price),
            total_adjustment=total_adjustment,
            confidence_source=confidence_source
        )
        logger.debug(
            f"Priced {product.id}: {current_price:.2f} -> {new_price:.2f} "
            f"({decision.recommendation.value}, constraint={constraint.value}, confidence={confidence:.2f})"
        )
        return decision

    def calculate_all_factors(self, product: Product, context: PricingContext) -> Dict[str, Dict]:
        """Calculate scores for all pricing factors"""
        return {
            name: factor.calculate_factor_score(context, product)
            for name, factor in self.factors.items()
        }

    def combine_adjustments(self, adjustments: AdjustmentSet) -> float:
        """Weighted sum of the raw factor adjustments"""
        values = adjustments.as_factor_dict()
        return float(sum(self.factor_weights[name] * values[name] for name in self.factor_weights))

    def apply_price_bounds(self, product: Product,
                           raw_price: float) -> Tuple[float, ConstraintApplied]:
        """Downside guard first, then floor/ceiling clamp, then rounding"""
        guard = product.current_price * (1 - self.safety_controls['max_single_decrease'])
        guarded_price = max(raw_price, guard)

        new_price = round_price(float(np.clip(guarded_price, product.price_floor, product.price_ceiling)))

        if new_price == product.price_floor:
            constraint = ConstraintApplied.FLOOR
        elif new_price == product.price_ceiling:
            constraint = ConstraintApplied.CEILING
        else:
            constraint = ConstraintApplied.NONE
        return new_price, constraint

    @staticmethod
    def recommend(previous_price: float, new_price: float) -> Recommendation:
        if new_price > previous_price:
            return Recommendation.INCREASE
        if new_price < previous_price:
            return Recommendation.DECREASE
        return Recommendation.MAINTAIN

    def calculate_confidence(self, adjustments: AdjustmentSet, context: PricingContext,
                             total_adjustment: float) -> Tuple[float, str]:
        """Oracle estimate when available, deterministic score otherwise"""
        if self.confidence_oracle is not None:
            try:
                estimate = self.confidence_oracle.estimate(context, total_adjustment)
                if estimate is None or not np.isfinite(estimate) or not 0 <= estimate <= 1:
                    raise OracleUnavailable(f"Oracle returned invalid confidence: {estimate!r}")
                return clamp_confidence(estimate, self.confidence_controls), 'oracle'
            except OracleUnavailable as e:
                logger.warning(f"Confidence oracle unavailable, using fallback: {e}")
            except Exception as e:
                # Any oracle failure must degrade to the deterministic score
                logger.warning(f"Confidence oracle failed ({type(e).__name__}), using fallback: {e}")

        return fallback_confidence(adjustments, context.inventory_ratio,
                                   self.confidence_controls), 'fallback'

    def explain(self, decision: PricingDecision) -> Dict:
        """Generate detailed audit breakdown for a pricing decision"""
        values = decision.adjustments.as_factor_dict()
        factors = {}
        for name, weight in self.factor_weights.items():
            factors[name] = {
                'weight': weight,
                'adjustment': values[name],
                'contribution': weight * values[name]
            }

        return {
            'decision_id': f"{decision.product_id}_{decision.timestamp.isoformat()}",
            'product_id': decision.product_id,
            'price_change': {
                'from': decision.previous_price,
                'to': decision.new_price,
                'change_pct': decision.price_change_pct
            },
            'total_adjustment': decision.total_adjustment,
            'confidence': decision.confidence,
            'confidence_source': decision.confidence_source,
            'constraint_applied': decision.constraint_applied.value,
            'recommendation': decision.recommendation.value,
            'primary_factor': self._get_primary_factor(factors),
            'factors': factors
        }

    @staticmethod
    def _get_primary_factor(factors: Dict[str, Dict]) -> str:
        """Identify the factor with the greatest weighted impact"""
        max_impact = 0.0
        primary_factor = 'none'
        for name, data in factors.items():
            impact = abs(data['contribution'])
            if impact > max_impact:
                max_impact = impact
                primary_factor = name
        return primary_factor

    def batch_decide(self, items: List[Tuple[Product, PricingContext]]) -> List[PricingDecision]:
        """Calculate prices for multiple products"""
        return [self.decide(product, context) for product, context in items]
