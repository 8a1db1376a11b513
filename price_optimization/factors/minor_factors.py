"""Minor Factors - User Segment (10%), Historical Performance (10%), External Conditions (5%)

Implements the remaining pricing factors with lower weights.
"""

from typing import Dict, Optional, Sequence

from .. import WEATHER_CATEGORIES
from ..core.models import ExternalFactors, PricingContext, Product


class UserSegmentFactor:
    """User Segment Factor - 10% Weight"""

    SEGMENT_ADJUSTMENTS = {
        'new_customer': -0.03,      # welcome discount
        'returning_customer': 0.0,
        'vip_customer': -0.05,      # loyalty discount
        'price_sensitive': -0.02,
        'premium': 0.02             # premium pricing
    }

    def calculate_adjustment(self, user_segment: str) -> float:
        # Unknown segments are priced neutrally
        return self.SEGMENT_ADJUSTMENTS.get(user_segment, 0.0)

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        segment = context.user_segment
        return {
            'factor_name': 'user_segment',
            'band': segment if segment in self.SEGMENT_ADJUSTMENTS else 'unknown',
            'adjustment': self.calculate_adjustment(segment),
            'details': {'user_segment': segment}
        }


class HistoricalPerformanceFactor:
    """Historical Performance Factor - 10% Weight"""

    STRONG_PERFORMANCE = 0.8
    WEAK_PERFORMANCE = 0.3
    ADJUSTMENT = 0.03

    def calculate_adjustment(self, performance: float) -> float:
        if performance > self.STRONG_PERFORMANCE:
            return self.ADJUSTMENT
        if performance < self.WEAK_PERFORMANCE:
            return -self.ADJUSTMENT
        return 0.0

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        adjustment = self.calculate_adjustment(context.historical_performance)
        band = 'strong' if adjustment > 0 else 'weak' if adjustment < 0 else 'normal'
        return {
            'factor_name': 'historical',
            'band': band,
            'adjustment': adjustment,
            'details': {'historical_performance': context.historical_performance}
        }


class ExternalConditionsFactor:
    """External Conditions Factor - 5% Weight

    Weather, economic indicator and seasonality. Seasonality is a multiplier
    around 1.0, so only its deviation from 1.0 moves the price.
    """

    WEATHER_COEFFICIENT = 0.01
    ECONOMIC_COEFFICIENT = 0.005
    SEASONALITY_COEFFICIENT = 0.02

    def __init__(self, weather_categories: Sequence[str] = WEATHER_CATEGORIES):
        self.weather_categories = set(weather_categories)

    def applies_weather(self, category: Optional[str]) -> bool:
        return category is None or category in self.weather_categories

    def calculate_adjustment(self, external_factors: ExternalFactors,
                             seasonality_index: float,
                             category: Optional[str] = None) -> float:
        adjustment = 0.0
        if external_factors.weather is not None and self.applies_weather(category):
            adjustment += external_factors.weather * self.WEATHER_COEFFICIENT
        if external_factors.economic_indicator is not None:
            adjustment += external_factors.economic_indicator * self.ECONOMIC_COEFFICIENT
        adjustment += (seasonality_index - 1.0) * self.SEASONALITY_COEFFICIENT
        return adjustment

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        category = product.category if product is not None else None
        adjustment = self.calculate_adjustment(
            context.external_factors, context.seasonality_index, category
        )
        return {
            'factor_name': 'external',
            'band': 'seasonal_peak' if context.seasonality_index > 1.0 else
                    'seasonal_low' if context.seasonality_index < 1.0 else 'neutral',
            'adjustment': adjustment,
            'details': {
                'weather': context.external_factors.weather,
                'weather_applied': self.applies_weather(category),
                'economic_indicator': context.external_factors.economic_indicator,
                'seasonality_index': context.seasonality_index
            }
        }
