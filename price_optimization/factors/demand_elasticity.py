"""Demand Elasticity Factor - 25% Weight

Price-sensitive demand pulls the price down, insensitive demand lets it rise.
Elasticity arrives precomputed in [0, 1].
"""

from typing import Dict, Optional

from ..core.models import PricingContext, Product


class DemandElasticityFactor:
    """Manages demand-based pricing adjustments"""

    # Elasticity bands
    HIGH_ELASTICITY = 0.8
    LOW_ELASTICITY = 0.2
    ADJUSTMENTS = {
        'high_sensitivity': -0.05,  # reduce price
        'low_sensitivity': 0.05,    # increase price
        'neutral': 0.0
    }

    def get_band(self, elasticity: float) -> str:
        if elasticity > self.HIGH_ELASTICITY:
            return 'high_sensitivity'
        if elasticity < self.LOW_ELASTICITY:
            return 'low_sensitivity'
        return 'neutral'

    def calculate_adjustment(self, elasticity: float) -> float:
        return self.ADJUSTMENTS[self.get_band(elasticity)]

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        band = self.get_band(context.demand_elasticity)
        return {
            'factor_name': 'demand',
            'band': band,
            'adjustment': self.ADJUSTMENTS[band],
            'details': {
                'demand_elasticity': context.demand_elasticity,
                'demand_level': product.demand_level.value if product else None
            }
        }
