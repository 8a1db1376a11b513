"""Competition Factor - 15% Weight

Follows a competitor that sits more than 10% away from our current price.
"""

from typing import Dict, Optional

from ..core.models import PricingContext, Product


class CompetitionFactor:
    """Manages competition-based pricing adjustments"""

    DIFFERENCE_THRESHOLD = 0.10
    ADJUSTMENTS = {
        'competitor_higher': 0.05,
        'competitor_lower': -0.05,
        'parity': 0.0,
        'no_data': 0.0
    }

    def calculate_relative_difference(self, current_price: float,
                                      competitor_price: float) -> float:
        return (competitor_price - current_price) / current_price

    def get_band(self, current_price: float, competitor_price: Optional[float]) -> str:
        if competitor_price is None:
            return 'no_data'
        diff = self.calculate_relative_difference(current_price, competitor_price)
        if diff > self.DIFFERENCE_THRESHOLD:
            return 'competitor_higher'
        if diff < -self.DIFFERENCE_THRESHOLD:
            return 'competitor_lower'
        return 'parity'

    def calculate_adjustment(self, current_price: float,
                             competitor_price: Optional[float]) -> float:
        return self.ADJUSTMENTS[self.get_band(current_price, competitor_price)]

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        if product is None:
            raise ValueError("Competition factor needs the product's current price")
        competitor_price = context.competitor_price
        band = self.get_band(product.current_price, competitor_price)
        details = {'current_price': product.current_price, 'competitor_price': competitor_price}
        if competitor_price is not None:
            details['relative_difference'] = round(
                self.calculate_relative_difference(product.current_price, competitor_price), 4
            )
        return {
            'factor_name': 'competitor',
            'band': band,
            'adjustment': self.ADJUSTMENTS[band],
            'details': details
        }
