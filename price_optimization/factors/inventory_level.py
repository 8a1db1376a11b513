"""Inventory Level Factor - 20% Weight

Scarce stock raises the price, overstock lowers it.
"""

from typing import Dict, Optional

from ..core.models import PricingContext, Product


class InventoryLevelFactor:
    """Manages inventory-based pricing adjustments"""

    # Inventory ratio bands, checked in order
    PRESSURE_BANDS = [
        ('very_low', lambda ratio: ratio < 0.1, 0.10),
        ('low', lambda ratio: ratio < 0.3, 0.05),
        ('high', lambda ratio: ratio > 0.8, -0.05)
    ]

    def get_pressure_band(self, inventory_ratio: float):
        """Determine pressure band and adjustment for an inventory ratio"""
        for band_name, matches, adjustment in self.PRESSURE_BANDS:
            if matches(inventory_ratio):
                return band_name, adjustment
        return 'normal', 0.0

    def calculate_adjustment(self, inventory_ratio: float) -> float:
        return self.get_pressure_band(inventory_ratio)[1]

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        band, adjustment = self.get_pressure_band(context.inventory_ratio)
        details = {'inventory_ratio': round(context.inventory_ratio, 4)}
        if product is not None:
            details['inventory'] = product.inventory
            details['max_inventory'] = product.max_inventory
        return {
            'factor_name': 'inventory',
            'band': band,
            'adjustment': adjustment,
            'details': details
        }
