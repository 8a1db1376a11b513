"""Time Factor - 15% Weight

Peak shopping hours and weekends carry a small premium.
"""

from typing import Dict, Optional

from ..core.models import PricingContext, Product


class TimeOfDayFactor:
    """Manages time-based pricing adjustments"""

    PEAK_HOURS = (10, 18)  # inclusive
    WEEKEND_DAYS = (0, 6)  # Sunday, Saturday
    PEAK_HOUR_BONUS = 0.2
    WEEKEND_BONUS = 0.3
    ADJUSTMENT_PER_UNIT = 0.02

    def __init__(self, scale_factor: float = 1.0):
        self.scale_factor = scale_factor

    def is_peak_hour(self, time_of_day: int) -> bool:
        start, end = self.PEAK_HOURS
        return start <= time_of_day <= end

    def is_weekend(self, day_of_week: int) -> bool:
        return day_of_week in self.WEEKEND_DAYS

    def calculate_time_factor(self, time_of_day: int, day_of_week: int) -> float:
        """Base 1.0 plus additive peak-hour and weekend bonuses"""
        factor = 1.0
        if self.is_peak_hour(time_of_day):
            factor += self.PEAK_HOUR_BONUS
        if self.is_weekend(day_of_week):
            factor += self.WEEKEND_BONUS
        return factor

    def calculate_adjustment(self, time_of_day: int, day_of_week: int) -> float:
        time_factor = self.calculate_time_factor(time_of_day, day_of_week)
        return (time_factor - 1.0) * self.ADJUSTMENT_PER_UNIT * self.scale_factor

    def calculate_factor_score(self, context: PricingContext,
                               product: Optional[Product] = None) -> Dict:
        peak = self.is_peak_hour(context.time_of_day)
        weekend = self.is_weekend(context.day_of_week)
        if peak and weekend:
            band = 'peak_weekend'
        elif peak:
            band = 'peak'
        elif weekend:
            band = 'weekend'
        else:
            band = 'off_peak'
        return {
            'factor_name': 'time',
            'band': band,
            'adjustment': self.calculate_adjustment(context.time_of_day, context.day_of_week),
            'details': {
                'time_of_day': context.time_of_day,
                'day_of_week': context.day_of_week,
                'time_factor': self.calculate_time_factor(context.time_of_day, context.day_of_week),
                'scale_factor': self.scale_factor
            }
        }
