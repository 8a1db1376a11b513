"""Pricing Factors Module"""

from .demand_elasticity import DemandElasticityFactor
from .inventory_level import InventoryLevelFactor
from .time_of_day import TimeOfDayFactor
from .competition import CompetitionFactor
from .minor_factors import (
    UserSegmentFactor,
    HistoricalPerformanceFactor,
    ExternalConditionsFactor
)

__all__ = [
    'DemandElasticityFactor',
    'InventoryLevelFactor',
    'TimeOfDayFactor',
    'CompetitionFactor',
    'UserSegmentFactor',
    'HistoricalPerformanceFactor',
    'ExternalConditionsFactor'
]
