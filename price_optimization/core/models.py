from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from enum import Enum

from ..utils.validation import (
    CONTEXT_LIMITS, require_in_range, require_int_in_range, require_non_empty_string,
    require_positive, require_whole_cents
)
from .exceptions import InvalidInput


class DemandLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UserSegment(Enum):
    NEW_CUSTOMER = "new_customer"
    RETURNING_CUSTOMER = "returning_customer"
    VIP_CUSTOMER = "vip_customer"
    PRICE_SENSITIVE = "price_sensitive"
    PREMIUM = "premium"


class ConstraintApplied(Enum):
    NONE = "none"
    FLOOR = "floor"
    CEILING = "ceiling"


class Recommendation(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"


@dataclass(frozen=True)
class Product:
    """Sellable unit with its pricing bounds and stock levels"""
    id: str
    base_price: float
    current_price: float
    price_floor: float
    price_ceiling: float
    inventory: int
    max_inventory: int
    demand_level: DemandLevel = DemandLevel.MEDIUM
    category: str = "general"
    name: Optional[str] = None

    def __post_init__(self):
        require_non_empty_string(self.id, 'id')
        for name in ('base_price', 'current_price', 'price_floor', 'price_ceiling'):
            require_positive(getattr(self, name), name)
        for name in ('price_floor', 'price_ceiling'):
            require_whole_cents(getattr(self, name), name)
        if self.price_floor > self.price_ceiling:
            raise InvalidInput(
                f"Price floor {self.price_floor} exceeds ceiling {self.price_ceiling} for {self.id}"
            )
        for name in ('inventory', 'max_inventory'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidInput(f"{name} must be a non-negative integer, got {value!r}")
        if self.inventory > self.max_inventory:
            raise InvalidInput(
                f"Inventory {self.inventory} exceeds max inventory {self.max_inventory} for {self.id}"
            )
        if not isinstance(self.demand_level, DemandLevel):
            try:
                object.__setattr__(self, 'demand_level', DemandLevel(self.demand_level))
            except ValueError:
                raise InvalidInput(f"Unknown demand level: {self.demand_level!r}")

    @property
    def inventory_ratio(self) -> float:
        if self.max_inventory == 0:
            return 0.0
        return self.inventory / self.max_inventory


@dataclass(frozen=True)
class ExternalFactors:
    """Optional external market conditions, each in [-1, 1]"""
    weather: Optional[float] = None
    economic_indicator: Optional[float] = None

    def __post_init__(self):
        if self.weather is not None:
            require_in_range(self.weather, 'weather', CONTEXT_LIMITS['weather'])
        if self.economic_indicator is not None:
            require_in_range(self.economic_indicator, 'economicIndicator',
                             CONTEXT_LIMITS['economicIndicator'])


@dataclass(frozen=True)
class PricingContext:
    """Per-request signal bundle supplied by the caller"""
    demand_elasticity: float
    inventory_ratio: float
    time_of_day: int
    day_of_week: int  # 0 = Sunday
    seasonality_index: float = 1.0
    user_segment: str = UserSegment.RETURNING_CUSTOMER.value
    historical_performance: float = 0.5
    competitor_price: Optional[float] = None
    external_factors: ExternalFactors = field(default_factory=ExternalFactors)

    def __post_init__(self):
        require_in_range(self.demand_elasticity, 'demandElasticity', CONTEXT_LIMITS['demandElasticity'])
        require_in_range(self.inventory_ratio, 'inventoryRatio', CONTEXT_LIMITS['inventoryRatio'])
        object.__setattr__(self, 'time_of_day',
                           require_int_in_range(self.time_of_day, 'timeOfDay', CONTEXT_LIMITS['timeOfDay']))
        object.__setattr__(self, 'day_of_week',
                           require_int_in_range(self.day_of_week, 'dayOfWeek', CONTEXT_LIMITS['dayOfWeek']))
        require_positive(self.seasonality_index, 'seasonalityIndex')
        require_in_range(self.historical_performance, 'historicalPerformance',
                         CONTEXT_LIMITS['historicalPerformance'])
        if self.competitor_price is not None:
            require_positive(self.competitor_price, 'competitorPrice')
        if isinstance(self.user_segment, UserSegment):
            object.__setattr__(self, 'user_segment', self.user_segment.value)
        elif not isinstance(self.user_segment, str):
            raise InvalidInput(f"userSegment must be a string, got {self.user_segment!r}")
        if self.external_factors is None:
            object.__setattr__(self, 'external_factors', ExternalFactors())


@dataclass(frozen=True)
class AdjustmentSet:
    """Fractional adjustment contributed by each of the seven factors"""
    demand: float = 0.0
    inventory: float = 0.0
    time: float = 0.0
    competitor: float = 0.0
    user_segment: float = 0.0
    historical: float = 0.0
    external: float = 0.0

    # Serialised key for each factor
    KEYS = {
        'demand': 'demandAdjustment',
        'inventory': 'inventoryAdjustment',
        'time': 'timeAdjustment',
        'competitor': 'competitorAdjustment',
        'user_segment': 'userSegmentAdjustment',
        'historical': 'historicalAdjustment',
        'external': 'externalAdjustment'
    }

    def as_factor_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.KEYS}

    def total_magnitude(self) -> float:
        """Sum of absolute raw adjustments, unweighted"""
        return sum(abs(value) for value in self.as_factor_dict().values())

    def to_dict(self) -> Dict[str, float]:
        return {key: getattr(self, name) for name, key in self.KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentSet':
        return cls(**{name: float(data.get(key, 0.0)) for name, key in cls.KEYS.items()})


@dataclass(frozen=True)
class PricingDecision:
    """Engine output and the unit stored in the price history ledger"""
    product_id: str
    timestamp: datetime
    previous_price: float
    new_price: float
    confidence: float
    adjustments: AdjustmentSet
    constraint_applied: ConstraintApplied
    recommendation: Recommendation
    total_adjustment: float = 0.0
    confidence_source: str = "fallback"

    def __post_init__(self):
        # Ledger ordering needs comparable instants; naive timestamps are read as UTC
        if not isinstance(self.timestamp, datetime):
            raise InvalidInput(f"timestamp must be a datetime, got {self.timestamp!r}")
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, 'timestamp', self.timestamp.replace(tzinfo=timezone.utc))
        else:
            object.__setattr__(self, 'timestamp', self.timestamp.astimezone(timezone.utc))

    @property
    def price_change_pct(self) -> float:
        return ((self.new_price - self.previous_price) / self.previous_price) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-compatible record"""
        return {
            'productId': self.product_id,
            'timestamp': self.timestamp.isoformat(),
            'previousPrice': self.previous_price,
            'newPrice': self.new_price,
            'confidence': self.confidence,
            'adjustments': self.adjustments.to_dict(),
            'constraintApplied': self.constraint_applied.value,
            'recommendation': self.recommendation.value,
            'totalAdjustment': self.total_adjustment,
            'confidenceSource': self.confidence_source
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PricingDecision':
        return cls(
            product_id=data['productId'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            previous_price=float(data['previousPrice']),
            new_price=float(data['newPrice']),
            confidence=float(data['confidence']),
            adjustments=AdjustmentSet.from_dict(data.get('adjustments', {})),
            constraint_applied=ConstraintApplied(data.get('constraintApplied', 'none')),
            recommendation=Recommendation(data['recommendation']),
            total_adjustment=float(data.get('totalAdjustment', 0.0)),
            confidence_source=data.get('confidenceSource', 'fallback')
        )
