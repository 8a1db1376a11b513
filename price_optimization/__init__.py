"""Real-Time Price Optimization Engine - Core Module"""

__version__ = "1.0.0"

# Factor weights configuration
FACTOR_WEIGHTS = {
    'demand': 0.25,
    'inventory': 0.20,
    'time': 0.15,
    'competitor': 0.15,
    'user_segment': 0.10,
    'historical': 0.10,
    'external': 0.05
}

# Validate weights sum to 1.0
assert abs(sum(FACTOR_WEIGHTS.values()) - 1.0) < 0.001, "Factor weights must sum to 100%"

# Price safety controls
SAFETY_CONTROLS = {
    'max_single_decrease': 0.30,  # never drop more than 30% in one decision
}

# Deterministic confidence scoring
CONFIDENCE_CONTROLS = {
    'base': 0.85,
    'large_adjustment_threshold': 0.5,
    'large_adjustment_penalty': 0.15,
    'moderate_adjustment_threshold': 0.3,
    'moderate_adjustment_penalty': 0.10,
    'low_inventory_threshold': 0.1,
    'low_inventory_penalty': 0.10,
    'min': 0.5,
    'max': 0.95
}

# Seasonality index by month (January first)
SEASONALITY_BY_MONTH = [0.8, 0.9, 1.0, 1.1, 1.2, 1.3, 1.2, 1.1, 1.0, 0.9, 0.8, 0.7]

# Categories whose price responds to weather
WEATHER_CATEGORIES = ('travel',)
