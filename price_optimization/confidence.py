"""Confidence scoring for pricing decisions.

The deterministic score is always available. An oracle such as
``OpenAIConfidenceOracle`` may be plugged into the orchestrator; whenever it
fails the orchestrator falls back to ``fallback_confidence``.
"""

import json
import logging
import re
from typing import Dict, Optional

import numpy as np
from openai import OpenAI

from . import CONFIDENCE_CONTROLS
from .core.exceptions import OracleUnavailable
from .core.models import AdjustmentSet, PricingContext
from .interfaces import ConfidenceOracle

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"[-+]?\d*\.?\d+")


def fallback_confidence(adjustments: AdjustmentSet,
                        inventory_ratio: float,
                        controls: Optional[Dict] = None) -> float:
    """Deterministic confidence from adjustment magnitude and data quality"""
    controls = controls or CONFIDENCE_CONTROLS
    confidence = controls['base']

    # Extreme adjustments are less trustworthy; both penalties may apply
    magnitude = adjustments.total_magnitude()
    if magnitude > controls['large_adjustment_threshold']:
        confidence -= controls['large_adjustment_penalty']
    if magnitude > controls['moderate_adjustment_threshold']:
        confidence -= controls['moderate_adjustment_penalty']

    # Very low inventory is less predictable
    if inventory_ratio < controls['low_inventory_threshold']:
        confidence -= controls['low_inventory_penalty']

    return clamp_confidence(confidence, controls)


def clamp_confidence(confidence: float, controls: Optional[Dict] = None) -> float:
    controls = controls or CONFIDENCE_CONTROLS
    return float(np.clip(confidence, controls['min'], controls['max']))


class OpenAIConfidenceOracle(ConfidenceOracle):
    """Asks a chat-completion model to rate a proposed price adjustment"""

    PROMPT_TEMPLATE = (
        "Analyze the confidence level for a price adjustment of {adjustment_pct:.2f}% "
        "based on the following factors:\n"
        "- Demand elasticity: {demand_elasticity}\n"
        "- Inventory level: {inventory_ratio}\n"
        "- Historical performance: {historical_performance}\n"
        "- Market conditions: {market_conditions}\n\n"
        "Return only a confidence score between 0 and 1."
    )

    def __init__(self, client: Optional[OpenAI] = None, model: str = "gpt-4o-mini",
                 max_tokens: int = 10, temperature: float = 0.1, timeout: float = 5.0):
        self.client = client or OpenAI()
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    def build_prompt(self, context: PricingContext, total_adjustment: float) -> str:
        market_conditions = json.dumps({
            'weather': context.external_factors.weather,
            'economicIndicator': context.external_factors.economic_indicator,
            'seasonality': context.seasonality_index
        })
        return self.PROMPT_TEMPLATE.format(
            adjustment_pct=total_adjustment * 100,
            demand_elasticity=context.demand_elasticity,
            inventory_ratio=context.inventory_ratio,
            historical_performance=context.historical_performance,
            market_conditions=market_conditions
        )

    def parse_score(self, text: Optional[str]) -> float:
        match = _NUMBER_PATTERN.search(text or "")
        if match is None:
            raise OracleUnavailable(f"No confidence score in model reply: {text!r}")
        score = float(match.group())
        if not np.isfinite(score) or score < 0 or score > 1:
            raise OracleUnavailable(f"Confidence score out of range: {score}")
        return score

    def estimate(self, context: PricingContext, total_adjustment: float) -> float:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': self.build_prompt(context, total_adjustment)}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=self.timeout
            )
        except Exception as e:
            raise OracleUnavailable(f"Confidence model call failed: {e}") from e

        if not response.choices:
            raise OracleUnavailable("Confidence model returned no choices")
        return self.parse_score(response.choices[0].message.content)
