"""Price History Ledger

Append-only record of pricing decisions per product, used for audit and as
a recent-trend input to future decisions.
"""

import json
import logging
import re
import threading
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

import numpy as np

from ..core.exceptions import DuplicateKey
from ..core.models import PricingDecision, Recommendation
from ..interfaces import HistoryStore
from ..utils.validation import validate_limit

logger = logging.getLogger(__name__)

MAX_QUERY_LIMIT = 100
DEFAULT_HISTORICAL_PERFORMANCE = 0.7

# Trend score per recommendation
RECOMMENDATION_SCORES = {
    Recommendation.INCREASE: 1.0,
    Recommendation.MAINTAIN: 0.5,
    Recommendation.DECREASE: 0.0
}


class InMemoryHistoryStore(HistoryStore):
    """Ledger held in process memory"""

    def __init__(self, max_query_limit: int = MAX_QUERY_LIMIT):
        self.max_query_limit = max_query_limit
        self._records: Dict[str, Dict] = defaultdict(dict)
        self._lock = threading.Lock()

    def append(self, decision: PricingDecision) -> None:
        with self._lock:
            product_records = self._records[decision.product_id]
            if decision.timestamp in product_records:
                raise DuplicateKey(decision.product_id, decision.timestamp)
            product_records[decision.timestamp] = decision
        logger.debug(f"Recorded decision for {decision.product_id} at {decision.timestamp.isoformat()}")

    def query(self, product_id: str, limit: int = MAX_QUERY_LIMIT) -> List[PricingDecision]:
        limit = validate_limit(limit, self.max_query_limit)
        with self._lock:
            if product_id not in self._records:
                return []
            records = list(self._records[product_id].values())
        records.sort(key=lambda decision: decision.timestamp, reverse=True)
        return records[:limit]

    def latest(self, product_id: str) -> Optional[PricingDecision]:
        records = self.query(product_id, 1)
        return records[0] if records else None


class JsonlHistoryStore(HistoryStore):
    """Ledger persisted as one JSON-lines file per product"""

    def __init__(self, log_directory: str = "pricing_history",
                 max_query_limit: int = MAX_QUERY_LIMIT):
        """Initialize ledger with its log directory"""
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)
        self.max_query_limit = max_query_limit
        self._keys: Dict[str, Set[datetime]] = {}
        self._lock = threading.Lock()
        logger.info(f"JSONL history store at {self.log_directory}")

    def _product_file(self, product_id: str) -> Path:
        safe_id = re.sub(r'[^A-Za-z0-9_.-]', '_', product_id)
        return self.log_directory / f"decisions_{safe_id}.jsonl"

    def _read_records(self, product_id: str) -> List[PricingDecision]:
        log_file = self._product_file(product_id)
        if not log_file.exists():
            return []

        records = []
        with open(log_file, 'r') as f:
            for line in f:
                # A line still being written has no trailing newline yet
                if not line.endswith('\n'):
                    continue
                entry = json.loads(line)
                if entry.get('productId') == product_id:
                    records.append(PricingDecision.from_dict(entry))
        return records

    def _keys_for(self, product_id: str) -> Set[datetime]:
        """Timestamps already on disk for a product, loaded on first use"""
        if product_id not in self._keys:
            self._keys[product_id] = {record.timestamp for record in self._read_records(product_id)}
        return self._keys[product_id]

    def append(self, decision: PricingDecision) -> None:
        with self._lock:
            keys = self._keys_for(decision.product_id)
            if decision.timestamp in keys:
                raise DuplicateKey(decision.product_id, decision.timestamp)

            with open(self._product_file(decision.product_id), 'a') as f:
                f.write(json.dumps(decision.to_dict()) + '\n')
            keys.add(decision.timestamp)
        logger.debug(f"Recorded decision for {decision.product_id} at {decision.timestamp.isoformat()}")

    def query(self, product_id: str, limit: int = MAX_QUERY_LIMIT) -> List[PricingDecision]:
        limit = validate_limit(limit, self.max_query_limit)
        records = self._read_records(product_id)
        records.sort(key=lambda decision: decision.timestamp, reverse=True)
        return records[:limit]

    def latest(self, product_id: str) -> Optional[PricingDecision]:
        records = self.query(product_id, 1)
        return records[0] if records else None


def recent_performance(decisions: Sequence[PricingDecision],
                       default: float = DEFAULT_HISTORICAL_PERFORMANCE) -> float:
    """Historical performance signal in [0, 1] from the recent price trend.

    Each decision scores 1.0 for an increase, 0.5 for maintain and 0.0 for a
    decrease; the signal is the mean over the window. Fewer than two
    decisions carry no trend, so ``default`` is returned.
    """
    if len(decisions) < 2:
        return default
    scores = np.array([RECOMMENDATION_SCORES[decision.recommendation] for decision in decisions])
    return float(np.clip(scores.mean(), 0.0, 1.0))
