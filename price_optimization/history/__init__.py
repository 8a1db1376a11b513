"""Price history ledger"""

from .ledger import InMemoryHistoryStore, JsonlHistoryStore, recent_performance

__all__ = [
    'InMemoryHistoryStore',
    'JsonlHistoryStore',
    'recent_performance'
]
