from datetime import datetime, timedelta, timezone

import pytest

from price_optimization.core.exceptions import ConflictError, DuplicateKey, InvalidInput, NotFound
from price_optimization.core.models import Recommendation
from price_optimization.history import InMemoryHistoryStore
from price_optimization.service import PricingService
from price_optimization.utils.context_builder import build_context, day_of_week_for

from .test_ledger import make_decision


class CollidingHistoryStore(InMemoryHistoryStore):
    """Rejects the first ``collisions`` appends as duplicates"""

    def __init__(self, collisions):
        super().__init__()
        self.collisions = collisions

    def append(self, decision):
        if self.collisions:
            self.collisions -= 1
            raise DuplicateKey(decision.product_id, decision.timestamp)
        super().append(decision)


@pytest.fixture
def service(catalog, history, fixed_time):
    return PricingService(catalog, history, clock=lambda: fixed_time)


def test_calculate_price_derives_context_and_records(service, history, fixed_time):
    result = service.calculate_price({'productId': 'prod-001', 'userId': 'user-001'})

    # June seasonality 1.3 is the only active signal
    assert result['adjustments']['externalAdjustment'] == pytest.approx(0.006)
    assert result['newPrice'] == 300.09
    assert result['previousPrice'] == 300.0
    assert result['recommendation'] == 'increase'
    assert result['constraintApplied'] == 'none'
    assert result['timestamp'] == fixed_time.isoformat()

    recorded = history.query('prod-001', 10)
    assert len(recorded) == 1
    assert recorded[0].to_dict() == result


def test_explicit_signals_override_defaults(service):
    result = service.calculate_price({
        'productId': 'prod-001',
        'userSegment': 'vip_customer',
        'demandElasticity': 0.9,
        'inventoryRatio': 0.05,
        'timeOfDay': 12,
        'dayOfWeek': 6,
        'seasonalityIndex': 1.0,
        'competitorPrice': 250.0,
        'externalFactors': {'weather': 0.5}
    })
    adjustments = result['adjustments']

    assert adjustments['userSegmentAdjustment'] == -0.05
    assert adjustments['demandAdjustment'] == -0.05
    assert adjustments['inventoryAdjustment'] == 0.10
    assert adjustments['timeAdjustment'] == pytest.approx(0.01)
    assert adjustments['competitorAdjustment'] == -0.05
    assert adjustments['externalAdjustment'] == pytest.approx(0.005)


def test_current_price_override(service):
    result = service.calculate_price({'productId': 'prod-001', 'currentPrice': 320.0, 'seasonalityIndex': 1.0})

    assert result['previousPrice'] == 320.0
    assert result['newPrice'] == 320.0
    assert result['recommendation'] == 'maintain'


def test_repeated_calls_get_unique_increasing_timestamps(service, history, fixed_time):
    service.calculate_price({'productId': 'prod-001'})
    service.calculate_price({'productId': 'prod-001'})

    recorded = history.query('prod-001', 10)
    assert len(recorded) == 2
    assert recorded[0].timestamp == fixed_time + timedelta(microseconds=1)
    assert recorded[1].timestamp == fixed_time


def test_ledger_trend_feeds_historical_signal(service, history, fixed_time):
    for minutes in range(3):
        history.append(make_decision(minutes=minutes, recommendation=Recommendation.INCREASE))

    result = service.calculate_price({'productId': 'prod-001'})

    assert result['adjustments']['historicalAdjustment'] == 0.03


def test_duplicate_key_retried_once(catalog, fixed_time):
    history = CollidingHistoryStore(collisions=1)
    service = PricingService(catalog, history, clock=lambda: fixed_time)

    result = service.calculate_price({'productId': 'prod-001'})

    assert result['timestamp'] == (fixed_time + timedelta(microseconds=1)).isoformat()
    assert len(history.query('prod-001', 10)) == 1


def test_repeated_collision_is_conflict(catalog, fixed_time):
    service = PricingService(catalog, CollidingHistoryStore(collisions=2), clock=lambda: fixed_time)

    with pytest.raises(ConflictError):
        service.calculate_price({'productId': 'prod-001'})

    status, body = service.handle_calculate({'productId': 'prod-001'})
    assert status == 200
    assert body['productId'] == 'prod-001'


def test_conflict_maps_to_409(catalog, fixed_time):
    service = PricingService(catalog, CollidingHistoryStore(collisions=2), clock=lambda: fixed_time)

    status, body = service.handle_calculate({'productId': 'prod-001'})
    assert status == 409
    assert 'error' in body


@pytest.mark.parametrize("request_body, status", [
    ({}, 400),
    ({'productId': ''}, 400),
    ({'productId': 42}, 400),
    ({'productId': 'prod-404'}, 404),
    ({'productId': 'prod-001', 'demandElasticity': 2.0}, 400),
    ({'productId': 'prod-001', 'timeOfDay': float('nan')}, 400),
    ({'productId': 'prod-001', 'currentPrice': -1}, 400),
    ({'productId': 'prod-001', 'externalFactors': {'weather': 3}}, 400),
    ({'productId': 'prod-001', 'externalFactors': 'sunny'}, 400),
])
def test_invalid_requests_are_rejected(service, history, request_body, status):
    code, body = service.handle_calculate(request_body)

    assert code == status
    assert 'error' in body
    assert history.query('prod-001', 10) == []


def test_non_dict_request_rejected(service):
    assert service.handle_calculate(['prod-001'])[0] == 400


def test_unexpected_errors_propagate(history, fixed_time):
    class BrokenCatalog:
        def get(self, product_id):
            raise RuntimeError("catalog offline")

    service = PricingService(BrokenCatalog(), history, clock=lambda: fixed_time)
    with pytest.raises(RuntimeError):
        service.handle_calculate({'productId': 'prod-001'})


def test_price_history_newest_first(service):
    service.calculate_price({'productId': 'prod-001'})
    service.calculate_price({'productId': 'prod-001', 'inventoryRatio': 0.05})

    status, body = service.handle_history('prod-001', 1)

    assert status == 200
    assert len(body) == 1
    assert body[0]['adjustments']['inventoryAdjustment'] == 0.10
    assert service.get_price_history('prod-404') == []
    assert service.handle_history('prod-001', 0)[0] == 400


def test_commit_decision_updates_catalog(service, catalog, history):
    service.calculate_price({'productId': 'prod-001', 'inventoryRatio': 0.05})
    decision = history.query('prod-001', 1)[0]

    updated = service.commit_decision(decision)

    assert updated.current_price == decision.new_price
    assert catalog.get('prod-001').current_price == decision.new_price


def test_catalog_update_price_enforces_bounds(catalog):
    with pytest.raises(InvalidInput):
        catalog.update_price('prod-001', 600.0)
    with pytest.raises(NotFound):
        catalog.update_price('prod-404', 300.0)


def test_catalog_record_purchase(catalog):
    assert catalog.record_purchase('prod-002', 5).inventory == 20
    with pytest.raises(InvalidInput):
        catalog.record_purchase('prod-002', 21)
    with pytest.raises(InvalidInput):
        catalog.record_purchase('prod-002', 0)


def test_context_builder_defaults(product):
    sunday_evening = datetime(2024, 12, 1, 19, 30, tzinfo=timezone.utc)
    context = build_context({}, product, sunday_evening)

    assert day_of_week_for(sunday_evening) == 0
    assert context.day_of_week == 0
    assert context.time_of_day == 19
    assert context.seasonality_index == 0.7
    assert context.demand_elasticity == 0.5
    assert context.inventory_ratio == 0.5
    assert context.historical_performance == 0.7
    assert context.user_segment == 'returning_customer'
    assert context.competitor_price is None
