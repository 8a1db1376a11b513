from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from price_optimization.confidence import OpenAIConfidenceOracle, fallback_confidence
from price_optimization.core.exceptions import OracleUnavailable
from price_optimization.core.models import AdjustmentSet
from price_optimization.orchestrator import PricingOrchestrator


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def client():
    return MagicMock()


def test_fallback_bounds():
    extreme = AdjustmentSet(demand=1.0, inventory=1.0, time=1.0)
    assert fallback_confidence(extreme, 0.0) == 0.5
    assert fallback_confidence(AdjustmentSet(), 0.5) == 0.85
    assert fallback_confidence(AdjustmentSet(), 0.05) == pytest.approx(0.75)


def test_oracle_parses_model_reply(client, neutral_context):
    client.chat.completions.create.return_value = completion("Confidence: 0.82")
    oracle = OpenAIConfidenceOracle(client=client, model="test-model")

    assert oracle.estimate(neutral_context, 0.02) == 0.82
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs['model'] == "test-model"
    assert "2.00%" in kwargs['messages'][0]['content']


@pytest.mark.parametrize("reply", ["not sure", "", None, "7"])
def test_oracle_rejects_unusable_reply(client, neutral_context, reply):
    client.chat.completions.create.return_value = completion(reply)
    with pytest.raises(OracleUnavailable):
        OpenAIConfidenceOracle(client=client).estimate(neutral_context, 0.0)


def test_oracle_wraps_client_errors(client, neutral_context):
    client.chat.completions.create.side_effect = TimeoutError("read timed out")
    with pytest.raises(OracleUnavailable):
        OpenAIConfidenceOracle(client=client).estimate(neutral_context, 0.0)


def test_orchestrator_falls_back_when_model_fails(client, product, neutral_context):
    client.chat.completions.create.side_effect = ConnectionError("unreachable")
    orchestrator = PricingOrchestrator(confidence_oracle=OpenAIConfidenceOracle(client=client))

    decision = orchestrator.decide(product, neutral_context)

    assert decision.confidence == 0.85
    assert decision.confidence_source == 'fallback'


def test_orchestrator_uses_model_score(client, product, neutral_context):
    client.chat.completions.create.return_value = completion("0.6")
    orchestrator = PricingOrchestrator(confidence_oracle=OpenAIConfidenceOracle(client=client))

    decision = orchestrator.decide(product, neutral_context)

    assert decision.confidence == 0.6
    assert decision.confidence_source == 'oracle'
