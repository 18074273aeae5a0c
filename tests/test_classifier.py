"""
Tests for the deterministic intent classifier.

The weights and thresholds are tuned by hand, so the expected scores below
are worked out from the weight table rather than from any model.
"""
import pytest

from maintenance_api.agent.classifier import (
    GREETING_POLICY,
    SHORT_CIRCUIT_CONFIDENCE,
    SQUADRON_POLICY,
    classify,
    is_confident,
)


def test_strong_squadron_question_saturates():
    result = classify("squadron summary please, how many are deployable")
    assert result.intent == "summary"
    assert result.confidence == 1.0
    assert is_confident(result)


def test_unrelated_message_is_other():
    result = classify("hi")
    assert result.intent == "other"
    assert result.confidence == 0
    assert not result.flightIdMention
    assert not is_confident(result)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("overall health", 3 / 6),       # overall health (2) + health (1)
        ("summary", 1 / 6),
        ("what is the health of A400-07", 2 / 6),  # health (1) + flight id (1)
        ("total aircraft deployable", 4 / 6),
    ],
)
def test_weights_accumulate(text, expected):
    assert classify(text).confidence == pytest.approx(expected)


def test_cutoff_is_strict():
    # health + summary = 2/6 > 0.25 -> summary; summary alone = 1/6 -> other
    assert classify("health summary").intent == "summary"
    assert classify("summary").intent == "other"


def test_summary_below_short_circuit_threshold():
    result = classify("total aircraft deployable")
    assert result.intent == "summary"
    assert result.confidence < SHORT_CIRCUIT_CONFIDENCE
    assert not is_confident(result)


def test_flight_id_mention_is_case_insensitive():
    assert classify("Status of A400-3?").flightIdMention
    assert not classify("Status of tail 3?").flightIdMention


def test_confidence_is_clamped():
    text = "squadron summary how many deployable total aircraft overall health A400-01 " * 5
    assert classify(text).confidence == 1.0


def test_deterministic():
    text = "How many aircraft in the squadron are deployable?"
    results = {classify(text).model_dump_json() for _ in range(20)}
    assert len(results) == 1


def test_none_is_treated_as_empty():
    assert classify(None).intent == "other"


def test_greeting_policy():
    result = classify("Hello there", GREETING_POLICY)
    assert result.intent == "greeting"
    assert result.confidence == 1.0
    assert is_confident(result, GREETING_POLICY)
    assert classify("squadron summary", GREETING_POLICY).intent == "other"


def test_policies_expose_their_tables():
    assert SQUADRON_POLICY.normalizer == 6
    assert SQUADRON_POLICY.cutoff == 0.25
    assert [r.weight for r in SQUADRON_POLICY.rules] == [3, 3, 2, 2, 2, 1, 1]
    assert GREETING_POLICY.normalizer == 3
