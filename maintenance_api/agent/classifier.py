"""
Deterministic intent classifier: decides whether a chat message can be
answered from local data before we pay for an LLM call.

Scoring is a weighted keyword scan: every rule whose pattern matches the
lower-cased text adds its weight, and the sum is squashed into [0, 1] by a
fixed normalizer. The resulting "confidence" is a tuning knob, not a
probability. The weights, normalizers and cutoffs below are the values the
operators tuned against real questions; change them deliberately and update
tests/test_classifier.py with them.
"""
import re
from dataclasses import dataclass

from maintenance_api.models.chat import ClassificationResult

OTHER = "other"

# Replies generated locally only at or above this confidence.
SHORT_CIRCUIT_CONFIDENCE = 0.7

FLIGHT_ID_PATTERN = re.compile(r"a400-\d{1,2}")


@dataclass(frozen=True)
class IntentRule:
    pattern: re.Pattern
    weight: int

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class IntentPolicy:
    """A weight table plus the constants that turn its score into an intent."""

    name: str
    label: str
    rules: tuple[IntentRule, ...]
    normalizer: float
    cutoff: float
    # Bonus added when the message mentions a flight id; 0 disables the signal.
    flight_id_weight: int = 0


def _rule(pattern: str, weight: int) -> IntentRule:
    return IntentRule(re.compile(pattern), weight)


SQUADRON_POLICY = IntentPolicy(
    name="squadron",
    label="summary",
    rules=(
        # strong signals
        _rule(r"\bhow many\b", 3),
        _rule(r"\bsquadron summary\b|\bsquadron\b", 3),
        _rule(r"\boverall health\b|\boverall status\b", 2),
        _rule(r"\bdeployable\b|\bdeployable state\b|\bnon-deployable\b", 2),
        _rule(r"\btotal aircraft\b|\btotal flights\b", 2),
        # moderate signals
        _rule(r"\bsummary\b", 1),
        _rule(r"\bhealth\b", 1),
    ),
    normalizer=6,
    cutoff=0.25,
    flight_id_weight=1,
)

GREETING_POLICY = IntentPolicy(
    name="greeting",
    label="greeting",
    rules=(_rule(r"\b(hello|hi|hey)\b", 3),),
    normalizer=3,
    cutoff=0.5,
)


def score(text: str, policy: IntentPolicy) -> int:
    return sum(rule.weight for rule in policy.rules if rule.matches(text))


def classify(text: str | None, policy: IntentPolicy = SQUADRON_POLICY) -> ClassificationResult:
    """Score `text` against `policy` and label it.

    The intent is the policy's label when confidence is strictly above the
    cutoff, otherwise "other".
    """
    t = str(text or "").lower()
    raw = score(t, policy)

    flight_id_mention = FLIGHT_ID_PATTERN.search(t) is not None
    if flight_id_mention:
        raw += policy.flight_id_weight

    confidence = min(1.0, raw / policy.normalizer)
    intent = policy.label if confidence > policy.cutoff else OTHER
    return ClassificationResult(intent=intent, confidence=confidence, flightIdMention=flight_id_mention)


def is_confident(result: ClassificationResult, policy: IntentPolicy = SQUADRON_POLICY) -> bool:
    """True when the result is strong enough to answer locally."""
    return result.intent == policy.label and result.confidence >= SHORT_CIRCUIT_CONFIDENCE
