"""
End-of-term scoring and per-quarter feedback.

Both the narrative outcome and the quarterly commentary are decision tables:
ordered rule lists evaluated first-match-wins. The order is part of the
observable behaviour of the game, so any reordering must bump
NARRATIVE_RULES_VERSION.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .state import EconomicState, EndReason

NARRATIVE_RULES_VERSION = 1

# (minimum support, rank), checked top to bottom
RANK_BANDS: Tuple[Tuple[float, str], ...] = (
    (90.0, "S"),
    (80.0, "A"),
    (60.0, "B"),
    (40.0, "C"),
    (20.0, "D"),
)
BOTTOM_RANK = "E"
DISSOLVED_RANK = "F"


def letter_rank(support: float, reason: Optional[EndReason] = None) -> str:
    if reason is EndReason.DISSOLVED:
        return DISSOLVED_RANK
    for threshold, rank in RANK_BANDS:
        if support >= threshold:
            return rank
    return BOTTOM_RANK


@dataclass(frozen=True)
class OutcomeMetrics:
    """Whole-term performance measured against the opening quarter."""

    growth: float  # Y_final / Y_seed - 1
    inflation: float  # P_final / P_seed - 1
    unemployment: float
    support: float

    @classmethod
    def from_states(cls, initial: EconomicState, final: EconomicState) -> "OutcomeMetrics":
        return cls(
            growth=final.output / initial.output - 1,
            inflation=final.price_level / initial.price_level - 1,
            unemployment=final.unemployment_rate,
            support=final.public_support,
        )


@dataclass(frozen=True)
class NarrativeRule:
    name: str
    applies: Callable[[OutcomeMetrics], bool]
    title: str
    description: str


NARRATIVE_RULES: Tuple[NarrativeRule, ...] = (
    NarrativeRule(
        "golden_age",
        lambda m: m.support > 75 and m.growth > 0.08 and m.unemployment < 0.028,
        "Architect of a Golden Age",
        "High approval, strong growth and low unemployment. "
        "A term the history books will remember.",
    ),
    NarrativeRule(
        "high_growth",
        lambda m: m.growth > 0.12,
        "Champion of High Growth",
        "Growth came first, and the results followed.",
    ),
    NarrativeRule(
        "stabiliser",
        lambda m: -0.02 < m.inflation < 0.02 and m.support > 60,
        "Steady Hand",
        "Prices held steady and the public's trust was earned.",
    ),
    NarrativeRule(
        "inflation_fighter",
        lambda m: m.inflation > 0.1,
        "Inflation Fighter",
        "A term spent battling rising prices.",
    ),
    NarrativeRule(
        "jobs",
        lambda m: m.unemployment > 0.04,
        "Jobs Crusader",
        "Putting people back to work was the defining challenge of the term.",
    ),
    NarrativeRule(
        "storm",
        lambda m: m.support < 35,
        "Sailing Into the Storm",
        "Hard decisions under the public's unforgiving gaze.",
    ),
)

FALLBACK_NARRATIVE = NarrativeRule(
    "steady",
    lambda m: True,
    "Prudent Policymaker",
    "A term of sound, uneventful economic management.",
)


def narrative_outcome(
    metrics: OutcomeMetrics, rules: Sequence[NarrativeRule] = NARRATIVE_RULES
) -> NarrativeRule:
    for rule in rules:
        if rule.applies(metrics):
            return rule
    return FALLBACK_NARRATIVE


@dataclass(frozen=True)
class Outcome:
    letter_rank: str
    title: str
    description: str
    reason: EndReason
    metrics: OutcomeMetrics


def classify_outcome(history: Sequence[EconomicState], reason: EndReason) -> Outcome:
    """Score a finished game from its full history."""
    metrics = OutcomeMetrics.from_states(history[0], history[-1])
    rule = narrative_outcome(metrics)
    return Outcome(
        letter_rank=letter_rank(metrics.support, reason),
        title=rule.title,
        description=rule.description,
        reason=reason,
        metrics=metrics,
    )


# =============================================================================
# QUARTERLY FEEDBACK
# =============================================================================

@dataclass(frozen=True)
class CommentaryRule:
    name: str
    applies: Callable[[float, float, float], bool]  # (growth, inflation, support)
    message: str


COMMENTARY_RULES: Tuple[CommentaryRule, ...] = (
    CommentaryRule(
        "expansion",
        lambda g, p, s: g > 0.008,
        "The economy is picking up! Let's keep the investment coming.",
    ),
    CommentaryRule(
        "contraction",
        lambda g, p, s: g < -0.005,
        "GDP is shrinking. Domestic demand is in serious trouble.",
    ),
    CommentaryRule(
        "overheating",
        lambda g, p, s: p > 0.01,
        "Prices are climbing fast. It may be time to revisit interest rates.",
    ),
    CommentaryRule(
        "deflation",
        lambda g, p, s: p < -0.005,
        "We risk a deflationary spiral! Bold monetary easing is needed.",
    ),
    CommentaryRule(
        "discontent",
        lambda g, p, s: s < 35,
        "Public discontent is growing. Tread carefully.",
    ),
)

FALLBACK_COMMENTARY = "A smooth quarter. Please set the course for the next one."


@dataclass(frozen=True)
class TurnFeedback:
    """Quarter-on-quarter changes, in percent, plus an advisor comment."""

    period: int
    gdp_change: float
    unemployment_change: float
    price_change: float
    commentary: str


def commentary_for(growth: float, inflation: float, support: float) -> str:
    for rule in COMMENTARY_RULES:
        if rule.applies(growth, inflation, support):
            return rule.message
    return FALLBACK_COMMENTARY


def turn_feedback(previous: EconomicState, current: EconomicState) -> TurnFeedback:
    growth = float(np.log(current.output / previous.output))
    inflation = float(np.log(current.price_level / previous.price_level))
    unemployment_base = previous.unemployment_rate or 1.0
    return TurnFeedback(
        period=current.period,
        gdp_change=(current.output - previous.output) / previous.output * 100,
        unemployment_change=(
            (current.unemployment_rate - previous.unemployment_rate) / unemployment_base * 100
        ),
        price_change=(current.price_level - previous.price_level) / previous.price_level * 100,
        commentary=commentary_for(growth, inflation, current.public_support),
    )
