"""
Data model for the Macro Policy Game: state snapshots, policy input,
game status and the error hierarchy.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import PolicyLimits, SupportCoefficients, TurnRules


# =============================================================================
# EXCEPTIONS
# =============================================================================

class MacroGameError(Exception):
    """Base class for all game errors."""
    pass


class ModelDomainError(MacroGameError, ValueError):
    """Raised when a state would leave the domain the model is defined on."""
    pass


class InvalidPolicyError(MacroGameError, ValueError):
    """Raised when a policy lever is outside its allowed range."""
    pass


class GameOverError(MacroGameError):
    """Raised when attempting to advance after the game has ended."""
    pass


class GameInProgressError(MacroGameError):
    """Raised when asking for the final outcome before the game has ended."""
    pass


# =============================================================================
# STATUS
# =============================================================================

class GameStatus(Enum):
    RUNNING = "running"
    ENDED = "ended"


class EndReason(Enum):
    TERM_COMPLETE = "term_complete"  # served the full term
    DISSOLVED = "dissolved"  # support collapsed before the term ended


# =============================================================================
# STATE
# =============================================================================

# Quantities that enter logarithms somewhere in the model.
_LOG_FIELDS = ("output", "consumption", "investment", "price_level", "potential_output")


def require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ModelDomainError(f"{name} must be finite and positive, got {value!r}")


@dataclass(frozen=True)
class EconomicState:
    """Snapshot of the economy at the end of one quarter."""

    period: int
    output: float
    consumption: float
    investment: float
    government_spending: float
    price_level: float
    interest_rate: float  # percentage points
    tax_rate: float
    unemployment_rate: float
    public_support: float
    potential_output: float
    label: str = ""

    def __post_init__(self):
        for name in _LOG_FIELDS:
            require_positive(name, getattr(self, name))
        for name in ("government_spending", "interest_rate", "tax_rate"):
            if not math.isfinite(getattr(self, name)):
                raise ModelDomainError(f"{name} must be finite, got {getattr(self, name)!r}")


def check_bounds(state: EconomicState, rules: TurnRules, support: SupportCoefficients) -> None:
    """Raise ModelDomainError if support or unemployment leave the calibrated range."""
    if not support.minimum <= state.public_support <= support.maximum:
        raise ModelDomainError(f"public_support out of range: {state.public_support!r}")
    if not state.unemployment_rate >= rules.unemployment_floor:
        raise ModelDomainError(
            f"unemployment_rate below floor {rules.unemployment_floor}: "
            f"{state.unemployment_rate!r}"
        )


@dataclass(frozen=True)
class PolicyInput:
    """The three levers the player sets each quarter."""

    tax_rate: float = 0.0
    interest_rate_delta: float = 0.0
    spending_delta: float = 0.0

    def validate(self, limits: PolicyLimits) -> None:
        """Raise InvalidPolicyError if any lever is outside its range."""
        for name in ("tax_rate", "interest_rate_delta", "spending_delta"):
            value = getattr(self, name)
            low, high = getattr(limits, name)
            if not math.isfinite(value):
                raise InvalidPolicyError(f"{name} must be finite, got {value!r}")
            if not low <= value <= high:
                raise InvalidPolicyError(f"{name}={value} outside [{low}, {high}]")


@dataclass(frozen=True)
class TerminationEvent:
    """Returned by the turn that ends the game."""

    reason: EndReason
    state: EconomicState

    @property
    def period(self) -> int:
        return self.state.period


def is_terminal(state: EconomicState, rules: TurnRules) -> Optional[EndReason]:
    """End reason for a freshly computed state, or None if play continues."""
    if state.period >= rules.term_length:
        return EndReason.TERM_COMPLETE
    if state.public_support < rules.dissolution_threshold:
        return EndReason.DISSOLVED
    return None
