"""
Configuration for the Macro Policy Game.

Defines the structural model coefficients, the turn rules, the policy
control ranges and the seed economy. The coefficients come from an
error-correction model estimated on quarterly national accounts; they are
fixed constants, not player-tunable parameters.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class ConsumptionCoefficients:
    """Error-correction consumption function (log space)."""

    long_run_intercept: float = -0.0436
    long_run_income_elasticity: float = 0.9647
    intercept: float = -0.0001
    income_growth_elasticity: float = 0.8896
    error_correction: float = -0.1589


@dataclass(frozen=True)
class InvestmentCoefficients:
    """Error-correction investment function (log space, rate in pp)."""

    long_run_intercept: float = 10.6456
    long_run_output_elasticity: float = 0.0788
    long_run_rate_semi_elasticity: float = -1.1401
    intercept: float = -0.0008
    output_growth_elasticity: float = 0.9362
    rate_change_sensitivity: float = -0.1318
    error_correction: float = -0.0401


@dataclass(frozen=True)
class PriceCoefficients:
    """Phillips-curve style inflation equation (quarterly log change)."""

    intercept: float = -0.0010
    inflation_persistence: float = 0.3079
    output_gap_sensitivity: float = 0.0501


@dataclass(frozen=True)
class SupportCoefficients:
    """Public support scoring weights (all rates quarterly)."""

    growth_baseline: float = 0.005  # 0.5%/qtr growth earns nothing
    growth_weight: float = 2500.0
    inflation_target: float = 0.005
    inflation_weight: float = 7000.0
    unemployment_reference: float = 0.025  # only the excess is penalised
    unemployment_weight: float = 18000.0
    scale: float = 100.0
    minimum: float = 0.0
    maximum: float = 100.0


@dataclass(frozen=True)
class SolverSettings:
    """Successive-substitution settings for the C + I + G equilibrium."""

    tolerance: float = 0.1  # currency units
    max_iterations: int = 30


@dataclass(frozen=True)
class TurnRules:
    """State transition and termination rules."""

    term_length: int = 16  # quarters in a full term
    dissolution_threshold: float = 20.0  # support below this ends the game
    potential_persistence: float = 0.85  # weight on last period's log Y*
    okun_coefficient: float = 0.30
    growth_reference: float = 0.0
    unemployment_floor: float = 0.005
    baseline_price_level: float = 100.0  # prior price for the first turn


@dataclass(frozen=True)
class PolicyLimits:
    """Ranges of the policy controls. Inclusive on both ends."""

    tax_rate: Tuple[float, float] = (-0.25, 0.25)
    spending_delta: Tuple[float, float] = (-10000.0, 10000.0)
    interest_rate_delta: Tuple[float, float] = (-0.5, 0.5)


@dataclass(frozen=True)
class SeedValues:
    """Hand-calibrated opening economy (2024 Q2)."""

    output: float = 586251.3
    consumption: float = 305069.6
    investment: float = 127838.6
    government_spending: float = 149000.0
    price_level: float = 100.2
    interest_rate: float = -1.679  # percentage points
    tax_rate: float = 0.0
    unemployment_rate: float = 0.025
    public_support: float = 50.0
    start_year: int = 2024
    start_quarter: int = 2


@dataclass(frozen=True)
class Calibration:
    """One complete, internally consistent set of model constants."""

    consumption: ConsumptionCoefficients = field(default_factory=ConsumptionCoefficients)
    investment: InvestmentCoefficients = field(default_factory=InvestmentCoefficients)
    price: PriceCoefficients = field(default_factory=PriceCoefficients)
    support: SupportCoefficients = field(default_factory=SupportCoefficients)
    solver: SolverSettings = field(default_factory=SolverSettings)
    rules: TurnRules = field(default_factory=TurnRules)
    limits: PolicyLimits = field(default_factory=PolicyLimits)
    seed: SeedValues = field(default_factory=SeedValues)


CALIBRATION = Calibration()


def period_labels(num_periods: int, start_year: int = 2024, start_quarter: int = 2) -> List[str]:
    """Generate quarter labels like 'Q2 2024', 'Q3 2024', etc."""
    labels = []
    for p in range(num_periods + 1):
        q = start_quarter - 1 + p
        year = start_year + q // 4
        quarter = (q % 4) + 1
        labels.append(f"Q{quarter} {year}")
    return labels
