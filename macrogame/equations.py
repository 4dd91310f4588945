"""
Structural equations of the quarterly macro model.

All four relations are log-linear and stateless:

1. Consumption
   Error correction toward a long-run level set by disposable income.

2. Investment
   Error correction toward a long-run level set by output and the real
   interest rate; also reacts to the change in the rate.

3. Prices
   Inflation carries over part of last quarter's inflation and responds to
   the output gap. The price level compounds by exp(inflation).

4. Public support
   Rewards growth above baseline, penalises distance from the inflation
   target and unemployment above the reference rate.

Every level argument that enters a logarithm must be strictly positive;
the engine guarantees this when it builds states.
"""

from typing import Tuple

import numpy as np

from .config import (
    CALIBRATION,
    ConsumptionCoefficients,
    InvestmentCoefficients,
    PriceCoefficients,
    SupportCoefficients,
)


def next_consumption(
    consumption_prev: float,
    income: float,
    income_prev: float,
    coef: ConsumptionCoefficients = CALIBRATION.consumption,
) -> float:
    """Consumption this quarter given current and last disposable income."""
    ln_c_prev = np.log(consumption_prev)
    ln_yd = np.log(income)
    ln_yd_prev = np.log(income_prev)

    ln_c_star_prev = coef.long_run_intercept + coef.long_run_income_elasticity * ln_yd_prev
    ect = ln_c_prev - ln_c_star_prev
    dln_c = (
        coef.intercept
        + coef.income_growth_elasticity * (ln_yd - ln_yd_prev)
        + coef.error_correction * ect
    )
    return float(np.exp(ln_c_prev + dln_c))


def next_investment(
    investment_prev: float,
    output: float,
    output_prev: float,
    rate: float,
    rate_prev: float,
    coef: InvestmentCoefficients = CALIBRATION.investment,
) -> float:
    """Investment this quarter. Rates are in percentage points."""
    ln_i_prev = np.log(investment_prev)
    ln_y = np.log(output)
    ln_y_prev = np.log(output_prev)

    ln_i_star_prev = (
        coef.long_run_intercept
        + coef.long_run_output_elasticity * ln_y_prev
        + coef.long_run_rate_semi_elasticity * rate_prev
    )
    ect = ln_i_prev - ln_i_star_prev
    dln_i = (
        coef.intercept
        + coef.output_growth_elasticity * (ln_y - ln_y_prev)
        + coef.rate_change_sensitivity * (rate - rate_prev)
        + coef.error_correction * ect
    )
    return float(np.exp(ln_i_prev + dln_i))


def next_price(
    price_prev: float,
    output_gap: float,
    prior_inflation: float,
    coef: PriceCoefficients = CALIBRATION.price,
) -> Tuple[float, float]:
    """Return (price level, quarterly log inflation)."""
    inflation = (
        coef.intercept
        + coef.inflation_persistence * prior_inflation
        + coef.output_gap_sensitivity * output_gap
    )
    return float(price_prev * np.exp(inflation)), float(inflation)


def next_support(
    growth: float,
    inflation: float,
    unemployment: float,
    prior_support: float,
    coef: SupportCoefficients = CALIBRATION.support,
) -> float:
    """Public support after one quarter, clamped to [0, 100]."""
    bonus = (growth - coef.growth_baseline) * coef.growth_weight
    inflation_penalty = abs(inflation - coef.inflation_target) * coef.inflation_weight
    unemployment_penalty = (
        max(0.0, unemployment - coef.unemployment_reference) * coef.unemployment_weight
    )
    support = prior_support + (bonus - inflation_penalty - unemployment_penalty) / coef.scale
    return max(coef.minimum, min(coef.maximum, support))
