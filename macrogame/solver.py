"""
Goods-market equilibrium for one quarter.

Output, consumption and investment are simultaneous: Y = C + I + G, while C
depends on disposable income (1 - tau) * Y and I on the output path. The
solver finds a consistent triple by successive substitution starting from
last quarter's output.
"""

import logging
from dataclasses import dataclass

from .config import CALIBRATION, Calibration
from .equations import next_consumption, next_investment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquilibriumSolution:
    """Solved quarter plus convergence diagnostics."""

    output: float
    consumption: float
    investment: float
    iterations: int
    residual: float  # |Y_candidate - Y_guess| on the last iteration
    tolerance: float

    @property
    def converged(self) -> bool:
        return self.residual < self.tolerance


def solve_equilibrium(
    previous,
    tax_rate: float,
    government_spending: float,
    interest_rate: float,
    calibration: Calibration = CALIBRATION,
) -> EquilibriumSolution:
    """
    Solve for (C, I, Y) given this quarter's fiscal and monetary settings.

    Args:
        previous: Last quarter's state. Needs output, consumption,
                  investment, tax_rate and interest_rate.
        tax_rate: Tax rate applied to this quarter's output.
        government_spending: Absolute G for this quarter.
        interest_rate: Absolute r for this quarter (percentage points).

    The iteration stops once the candidate output moves less than the
    tolerance, or after max_iterations. Hitting the cap is not an error:
    the last iterate is returned and the residual tells the caller how far
    from a fixed point it was.
    """
    settings = calibration.solver
    output_prev = previous.output
    income_prev = output_prev - previous.tax_rate * output_prev

    output_guess = output_prev
    consumption = previous.consumption
    investment = previous.investment
    output = output_prev
    residual = float("inf")
    iterations = 0

    for iterations in range(1, settings.max_iterations + 1):
        income = output_guess - tax_rate * output_guess
        consumption = next_consumption(
            previous.consumption, income, income_prev, calibration.consumption
        )
        investment = next_investment(
            previous.investment,
            output_guess,
            output_prev,
            interest_rate,
            previous.interest_rate,
            calibration.investment,
        )
        output = consumption + investment + government_spending
        residual = abs(output - output_guess)
        if residual < settings.tolerance:
            break
        output_guess = output

    solution = EquilibriumSolution(
        output=output,
        consumption=consumption,
        investment=investment,
        iterations=iterations,
        residual=residual,
        tolerance=settings.tolerance,
    )
    if not solution.converged:
        logger.debug(
            f"Equilibrium not reached after {iterations} iterations "
            f"(residual {residual:.4f}); accepting last iterate"
        )
    return solution
