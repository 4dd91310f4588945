"""
Turn engine for the Macro Policy Game.

One call to Game.advance_turn() plays one quarter:

1. Policy
   Apply the player's tax rate, spending delta and interest-rate delta.

2. Goods-market equilibrium
   Solve Y = C(Y) + I(Y) + G by successive substitution.

3. Potential output and prices
   Smooth potential output, measure the output gap, update inflation.

4. Labour market and politics
   Okun's law moves unemployment; growth, inflation and unemployment move
   public support.

5. Termination
   The term ends after 16 quarters; support below 20 dissolves the
   government early.

The history is append-only. A finished game refuses further turns until
reset() starts a fresh history from the seed economy.
"""

import logging
from dataclasses import asdict
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import CALIBRATION, Calibration, period_labels
from .equations import next_price, next_support
from .outcome import Outcome, TurnFeedback, classify_outcome, turn_feedback
from .solver import EquilibriumSolution, solve_equilibrium
from .state import (
    EconomicState,
    EndReason,
    GameInProgressError,
    GameOverError,
    GameStatus,
    PolicyInput,
    TerminationEvent,
    check_bounds,
    is_terminal,
    require_positive,
)

logger = logging.getLogger(__name__)


def seed_state(calibration: Calibration = CALIBRATION) -> EconomicState:
    """Opening economy. Potential output starts equal to actual output."""
    s = calibration.seed
    return EconomicState(
        period=0,
        output=s.output,
        consumption=s.consumption,
        investment=s.investment,
        government_spending=s.government_spending,
        price_level=s.price_level,
        interest_rate=s.interest_rate,
        tax_rate=s.tax_rate,
        unemployment_rate=s.unemployment_rate,
        public_support=s.public_support,
        potential_output=s.output,
        label=period_labels(0, s.start_year, s.start_quarter)[0],
    )


class Game:
    """Turn-based state machine over an append-only history of quarters."""

    def __init__(self, calibration: Optional[Calibration] = None):
        self.calibration = calibration or CALIBRATION
        self.reset()

    # ------------------------------------------------------------------
    # Read access for presentation
    # ------------------------------------------------------------------
    @property
    def current_state(self) -> EconomicState:
        return self._history[-1]

    @property
    def history(self) -> Tuple[EconomicState, ...]:
        return tuple(self._history)

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def end_reason(self) -> Optional[EndReason]:
        return self._end_reason

    @property
    def is_over(self) -> bool:
        return self._status is GameStatus.ENDED

    @property
    def last_solution(self) -> Optional[EquilibriumSolution]:
        """Solver diagnostics for the most recent accepted turn."""
        return self._last_solution

    @property
    def last_feedback(self) -> Optional[TurnFeedback]:
        return self._last_feedback

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Discard the history and start again from the seed economy."""
        seed = seed_state(self.calibration)
        check_bounds(seed, self.calibration.rules, self.calibration.support)
        self._history: List[EconomicState] = [seed]
        self._status = GameStatus.RUNNING
        self._end_reason: Optional[EndReason] = None
        self._last_solution: Optional[EquilibriumSolution] = None
        self._last_feedback: Optional[TurnFeedback] = None
        logger.info("Game reset to seed economy")

    def advance_turn(self, policy: PolicyInput) -> Union[EconomicState, TerminationEvent]:
        """
        Play one quarter with the given policy.

        Returns the new state, or a TerminationEvent if this quarter ended
        the game. Raises GameOverError once the game has ended and
        InvalidPolicyError for out-of-range levers; in both cases the
        history is left untouched.
        """
        if self.is_over:
            raise GameOverError(f"Game already ended ({self._end_reason.value})")
        policy.validate(self.calibration.limits)

        state, solution = self._next_state(policy)

        self._history.append(state)
        self._last_solution = solution
        self._last_feedback = turn_feedback(self._history[-2], state)
        logger.debug(
            f"{state.label}: Y={state.output:,.1f} P={state.price_level:.3f} "
            f"u={state.unemployment_rate:.4f} support={state.public_support:.2f} "
            f"(solver {solution.iterations} it, residual {solution.residual:.3f})"
        )

        reason = is_terminal(state, self.calibration.rules)
        if reason is None:
            return state
        self._status = GameStatus.ENDED
        self._end_reason = reason
        logger.info(f"Game ended at period {state.period}: {reason.value}")
        return TerminationEvent(reason=reason, state=state)

    def classify_outcome(self) -> Outcome:
        if not self.is_over:
            raise GameInProgressError("Outcome is only available once the game has ended")
        return classify_outcome(self._history, self._end_reason)

    def _next_state(self, policy: PolicyInput) -> Tuple[EconomicState, EquilibriumSolution]:
        cal = self.calibration
        rules = cal.rules
        prev = self._history[-1]

        # ============================================================
        # 1. POLICY
        # ============================================================
        rate = prev.interest_rate + policy.interest_rate_delta
        spending = prev.government_spending + policy.spending_delta

        # ============================================================
        # 2. GOODS-MARKET EQUILIBRIUM
        # ============================================================
        solution = solve_equilibrium(prev, policy.tax_rate, spending, rate, cal)
        for name in ("output", "consumption", "investment"):
            require_positive(name, getattr(solution, name))

        # ============================================================
        # 3. POTENTIAL OUTPUT AND PRICES
        # ============================================================
        # Gap and trend both use last quarter's output.
        gap = np.log(prev.output) - np.log(prev.potential_output)
        ln_potential = (
            rules.potential_persistence * np.log(prev.potential_output)
            + (1 - rules.potential_persistence) * np.log(prev.output)
        )

        if len(self._history) > 1:
            price_before = self._history[-2].price_level
        else:
            price_before = rules.baseline_price_level
        prior_inflation = np.log(prev.price_level / price_before)
        price_level, inflation = next_price(prev.price_level, gap, prior_inflation, cal.price)

        # ============================================================
        # 4. LABOUR MARKET AND SUPPORT
        # ============================================================
        growth = float(np.log(solution.output / prev.output))
        unemployment = prev.unemployment_rate - rules.okun_coefficient * (
            growth - rules.growth_reference
        )
        # Support sees the unfloored rate; the floor applies to the stored state.
        support = next_support(growth, inflation, unemployment, prev.public_support, cal.support)

        period = prev.period + 1
        seed = cal.seed
        state = EconomicState(
            period=period,
            output=solution.output,
            consumption=solution.consumption,
            investment=solution.investment,
            government_spending=spending,
            price_level=price_level,
            interest_rate=rate,
            tax_rate=policy.tax_rate,
            unemployment_rate=max(rules.unemployment_floor, unemployment),
            public_support=support,
            potential_output=float(np.exp(ln_potential)),
            label=period_labels(period, seed.start_year, seed.start_quarter)[period],
        )
        check_bounds(state, rules, cal.support)
        return state, solution


def history_frame(history: Sequence[EconomicState]) -> pd.DataFrame:
    """
    Tabulate a history for charting.

    Indexed by period, one column per state field plus quarterly log
    growth, quarterly log inflation and the log output gap. The first row
    has no growth or inflation.
    """
    df = pd.DataFrame([asdict(s) for s in history]).set_index("period")
    df["growth"] = np.log(df["output"]).diff()
    df["inflation"] = np.log(df["price_level"]).diff()
    df["output_gap"] = np.log(df["output"]) - np.log(df["potential_output"])
    return df
