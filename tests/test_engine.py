import numpy as np
import pytest
from dataclasses import replace

from macrogame.config import CALIBRATION, TurnRules
from macrogame.engine import Game, history_frame
from macrogame.outcome import classify_outcome
from macrogame.state import (
    EconomicState,
    EndReason,
    GameInProgressError,
    GameOverError,
    GameStatus,
    InvalidPolicyError,
    ModelDomainError,
    PolicyInput,
    TerminationEvent,
    check_bounds,
    is_terminal,
)


def test_new_game_starts_from_seed(game):
    assert game.status is GameStatus.RUNNING
    assert game.end_reason is None
    assert len(game.history) == 1
    state = game.current_state
    assert state.period == 0
    assert state.label == "Q2 2024"
    assert state.output == 586251.3
    assert state.potential_output == state.output
    assert state.public_support == 50.0
    assert game.last_solution is None
    assert game.last_feedback is None


def test_one_turn_with_default_policy(game, hold_policy):
    result = game.advance_turn(hold_policy)

    assert isinstance(result, EconomicState)
    assert result is game.current_state
    assert result.period == 1
    assert result.label == "Q3 2024"
    assert result.output == pytest.approx(625_871.2, rel=1e-5)
    assert result.government_spending == 149_000.0
    assert result.interest_rate == pytest.approx(-1.679)
    assert result.public_support == pytest.approx(51.133, abs=0.01)
    assert result.unemployment_rate == pytest.approx(0.00538, abs=1e-4)
    assert game.last_solution.iterations == CALIBRATION.solver.max_iterations
    assert game.last_solution.residual < 1.0


def test_first_turn_prices_against_baseline(game, hold_policy):
    # Prior inflation on the first turn is ln(100.2 / 100); the seed has no gap.
    game.advance_turn(hold_policy)
    coef = CALIBRATION.price
    expected = coef.intercept + coef.inflation_persistence * np.log(100.2 / 100.0)
    assert game.current_state.price_level == pytest.approx(100.2 * np.exp(expected), rel=1e-12)


def test_potential_output_is_smoothed(game, hold_policy):
    game.advance_turn(hold_policy)
    game.advance_turn(hold_policy)
    h = game.history
    expected = np.exp(0.85 * np.log(h[1].potential_output) + 0.15 * np.log(h[1].output))
    assert h[2].potential_output == pytest.approx(expected, rel=1e-12)
    assert h[1].output > h[2].potential_output > h[1].potential_output


def test_policy_levers_accumulate(game):
    game.advance_turn(PolicyInput(tax_rate=0.05, interest_rate_delta=0.25, spending_delta=2_000))
    game.advance_turn(PolicyInput(tax_rate=0.05, interest_rate_delta=0.25, spending_delta=2_000))
    state = game.current_state
    assert state.tax_rate == 0.05
    assert state.interest_rate == pytest.approx(-1.679 + 0.5)
    assert state.government_spending == pytest.approx(153_000.0)


def test_advance_is_deterministic(hold_policy):
    a, b = Game(), Game()
    assert a.advance_turn(hold_policy) == b.advance_turn(hold_policy)


def test_identical_policy_sequences_give_identical_histories():
    rng = np.random.RandomState(7)
    policies = [
        PolicyInput(
            tax_rate=float(rng.uniform(-0.05, 0.05)),
            interest_rate_delta=float(rng.uniform(-0.1, 0.1)),
            spending_delta=float(rng.uniform(-2_000, 2_000)),
        )
        for _ in range(16)
    ]
    a, b = Game(), Game()
    for policy in policies:
        if a.is_over:
            break
        a.advance_turn(policy)
        b.advance_turn(policy)
    assert a.history == b.history
    assert a.status is b.status


def test_history_grows_by_one_per_turn(game, hold_policy):
    for expected in range(2, 7):
        game.advance_turn(hold_policy)
        assert len(game.history) == expected
        assert [s.period for s in game.history] == list(range(expected))


def test_history_snapshots_are_not_mutated(game, hold_policy):
    game.advance_turn(hold_policy)
    snapshot = game.history
    game.advance_turn(hold_policy)
    assert len(snapshot) == 2
    assert game.history[:2] == snapshot


def test_term_completes_at_period_16(game, hold_policy):
    for _ in range(15):
        assert isinstance(game.advance_turn(hold_policy), EconomicState)
        assert game.status is GameStatus.RUNNING

    event = game.advance_turn(hold_policy)

    assert isinstance(event, TerminationEvent)
    assert event.reason is EndReason.TERM_COMPLETE
    assert event.period == 16
    assert event.state is game.current_state
    assert game.status is GameStatus.ENDED
    assert len(game.history) == 17


def test_dissolution_before_term_end(game, austerity_policy):
    results = []
    while not game.is_over:
        results.append(game.advance_turn(austerity_policy))

    event = results[-1]
    assert isinstance(event, TerminationEvent)
    assert event.reason is EndReason.DISSOLVED
    assert event.period == 4
    assert event.state.public_support < 20
    assert all(s.public_support >= 20 for s in game.history[:-1])

    outcome = game.classify_outcome()
    assert outcome.letter_rank == "F"
    assert outcome.reason is EndReason.DISSOLVED


def test_termination_is_irreversible(game, austerity_policy, hold_policy):
    while not game.is_over:
        game.advance_turn(austerity_policy)
    before = game.history

    with pytest.raises(GameOverError):
        game.advance_turn(hold_policy)

    assert game.history == before
    assert game.status is GameStatus.ENDED


def test_outcome_requires_finished_game(game, hold_policy):
    with pytest.raises(GameInProgressError):
        game.classify_outcome()
    game.advance_turn(hold_policy)
    with pytest.raises(GameInProgressError):
        game.classify_outcome()


def test_invalid_policy_is_rejected_without_side_effects(game):
    with pytest.raises(InvalidPolicyError):
        game.advance_turn(PolicyInput(spending_delta=50_000))
    with pytest.raises(InvalidPolicyError):
        game.advance_turn(PolicyInput(tax_rate=0.3))
    with pytest.raises(InvalidPolicyError):
        game.advance_turn(PolicyInput(interest_rate_delta=float("nan")))
    assert len(game.history) == 1
    assert game.last_solution is None


def test_policy_limits_are_inclusive(game):
    game.advance_turn(PolicyInput(tax_rate=-0.25, interest_rate_delta=-0.5, spending_delta=10_000))
    assert len(game.history) == 2


def test_reset_starts_a_fresh_history(game, hold_policy, austerity_policy):
    while not game.is_over:
        game.advance_turn(austerity_policy)
    old = game.history

    game.reset()

    assert game.status is GameStatus.RUNNING
    assert game.end_reason is None
    assert game.history == (old[0],)
    assert len(old) == 5
    assert isinstance(game.advance_turn(hold_policy), EconomicState)


def test_support_and_unemployment_stay_in_bounds():
    rng = np.random.RandomState(42)
    limits = CALIBRATION.limits
    for _ in range(5):
        game = Game()
        while not game.is_over:
            game.advance_turn(
                PolicyInput(
                    tax_rate=float(rng.uniform(*limits.tax_rate)),
                    interest_rate_delta=float(rng.uniform(*limits.interest_rate_delta)),
                    spending_delta=float(rng.uniform(*limits.spending_delta)),
                )
            )
        for state in game.history:
            assert 0.0 <= state.public_support <= 100.0
            assert state.unemployment_rate >= CALIBRATION.rules.unemployment_floor


def test_unemployment_is_floored(game, hold_policy):
    for _ in range(4):
        game.advance_turn(hold_policy)
    assert game.current_state.unemployment_rate == CALIBRATION.rules.unemployment_floor


def test_spending_stimulus_raises_inflation_against_baseline(hold_policy, stimulus_policy, play):
    baseline, stimulus = Game(), Game()
    play(baseline, hold_policy, 16)
    play(stimulus, stimulus_policy, 16)

    assert baseline.end_reason is EndReason.TERM_COMPLETE
    assert stimulus.end_reason is EndReason.TERM_COMPLETE

    base_df = history_frame(baseline.history)
    stim_df = history_frame(stimulus.history)

    # Same prior inflation and zero gap on the first turn, so prices only
    # diverge from the second quarter on.
    assert stim_df.loc[1, "inflation"] == pytest.approx(base_df.loc[1, "inflation"])
    assert (stim_df.loc[2:, "inflation"] > base_df.loc[2:, "inflation"]).all()
    assert (stim_df.loc[1:15, "output_gap"] > base_df.loc[1:15, "output_gap"]).all()
    assert stim_df.loc[16, "price_level"] > base_df.loc[16, "price_level"]
    assert stim_df.loc[16, "government_spending"] == pytest.approx(149_000.0 + 160_000.0)


def test_feedback_after_each_turn(game, hold_policy):
    game.advance_turn(hold_policy)
    fb = game.last_feedback
    assert fb.period == 1
    assert fb.gdp_change == pytest.approx((625_871.2 / 586_251.3 - 1) * 100, abs=1e-3)
    assert fb.unemployment_change < 0
    assert fb.commentary.startswith("The economy is picking up")


def test_state_rejects_values_outside_model_domain(seed):
    with pytest.raises(ModelDomainError):
        replace(seed, output=0.0)
    with pytest.raises(ModelDomainError):
        replace(seed, price_level=-1.0)
    with pytest.raises(ModelDomainError):
        replace(seed, investment=float("nan"))


def test_bounds_follow_the_calibration(seed):
    rules, support = CALIBRATION.rules, CALIBRATION.support
    with pytest.raises(ModelDomainError):
        check_bounds(replace(seed, public_support=100.5), rules, support)
    with pytest.raises(ModelDomainError):
        check_bounds(replace(seed, unemployment_rate=0.001), rules, support)

    looser = replace(rules, unemployment_floor=0.001)
    check_bounds(replace(seed, unemployment_rate=0.001), looser, support)


def test_game_with_lower_unemployment_floor(hold_policy, play):
    rules = TurnRules(unemployment_floor=0.001)
    game = Game(calibration=replace(CALIBRATION, rules=rules))
    play(game, hold_policy, 4)

    rates = [s.unemployment_rate for s in game.history]
    assert len(game.history) == 5
    assert min(rates) == 0.001
    assert all(u >= 0.001 for u in rates)


def test_term_end_takes_precedence_over_dissolution(seed):
    rules = CALIBRATION.rules
    last_quarter = replace(seed, period=16, public_support=10.0)

    assert is_terminal(last_quarter, rules) is EndReason.TERM_COMPLETE
    assert is_terminal(replace(last_quarter, period=15), rules) is EndReason.DISSOLVED
    assert is_terminal(replace(last_quarter, period=15, public_support=20.0), rules) is None


def test_unpopular_full_term_is_ranked_not_failed(seed):
    history = [seed, replace(seed, period=16, public_support=10.0)]
    outcome = classify_outcome(history, is_terminal(history[-1], CALIBRATION.rules))

    assert outcome.reason is EndReason.TERM_COMPLETE
    assert outcome.letter_rank == "E"


def test_history_frame(game, hold_policy):
    game.advance_turn(hold_policy)
    game.advance_turn(hold_policy)
    df = history_frame(game.history)

    assert list(df.index) == [0, 1, 2]
    assert {"output", "price_level", "label", "growth", "inflation", "output_gap"} <= set(df.columns)
    assert np.isnan(df.loc[0, "growth"])
    assert df.loc[0, "output_gap"] == pytest.approx(0.0)
    assert df.loc[1, "growth"] == pytest.approx(np.log(game.history[1].output / game.history[0].output))
    assert df.loc[2, "label"] == "Q4 2024"
