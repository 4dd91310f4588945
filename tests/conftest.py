"""
Pytest fixtures for macro policy game tests.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from macrogame.engine import Game, seed_state
from macrogame.state import PolicyInput


# =============================================================================
# POLICY FIXTURES
# =============================================================================

@pytest.fixture
def hold_policy():
    """Leave every lever where it is."""
    return PolicyInput(tax_rate=0.0, interest_rate_delta=0.0, spending_delta=0.0)


@pytest.fixture
def stimulus_policy():
    """Maximum spending increase each quarter."""
    return PolicyInput(tax_rate=0.0, interest_rate_delta=0.0, spending_delta=10_000.0)


@pytest.fixture
def austerity_policy():
    """Maximum spending cut plus maximum rate hike."""
    return PolicyInput(tax_rate=0.0, interest_rate_delta=0.5, spending_delta=-10_000.0)


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def game():
    """Fresh game at the seed economy."""
    return Game()


@pytest.fixture
def seed():
    return seed_state()


@pytest.fixture
def play():
    """Advance a game `turns` quarters with the same policy, returning each result."""
    def _play(game, policy, turns):
        return [game.advance_turn(policy) for _ in range(turns)]
    return _play
