import matplotlib

matplotlib.use("Agg")

import pytest

from gridpi.policy_iteration import GridPolicyIteration

SEED = 0


@pytest.fixture
def seed():
    return SEED


@pytest.fixture
def make_engine(seed):
    def _make(rows=4, cols=4, goal=(1, 3), gamma=0.9, seed=seed):
        return GridPolicyIteration(rows, cols, goal, gamma, seed=seed)
    return _make
