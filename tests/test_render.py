import matplotlib.pyplot as plt
import pytest

from gridpi.gridworld import A_DOWN, A_LEFT, A_RIGHT, A_UP
from gridpi.render import ARROWS, GOAL_MARKER, plot_values, show_policy, show_values


@pytest.fixture
def corridor(make_engine):
    engine = make_engine(rows=1, cols=3, goal=(0, 2))
    engine.policy[:] = A_RIGHT
    engine.values[0, :2] = [-1.09, -0.1]
    return engine


def test_arrow_per_action():
    assert ARROWS[A_UP] == '↑'
    assert ARROWS[A_DOWN] == '↓'
    assert ARROWS[A_LEFT] == '←'
    assert ARROWS[A_RIGHT] == '→'


def test_show_policy_marks_goal(corridor):
    assert show_policy(corridor) == '→ → G'


def test_show_policy_grid_shape(make_engine):
    engine = make_engine(rows=3, cols=4, goal=(2, 3))
    lines = show_policy(engine).split('\n')
    assert len(lines) == 3
    assert all(len(line.split(' ')) == 4 for line in lines)
    assert lines[2].endswith(GOAL_MARKER)


def test_show_values_fixed_width(corridor):
    assert show_values(corridor) == ' -1.09  -0.10   1.00'
    assert show_values(corridor, prec=1) == '  -1.1   -0.1    1.0'


def test_plot_values_draws_every_cell(corridor):
    fig, ax = plot_values(corridor)
    try:
        labels = [t.get_text() for t in ax.texts]
        assert labels == ['→', '→', 'G']
        assert ax.images[0].get_array().shape == (1, 3)
    finally:
        plt.close(fig)


def test_plot_values_uses_given_axes(corridor):
    fig, ax = plt.subplots()
    try:
        out_fig, out_ax = plot_values(corridor, ax=ax)
        assert out_ax is ax
        assert out_fig is fig
    finally:
        plt.close(fig)
