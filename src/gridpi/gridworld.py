from __future__ import annotations
from typing import Iterator, Tuple

import numpy as np

# ----- MDP definition: deterministic rows x cols Gridworld -----
Cell = Tuple[int, int]

# Candidate-scan order for greedy improvement; earlier actions win ties.
A_UP, A_DOWN, A_LEFT, A_RIGHT = 0, 1, 2, 3
ACTIONS = (A_UP, A_DOWN, A_LEFT, A_RIGHT)
A2DELTA = {A_UP: (-1, 0), A_DOWN: (1, 0), A_LEFT: (0, -1), A_RIGHT: (0, 1)}


class GridWorld:
    """
    rows x cols gridworld with a single absorbing goal.

    Every cell pays step_reward except the goal, which pays goal_reward.
    Moves into a wall leave the agent where it is. The reward table is
    read-only once built.
    """
    def __init__(self, rows: int, cols: int, goal: Cell, gamma: float,
                 goal_reward: float = 1.0, step_reward: float = -1.0):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}.")
        self.rows = int(rows)
        self.cols = int(cols)
        self.goal = (int(goal[0]), int(goal[1]))
        if not self.in_bounds(self.goal):
            raise ValueError(f"Goal {tuple(goal)} lies outside the {rows}x{cols} grid.")
        if not 0.0 < gamma < 1.0:
            raise ValueError(f"Discount must be in (0, 1), got {gamma}.")
        self.gamma = float(gamma)
        self.goal_reward = float(goal_reward)
        self.step_reward = float(step_reward)

        self.rewards = np.full((self.rows, self.cols), self.step_reward, dtype=float)
        self.rewards[self.goal] = self.goal_reward
        self.rewards.flags.writeable = False

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def in_bounds(self, cell: Cell) -> bool:
        i, j = cell
        return 0 <= i < self.rows and 0 <= j < self.cols

    def is_terminal(self, cell: Cell) -> bool:
        return tuple(cell) == self.goal

    def cells(self) -> Iterator[Cell]:
        """All cells in row-major ascending order."""
        for i in range(self.rows):
            for j in range(self.cols):
                yield i, j

    def transition(self, cell: Cell, action: int) -> Cell:
        """Deterministic successor of cell under action, clamped to the grid."""
        try:
            di, dj = A2DELTA[action]
        except KeyError:
            raise ValueError(f"Unknown action {action!r}.") from None
        i, j = cell
        ni = min(max(i + di, 0), self.rows - 1)
        nj = min(max(j + dj, 0), self.cols - 1)
        return ni, nj

    def backup(self, values: np.ndarray, cell: Cell, action: int) -> float:
        """One-step Bellman backup r(s) + gamma * V(s') for a single action."""
        return self.rewards[cell] + self.gamma * values[self.transition(cell, action)]
