from __future__ import annotations
import argparse
import logging
import sys
from typing import Callable, Optional

import matplotlib.pyplot as plt
import numpy as np

from gridpi.gridworld import A_UP, ACTIONS, Cell, GridWorld
from gridpi.render import plot_values, show_policy, show_values

logger = logging.getLogger(__name__)


class PolicyIterationNotConverged(RuntimeError):
    """Raised when the driver hits its iteration cap before the policy is stable."""


class GridPolicyIteration:
    """
    Policy iteration over a deterministic GridWorld.

    Owns the reward table (through env), the policy (one action index per
    cell) and the value table. Only evaluate() writes values and only
    improve() writes the policy; the goal entries of both are never touched.

    rng: numpy Generator used for the random initial policy. When omitted a
         fresh one is built from seed, so the same seed always yields the
         same starting policy.
    """
    def __init__(self, rows: int, cols: int, goal: Cell, gamma: float = 0.9,
                 rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.env = GridWorld(rows, cols, goal, gamma)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        # start from a uniformly random deterministic policy
        self.policy = self.rng.integers(len(ACTIONS), size=self.env.shape)
        self.policy[self.goal] = A_UP
        self.values = np.zeros(self.env.shape, dtype=float)
        self.values[self.goal] = self.rewards[self.goal]

    @property
    def rows(self) -> int:
        return self.env.rows

    @property
    def cols(self) -> int:
        return self.env.cols

    @property
    def goal(self) -> Cell:
        return self.env.goal

    @property
    def gamma(self) -> float:
        return self.env.gamma

    @property
    def rewards(self) -> np.ndarray:
        return self.env.rewards

    def transition(self, cell: Cell, action: int) -> Cell:
        return self.env.transition(cell, action)

    def _decision_cells(self):
        return (s for s in self.env.cells() if not self.env.is_terminal(s))

    # ----- Policy Evaluation -----
    def evaluate(self, tolerance: float = 1e-4, max_sweeps: int = 1) -> float:
        """
        Up to max_sweeps in-place sweeps of V(s) <- r(s) + gamma * V(s') under
        the current policy, stopping early once max |dV| < tolerance.

        Cells are swept row-major ascending and each update is visible to the
        cells after it in the same sweep (Gauss-Seidel), so the order changes
        intermediate values. Returns the delta of the last sweep.
        """
        if max_sweeps < 1:
            raise ValueError(f"max_sweeps must be at least 1, got {max_sweeps}.")
        V = self.values
        delta = 0.0
        for sweep in range(max_sweeps):
            delta = 0.0
            for s in self._decision_cells():
                v_old = V[s]
                V[s] = self.env.backup(V, s, int(self.policy[s]))
                delta = max(delta, abs(V[s] - v_old))
            logger.debug("evaluation sweep %d: delta=%.6g", sweep + 1, delta)
            if delta < tolerance:
                break
        return float(delta)

    def q_values(self, cell: Cell) -> np.ndarray:
        """Q(s, a) for every action in scan order, given the current values."""
        return np.array([self.env.backup(self.values, cell, a) for a in ACTIONS])

    # ----- Policy Improvement -----
    def improve(self) -> bool:
        """
        Greedy improvement. np.argmax returns the first maximum, so an action
        later in the scan order only wins on a strictly larger Q.
        Returns True when no cell changed its action.
        """
        changed = 0
        for s in self._decision_cells():
            best = int(np.argmax(self.q_values(s)))
            if best != self.policy[s]:
                self.policy[s] = best
                changed += 1
        logger.debug("improvement: %d cell(s) changed action", changed)
        return changed == 0

    def is_greedy(self) -> bool:
        """True if no action strictly beats the current policy anywhere."""
        for s in self._decision_cells():
            q = self.q_values(s)
            if q.max() > q[self.policy[s]]:
                return False
        return True


# ----- Full Policy Iteration -----
def policy_iteration(engine: GridPolicyIteration, tolerance: float = 1e-4, eval_sweeps: int = 1,
                     max_iterations: Optional[int] = None,
                     callback: Optional[Callable[[int, GridPolicyIteration], None]] = None) -> int:
    """
    Alternate evaluate() and improve() until improve() reports a stable
    policy. Returns the number of iterations taken.

    callback(iteration, engine) runs after every iteration. Without
    max_iterations the loop is unbounded.
    """
    iteration = 0
    while True:
        if max_iterations is not None and iteration >= max_iterations:
            raise PolicyIterationNotConverged(
                f"Policy not stable after {iteration} iterations.")
        iteration += 1
        delta = engine.evaluate(tolerance=tolerance, max_sweeps=eval_sweeps)
        stable = engine.improve()
        logger.debug("iteration %d: delta=%.6g stable=%s", iteration, delta, stable)
        if callback is not None:
            callback(iteration, engine)
        if stable:
            break
    logger.info("Policy stable after %d iterations", iteration)
    return iteration


def build_parser():
    parser = argparse.ArgumentParser(description="Policy iteration on a deterministic gridworld")
    parser.add_argument("--rows", type=int, default=10)
    parser.add_argument("--cols", type=int, default=10)
    parser.add_argument("--goal", type=int, nargs=2, default=(1, 3), metavar=("ROW", "COL"))
    parser.add_argument("--gamma", type=float, default=0.9, help="Discount factor in (0, 1)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the initial random policy")
    parser.add_argument("--theta", type=float, default=1e-4, help="Evaluation stopping tolerance")
    parser.add_argument("--eval-sweeps", type=int, default=1, help="Evaluation sweeps per iteration")
    parser.add_argument("--max-iterations", type=int, default=None)
    parser.add_argument("--plot", action="store_true", help="Show a heatmap of the final values")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        engine = GridPolicyIteration(args.rows, args.cols, tuple(args.goal), args.gamma, seed=args.seed)
    except ValueError as e:
        parser.error(str(e))
    if args.eval_sweeps < 1:
        parser.error(f"--eval-sweeps must be at least 1, got {args.eval_sweeps}")

    print("Policy:")
    print(show_policy(engine))
    print()

    def report(iteration, eng):
        print(f"Iteration {iteration}:")
        print("Policy:")
        print(show_policy(eng))
        print("\nState Values:")
        print(show_values(eng))
        print()

    try:
        iterations = policy_iteration(engine, tolerance=args.theta, eval_sweeps=args.eval_sweeps,
                                      max_iterations=args.max_iterations, callback=report)
    except PolicyIterationNotConverged as e:
        print(e, file=sys.stderr)
        return 1
    print(f"Optimal policy found after {iterations} iterations.")

    if args.plot:
        plot_values(engine)
        plt.show()
    return 0


# ----- Run -----
if __name__ == "__main__":
    raise SystemExit(main())
