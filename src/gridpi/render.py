from __future__ import annotations
import matplotlib.pyplot as plt
import numpy as np

# ----- Pretty printing helpers -----
ARROWS = np.array(['↑', '↓', '←', '→'])  # indexed by action
GOAL_MARKER = 'G'


def _glyph(engine, s):
    return GOAL_MARKER if engine.env.is_terminal(s) else ARROWS[engine.policy[s]]


def show_policy(engine):
    rows = []
    for i in range(engine.rows):
        rows.append(' '.join(_glyph(engine, (i, j)) for j in range(engine.cols)))
    return '\n'.join(rows)


def show_values(engine, prec=2):
    V = engine.values
    return '\n'.join(' '.join(f"{V[i, j]:6.{prec}f}" for j in range(engine.cols)) for i in range(engine.rows))


def plot_values(engine, ax=None):
    """
    Heatmap of the value table with the policy arrows drawn on top.
    Returns (fig, ax); the caller decides whether to show or save it.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(max(4, engine.cols * 0.6), max(3, engine.rows * 0.6)))
    else:
        fig = ax.figure

    im = ax.imshow(engine.values, cmap="viridis")
    for i in range(engine.rows):
        for j in range(engine.cols):
            ax.text(j, i, _glyph(engine, (i, j)), ha="center", va="center", color="white")

    ax.set_xticks(range(engine.cols))
    ax.set_yticks(range(engine.rows))
    ax.set_title(f"State values (γ={engine.gamma})")
    fig.colorbar(im, ax=ax)
    fig.tight_layout()
    return fig, ax
