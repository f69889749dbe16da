"""
Visualization utilities for evidence records and combination traces.

Provides functions for plotting:
- Prior, likelihood and posterior densities for one study
- Forest plots of data and prior intervals across studies
- Hypothesis probabilities accumulated across studies
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Sequence, Tuple

from .combination import CombinationTrace
from .config import DEFAULT_CONFIG
from .core import ci_multiplier
from .evidence import EvidenceRecord, ResultKind
from .figure_style import COLORS, FIGSIZE, HYPOTHESIS_COLORS
from .summary import HYPOTHESIS_LABELS


def _require_kind(result, kind: ResultKind, func: str) -> None:
    if getattr(result, "kind", None) is not kind:
        expected = "an EvidenceRecord" if kind is ResultKind.SINGLE_STUDY else "a CombinationTrace"
        raise TypeError(f"{func}() expects {expected}, got {type(result).__name__}")


def plot_distributions(
    record: EvidenceRecord,
    x_range: Optional[Tuple[float, float]] = None,
    n_points: int = DEFAULT_CONFIG["n_points"],
    legend_loc: Optional[str] = "upper left",
    xlabel: str = "Effect size",
    ylabel: str = "",
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """
    Plot the prior, likelihood (data) and posterior densities of one study.

    Parameters
    ----------
    record : EvidenceRecord
        Output of compute_evidence
    x_range : tuple, optional
        (min, max) for the x-axis; default is beta0 +/- 3 * se0
    n_points : int
        Number of x-values
    legend_loc : str, optional
        Matplotlib legend location; None hides the legend
    xlabel, ylabel : str
        Axis labels
    ax : Axes, optional
        Matplotlib axes to plot on

    Returns
    -------
    ax : Axes
    """
    _require_kind(record, ResultKind.SINGLE_STUDY, "plot_distributions")

    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["single"])

    if x_range is None:
        x_range = (record.beta0 - 3 * record.se0, record.beta0 + 3 * record.se0)

    xvals = np.linspace(x_range[0], x_range[1], n_points)
    prior = record.prior.density(xvals)
    lik = record.likelihood.density(xvals)
    post = record.posterior.density(xvals)

    ax.plot(xvals, prior, color=COLORS["prior"], linewidth=3, label="Prior")
    ax.plot(xvals, lik, color=COLORS["data"], linestyle="--", linewidth=1, label="Data")
    ax.plot(xvals, post, color=COLORS["posterior"], linewidth=1, label="Posterior")

    region = record.null_region
    if not region.is_point:
        ax.axvspan(region.lower, region.upper, color=COLORS["null_fill"], alpha=0.2)

    ax.set_xlim(xvals.min(), xvals.max())
    ax.set_ylim(0, max(prior.max(), lik.max(), post.max()) * 1.05)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)

    if legend_loc is not None:
        ax.legend(loc=legend_loc)

    return ax


def forest_plot(
    trace: CombinationTrace,
    x_range: Optional[Tuple[float, float]] = None,
    labels: Optional[Sequence[str]] = None,
    xlabel: str = "Effect size",
    ylabel: str = "Study",
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """
    Forest plot of effect sizes with their priors.

    Each study shows its prior's ci% interval as a thick grey bar, the data's
    ci% interval with caps, and the point estimate. If effect sizes differ
    greatly, combine with ``scale=True`` for a readable plot.

    Parameters
    ----------
    trace : CombinationTrace
        Output of combine or ev_combo
    x_range : tuple, optional
        (min, max) for the x-axis; default spans all prior intervals
    labels : sequence of str, optional
        Study names for the y-axis; study numbers if omitted
    xlabel, ylabel : str
        Axis labels
    ax : Axes, optional
        Matplotlib axes to plot on

    Returns
    -------
    ax : Axes
    """
    _require_kind(trace, ResultKind.MULTI_STUDY, "forest_plot")

    n = trace.n_studies
    if labels is not None and len(labels) != n:
        raise ValueError(f"Expected {n} labels, got {len(labels)}")

    if ax is None:
        _, ax = plt.subplots(figsize=(FIGSIZE["single"][0], 1 + 0.5 * n))

    z = ci_multiplier(trace.ci)
    beta, se_beta = trace.beta, trace.se_beta
    beta0, se0 = trace.beta0, trace.se0
    y = np.arange(1, n + 1)

    if x_range is None:
        x_range = (np.min(beta0 - se0 * z), np.max(beta0 + se0 * z))

    # Priors
    ax.hlines(y, beta0 - se0 * z, beta0 + se0 * z,
              color=COLORS["prior"], linewidth=6, label="Prior")

    # Data
    ax.errorbar(beta, y, xerr=se_beta * z, fmt="none", ecolor=COLORS["data"],
                elinewidth=1, capsize=4)
    ax.plot(beta, y, "D", color=COLORS["data"], markersize=6, label="Data")

    ax.set_xlim(x_range[0], x_range[1])
    ax.set_ylim(0.5, n + 0.5)
    ax.set_yticks(y)
    ax.set_yticklabels(labels if labels is not None else [str(i) for i in y])
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)

    return ax


def plot_pph_trace(
    trace: CombinationTrace,
    labels: Optional[Sequence[str]] = None,
    legend_loc: Optional[str] = "best",
    xlabel: str = "Study",
    ylabel: str = "PPH",
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """
    Plot posterior probabilities of each hypothesis as studies accumulate.

    Parameters
    ----------
    trace : CombinationTrace
        Output of combine or ev_combo
    labels : sequence of str, optional
        Study names (n_studies of them); study 0 is labelled "Prior"
    legend_loc : str, optional
        Matplotlib legend location; None hides the legend
    xlabel, ylabel : str
        Axis labels
    ax : Axes, optional
        Matplotlib axes to plot on

    Returns
    -------
    ax : Axes
    """
    _require_kind(trace, ResultKind.MULTI_STUDY, "plot_pph_trace")
    if labels is not None and len(labels) != trace.n_studies:
        raise ValueError(f"Expected {trace.n_studies} labels, got {len(labels)}")

    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["single"])

    table = trace.probability_table()
    x = np.arange(table.shape[0])

    for j, (label, color) in enumerate(zip(HYPOTHESIS_LABELS, HYPOTHESIS_COLORS)):
        ax.plot(x, table[:, j], "o-", color=color, label=label)

    ax.set_xticks(x)
    if labels is not None:
        ax.set_xticklabels(["Prior"] + list(labels))
    ax.set_ylim(0, 1.05)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)

    if legend_loc is not None:
        ax.legend(loc=legend_loc)

    return ax


def create_summary_figure(
    trace: CombinationTrace,
    labels: Optional[Sequence[str]] = None,
    figsize: Tuple[float, float] = FIGSIZE["double"],
) -> plt.Figure:
    """
    Forest plot and PPH trace side by side.

    Parameters
    ----------
    trace : CombinationTrace
    labels : sequence of str, optional
        Study names
    figsize : tuple
        Figure size

    Returns
    -------
    fig : Figure
    """
    fig, axes = plt.subplots(1, 2, figsize=figsize)

    forest_plot(trace, labels=labels, ax=axes[0])
    plot_pph_trace(trace, labels=labels, ax=axes[1])

    final = trace.final_probs
    fig.suptitle(
        f"{trace.n_studies} studies: P(H<0)={final.neg:.2f}, "
        f"P(H=0)={final.zero:.2f}, P(H>0)={final.pos:.2f}"
    )
    plt.tight_layout()

    return fig
