"""
Shared styling configuration for figures.

Provides consistent colors, fonts, and figure dimensions for the
distribution, forest and PPH-trace plots.
"""

import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional, Tuple

# =============================================================================
# Color Palette (Colorblind-friendly)
# =============================================================================

COLORS = {
    # Distributions
    "prior": "darkgrey",
    "data": "black",
    "posterior": "black",

    # Hypotheses
    "neg": "#DC3545",         # Red - H<0
    "zero": "#495057",        # Dark gray - H=0
    "pos": "#2E86AB",         # Blue - H>0

    # Neutral colors
    "grid": "#CCCCCC",
    "annotation": "#495057",
    "null_fill": "#FFC107",   # Null interval shading
}

HYPOTHESIS_COLORS = (COLORS["neg"], COLORS["zero"], COLORS["pos"])


# =============================================================================
# Figure Dimensions
# =============================================================================

FIGSIZE = {
    "single": (6, 4),       # Single column
    "double": (12, 4),      # Double column (wide)
}

DPI = {
    "screen": 100,
    "print": 300,
}


# =============================================================================
# Style Configuration
# =============================================================================

def setup_style(use_latex: bool = False) -> None:
    """
    Configure matplotlib for the summary and forest figures.

    Parameters
    ----------
    use_latex : bool
        If True, use LaTeX for text rendering (requires LaTeX installation)
    """
    plt.rcdefaults()
    plt.rcParams.update({
        "text.usetex": use_latex,
        "font.family": "serif",
        "font.size": 10,
        "legend.fontsize": 9,
        "figure.dpi": DPI["screen"],
        "savefig.dpi": DPI["print"],
        "savefig.bbox": "tight",
    })


def save_figure(
    fig: plt.Figure,
    name: str,
    output_dir: Optional[Path] = None,
    formats: Tuple[str, ...] = ("png", "pdf"),
    dpi: Optional[int] = None,
) -> list:
    """
    Save figure in multiple formats.

    Parameters
    ----------
    fig : Figure
        Matplotlib figure to save
    name : str
        Base filename (without extension)
    output_dir : Path, optional
        Directory to write to (default: ./output/figures)
    formats : tuple
        Output formats to generate
    dpi : int, optional
        Override default DPI

    Returns
    -------
    paths : list of Path
        Files written
    """
    output_dir = Path(output_dir) if output_dir is not None else Path("output") / "figures"
    output_dir.mkdir(parents=True, exist_ok=True)

    save_dpi = dpi or DPI["print"]

    paths = []
    for fmt in formats:
        filepath = output_dir / f"{name}.{fmt}"
        fig.savefig(filepath, format=fmt, dpi=save_dpi, bbox_inches="tight")
        paths.append(filepath)
    return paths
