"""
Core mathematical functions for the conjugate Normal model.

This module provides the fundamental computations shared by the single-study
and multi-study code:
- Normal CDF, survival function, density and quantile
- Confidence-interval multipliers
- Default (automatic) prior width
- Posterior parameter calculations
"""

import numpy as np
from scipy import stats
from typing import Tuple, Union

# Type alias for scalar or array
ArrayLike = Union[float, np.ndarray]


def normal_cdf(x: ArrayLike, mean: float, se: float) -> ArrayLike:
    """P(X < x) for X ~ N(mean, se^2)."""
    return stats.norm.cdf(x, loc=mean, scale=se)


def normal_sf(x: ArrayLike, mean: float, se: float) -> ArrayLike:
    """P(X > x) for X ~ N(mean, se^2), accurate in the upper tail."""
    return stats.norm.sf(x, loc=mean, scale=se)


def normal_pdf(x: ArrayLike, mean: float, se: float) -> ArrayLike:
    """Density of N(mean, se^2) at x."""
    return stats.norm.pdf(x, loc=mean, scale=se)


def ci_multiplier(ci: float) -> float:
    """
    Two-sided normal quantile for a confidence level given in percent.

    z = Phi^{-1}(1 - (1 - ci/100) / 2)

    Parameters
    ----------
    ci : float
        Confidence level in percent, e.g. 99

    Returns
    -------
    z : float
        Multiplier such that mean +/- z * se covers ci% of a Normal
    """
    level = ci / 100.0
    level = level + (1.0 - level) / 2.0
    return float(stats.norm.ppf(level))


def default_prior_se(beta: float, se_beta: float, ci: float = 99) -> float:
    """
    Standard error of the automatic prior centred at zero.

    The prior's ci% interval reaches the far edge of the data's ci% interval:

        se0 = (|beta| + z * se_beta) / z

    Parameters
    ----------
    beta : float
        Observed effect size
    se_beta : float
        Standard error of the effect size
    ci : float
        Confidence level in percent

    Returns
    -------
    se0 : float
        Prior standard error (before any se_mult scaling)
    """
    z = ci_multiplier(ci)
    return (abs(beta) + z * se_beta) / z


def posterior_params(
    beta: ArrayLike,
    se_beta: float,
    beta0: float,
    se0: float,
) -> Tuple[ArrayLike, float]:
    """
    Compute posterior parameters for the conjugate Normal model.

    Prior: theta ~ N(beta0, se0^2)
    Likelihood: beta | theta ~ N(theta, se_beta^2)
    Posterior: theta | beta ~ N(post_b, post_se^2)

    Parameters
    ----------
    beta : float or array
        Observed effect size(s)
    se_beta : float
        Likelihood standard error
    beta0 : float
        Prior mean
    se0 : float
        Prior standard error

    Returns
    -------
    post_b : float or array
        Posterior mean(s)
    post_se : float
        Posterior standard error
    """
    # Precision-weighted combination
    post_var = 1.0 / (1.0 / se_beta**2 + 1.0 / se0**2)
    post_b = post_var * (beta / se_beta**2 + beta0 / se0**2)

    return post_b, float(np.sqrt(post_var))
