"""
Package-wide defaults.

Public functions read their default arguments from ``DEFAULT_CONFIG`` so
the numbers live in one place.
"""

DEFAULT_CONFIG = {
    # Confidence level (percent) for the automatic prior and plot ranges
    "ci": 99,
    # Multiplier on the prior standard error (>1 flattens the prior)
    "se_mult": 1.0,
    # Point null at zero
    "null_region": 0.0,
    # Hypothesis priors for (H<0, H=0, H>0)
    "priors": (1 / 3, 1 / 3, 1 / 3),
    # Allowed deviation of the priors' sum from 1
    "prior_sum_tol": 1e-6,
    # Prior mass/density at or below this is treated as zero
    "degeneracy_eps": 1e-300,
    # Sequential adjustment: probabilities below epsilon get adj_factor added
    "adjust_epsilon": 1e-6,
    "adj_factor": 1e-4,
    # Number of x-values for density plots
    "n_points": 200,
}
