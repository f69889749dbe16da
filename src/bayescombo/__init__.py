"""
BayesCombo: Bayesian evidence combination

Posterior probabilities of directional hypotheses (effect < 0, effect = 0,
effect > 0) from Normal effect-size estimates, updated study by study.
"""

from .core import (
    normal_cdf,
    normal_sf,
    normal_pdf,
    ci_multiplier,
    default_prior_se,
    posterior_params,
)

from .evidence import (
    ResultKind,
    NormalEstimate,
    NullRegion,
    HypothesisProbs,
    BayesFactors,
    EvidenceRecord,
    bayes_factors,
    update_probs,
    compute_evidence,
)

from .combination import (
    CombinationTrace,
    adjust_probs,
    ev_combo,
    combine,
    batch_combine,
)

from .exceptions import (
    BayesComboError,
    InvalidInputError,
    NumericDegeneracyError,
    CombinationError,
)

from .summary import summarize

__version__ = "0.1.0"

__all__ = [
    # Normal utilities
    "normal_cdf",
    "normal_sf",
    "normal_pdf",
    "ci_multiplier",
    "default_prior_se",
    "posterior_params",
    # Single study
    "ResultKind",
    "NormalEstimate",
    "NullRegion",
    "HypothesisProbs",
    "BayesFactors",
    "EvidenceRecord",
    "bayes_factors",
    "update_probs",
    "compute_evidence",
    # Multiple studies
    "CombinationTrace",
    "adjust_probs",
    "ev_combo",
    "combine",
    "batch_combine",
    # Errors
    "BayesComboError",
    "InvalidInputError",
    "NumericDegeneracyError",
    "CombinationError",
    # Output
    "summarize",
]
