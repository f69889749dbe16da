"""
Posterior probabilities of directional hypotheses for a single study.

Given an observed effect size with its standard error and a Normal prior on
the effect (explicit, or derived automatically from the data), this module
computes:
- the conjugate Normal posterior
- Bayes factors for H<0, H=0 and H>0
- posterior hypothesis probabilities from prior hypothesis probabilities

The null hypothesis is either a point (Savage-Dickey density ratio) or an
interval (ratio of probabilities under posterior and prior).
"""

import enum
import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Sequence, Tuple, Union

import numpy as np

from .config import DEFAULT_CONFIG
from .core import (
    ci_multiplier,
    default_prior_se,
    normal_cdf,
    normal_pdf,
    normal_sf,
    posterior_params,
)
from .exceptions import InvalidInputError, NumericDegeneracyError

logger = logging.getLogger(__name__)

REGIONS = ("neg", "zero", "pos")


class ResultKind(enum.Enum):
    """Discriminant shared by all result types."""
    SINGLE_STUDY = "single_study"
    MULTI_STUDY = "multi_study"


def check_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a real number, got {value!r}")
    if not np.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value


def check_positive(name: str, value: float) -> float:
    value = check_finite(name, value)
    if value <= 0:
        raise InvalidInputError(f"{name} must be greater than zero, got {value}")
    return value


def check_ci(ci: float) -> float:
    ci = check_finite("ci", ci)
    if not 0 < ci < 100:
        raise InvalidInputError(f"ci must be in (0, 100), got {ci}")
    return ci


def check_probabilities(values, tol: float = DEFAULT_CONFIG["prior_sum_tol"]) -> np.ndarray:
    """Three finite probabilities in [0, 1] summing to one within tol."""
    try:
        arr = np.asarray(values, dtype=float).ravel()
    except (TypeError, ValueError):
        raise InvalidInputError(f"priors must be three real numbers, got {values!r}")
    if arr.shape != (3,):
        raise InvalidInputError(
            f"priors must have three values (H<0, H=0, H>0), got {arr.size}"
        )
    if not np.all(np.isfinite(arr)) or np.any(arr < 0) or np.any(arr > 1):
        raise InvalidInputError(f"priors must each lie in [0, 1], got {arr.tolist()}")
    total = arr.sum()
    if abs(total - 1.0) > tol:
        raise InvalidInputError(f"priors must sum to one, got sum {total:.6g}")
    return arr


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class NormalEstimate:
    """Normal distribution over the effect size: likelihood, prior or posterior."""
    mean: float
    se: float

    def __post_init__(self):
        check_finite("mean", self.mean)
        check_positive("se", self.se)

    @classmethod
    def create(cls, mean: float, se: float, name: str = "se") -> "NormalEstimate":
        """Validated constructor; se must be positive and finite."""
        return cls(mean=check_finite("mean", mean), se=check_positive(name, se))

    def interval(self, ci: float) -> Tuple[float, float]:
        """Central ci% interval (ci in percent)."""
        z = ci_multiplier(ci)
        return (self.mean - z * self.se, self.mean + z * self.se)

    def density(self, x):
        return normal_pdf(x, self.mean, self.se)


@dataclass(frozen=True)
class NullRegion:
    """Effect-size values treated as "no effect": a point or a closed interval."""
    lower: float = 0.0
    upper: float = 0.0

    def __post_init__(self):
        lower = check_finite("null_region lower bound", self.lower)
        upper = check_finite("null_region upper bound", self.upper)
        if lower > upper:
            raise InvalidInputError(
                f"null_region lower bound ({lower}) must not exceed upper bound ({upper})"
            )

    @classmethod
    def from_value(cls, value: Union[float, Sequence[float], "NullRegion"]) -> "NullRegion":
        """Build from a scalar (point null) or a (lower, upper) pair."""
        if isinstance(value, NullRegion):
            return value
        if np.ndim(value) == 0:
            point = check_finite("null_region", value)
            return cls(point, point)
        values = list(np.ravel(value))
        if len(values) == 1:
            point = check_finite("null_region", values[0])
            return cls(point, point)
        if len(values) != 2:
            raise InvalidInputError(
                f"null_region must be a point or a (lower, upper) pair, got {len(values)} values"
            )
        return cls(check_finite("null_region lower bound", values[0]),
                   check_finite("null_region upper bound", values[1]))

    @property
    def is_point(self) -> bool:
        return self.lower == self.upper

    def masses(self, estimate: NormalEstimate) -> Tuple[float, float, float]:
        """
        Mass (or density, for a point null) of each hypothesis region.

        Parameters
        ----------
        estimate : NormalEstimate
            Prior or posterior distribution

        Returns
        -------
        (neg, zero, pos) : tuple of float
            P(X < lower), P(lower < X < upper) or density at the point,
            and P(X > upper)
        """
        m, s = estimate.mean, estimate.se
        neg = float(normal_cdf(self.lower, m, s))
        pos = float(normal_sf(self.upper, m, s))

        if self.is_point:
            zero = float(normal_pdf(self.lower, m, s))
        elif self.upper <= m:
            zero = float(normal_cdf(self.upper, m, s)) - neg
        else:
            # Difference of survival functions stays accurate above the mean
            zero = float(normal_sf(self.lower, m, s)) - pos

        return neg, max(zero, 0.0), pos


@dataclass(frozen=True)
class HypothesisProbs:
    """Probabilities of (H<0, H=0, H>0), summing to one."""
    neg: float
    zero: float
    pos: float

    def __post_init__(self):
        check_probabilities((self.neg, self.zero, self.pos))

    @classmethod
    def from_sequence(
        cls,
        values: Union[Sequence[float], "HypothesisProbs"],
        tol: float = DEFAULT_CONFIG["prior_sum_tol"],
    ) -> "HypothesisProbs":
        """
        Validate three probabilities and renormalise them to sum exactly to 1.

        Instances are already validated on construction and are returned as is.

        Raises
        ------
        InvalidInputError
            Wrong length, entries outside [0, 1], or a sum further than tol from 1
        """
        if isinstance(values, HypothesisProbs):
            return values
        arr = check_probabilities(values, tol=tol)
        arr = arr / arr.sum()
        return cls(*(float(v) for v in arr))

    def as_array(self) -> np.ndarray:
        return np.array([self.neg, self.zero, self.pos])

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.neg, self.zero, self.pos)


@dataclass(frozen=True)
class BayesFactors:
    """Bayes factors for (H<0, H=0, H>0)."""
    neg: float
    zero: float
    pos: float

    def as_array(self) -> np.ndarray:
        return np.array([self.neg, self.zero, self.pos])

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.neg, self.zero, self.pos)


@dataclass(frozen=True)
class EvidenceRecord:
    """Result of updating hypothesis probabilities with one study.

    Attributes:
        likelihood: Observed effect size and its standard error
        prior: Prior on the effect size (after se_mult scaling)
        posterior: Conjugate Normal posterior
        null_region: Null hypothesis used
        bayes_factors: Bayes factors for (H<0, H=0, H>0)
        prior_probs: Hypothesis probabilities before the study
        posterior_probs: Hypothesis probabilities after the study
        ci: Confidence level (percent) used for the automatic prior and plots
        se_mult: Multiplier applied to the prior standard error
    """
    kind: ClassVar[ResultKind] = ResultKind.SINGLE_STUDY

    likelihood: NormalEstimate
    prior: NormalEstimate
    posterior: NormalEstimate
    null_region: NullRegion
    bayes_factors: BayesFactors
    prior_probs: HypothesisProbs
    posterior_probs: HypothesisProbs
    ci: float = DEFAULT_CONFIG["ci"]
    se_mult: float = DEFAULT_CONFIG["se_mult"]

    @property
    def beta(self) -> float:
        return self.likelihood.mean

    @property
    def se_beta(self) -> float:
        return self.likelihood.se

    @property
    def beta0(self) -> float:
        return self.prior.mean

    @property
    def se0(self) -> float:
        return self.prior.se

    @property
    def post_b(self) -> float:
        return self.posterior.mean

    @property
    def post_se(self) -> float:
        return self.posterior.se

    def summary(self, digits: int = 3) -> str:
        """Tabular text summary (see ``bayescombo.summary``)."""
        from .summary import summarize
        return summarize(self, digits=digits)


# =============================================================================
# Computation
# =============================================================================

def bayes_factors(
    prior: NormalEstimate,
    posterior: NormalEstimate,
    null_region: NullRegion,
    eps: float = DEFAULT_CONFIG["degeneracy_eps"],
) -> BayesFactors:
    """
    Ratio of posterior to prior mass in each hypothesis region.

    For a point null the H=0 factor is the Savage-Dickey ratio of densities.

    Raises
    ------
    NumericDegeneracyError
        If a prior mass or density is at or below eps
    """
    prior_masses = null_region.masses(prior)
    post_masses = null_region.masses(posterior)
    what = "density" if null_region.is_point else "probability"

    factors = []
    for region, prior_m, post_m in zip(REGIONS, prior_masses, post_masses):
        if not prior_m > eps:
            label = what if region == "zero" else "probability"
            raise NumericDegeneracyError(
                f"Prior {label} of region '{region}' is {prior_m:.3g}; "
                f"Bayes factor is undefined",
                region=region,
            )
        factors.append(post_m / prior_m)

    return BayesFactors(*factors)


def update_probs(priors: HypothesisProbs, factors: BayesFactors) -> HypothesisProbs:
    """
    Posterior hypothesis probabilities: prior_i * BF_i, normalised.

    Raises
    ------
    NumericDegeneracyError
        If the weighted probabilities cannot be normalised
    """
    weights = priors.as_array() * factors.as_array()
    total = weights.sum()
    if not np.isfinite(total) or total <= 0:
        raise NumericDegeneracyError(
            f"Weighted hypothesis probabilities sum to {total:.3g}; cannot normalise"
        )
    return HypothesisProbs(*(float(v) for v in weights / total))


def compute_evidence(
    beta: float,
    se_beta: float,
    beta0: Optional[float] = None,
    se0: Optional[float] = None,
    se_mult: float = DEFAULT_CONFIG["se_mult"],
    ci: float = DEFAULT_CONFIG["ci"],
    null_region: Union[float, Sequence[float], NullRegion] = DEFAULT_CONFIG["null_region"],
    priors: Union[Sequence[float], HypothesisProbs] = DEFAULT_CONFIG["priors"],
    eps: float = DEFAULT_CONFIG["degeneracy_eps"],
) -> EvidenceRecord:
    """
    Posterior probability of each hypothesis (PPH) for one study.

    Parameters
    ----------
    beta : float
        Observed effect size
    se_beta : float
        Standard error of the effect size (> 0)
    beta0 : float, optional
        Prior mean; 0 if omitted
    se0 : float, optional
        Prior standard error; derived from the data if omitted so that the
        prior's ci% interval reaches the far edge of the data's ci% interval
    se_mult : float
        Multiplier on the prior standard error (> 1 gives a flatter prior)
    ci : float
        Confidence level in percent for the automatic prior
    null_region : float or (lower, upper)
        Point null or interval null
    priors : sequence of 3 floats
        Prior probabilities of (H<0, H=0, H>0)
    eps : float
        Prior mass/density at or below this makes a Bayes factor undefined

    Returns
    -------
    record : EvidenceRecord

    Raises
    ------
    InvalidInputError
        On malformed arguments
    NumericDegeneracyError
        If a Bayes factor or the normalisation is undefined

    Examples
    --------
    >>> rec = compute_evidence(beta=-0.252, se_beta=0.099)
    >>> round(rec.posterior_probs.neg, 3)
    0.912
    """
    beta = check_finite("beta", beta)
    se_beta = check_positive("se_beta", se_beta)
    se_mult = check_positive("se_mult", se_mult)
    ci = check_ci(ci)
    region = NullRegion.from_value(null_region)
    prior_probs = HypothesisProbs.from_sequence(priors)

    beta0 = 0.0 if beta0 is None else check_finite("beta0", beta0)
    if se0 is None:
        se0 = default_prior_se(beta, se_beta, ci)
    else:
        se0 = check_positive("se0", se0)
    se0 = se0 * se_mult

    likelihood = NormalEstimate(beta, se_beta)
    prior = NormalEstimate.create(beta0, se0, name="se0")
    post_b, post_se = posterior_params(beta, se_beta, beta0, se0)
    posterior = NormalEstimate.create(float(post_b), post_se, name="posterior se")

    factors = bayes_factors(prior, posterior, region, eps=eps)
    posterior_probs = update_probs(prior_probs, factors)

    logger.debug(
        "beta=%.4g se=%.4g prior=N(%.4g, %.4g) -> BF=%s PPH=%s",
        beta, se_beta, beta0, se0,
        np.round(factors.as_array(), 4), np.round(posterior_probs.as_array(), 4),
    )

    return EvidenceRecord(
        likelihood=likelihood,
        prior=prior,
        posterior=posterior,
        null_region=region,
        bayes_factors=factors,
        prior_probs=prior_probs,
        posterior_probs=posterior_probs,
        ci=ci,
        se_mult=se_mult,
    )
