"""
Sequential combination of evidence across studies.

Each study's posterior hypothesis probabilities become the next study's
prior hypothesis probabilities. The prior on the effect size is not carried
forward: unless fixed by the caller it is derived afresh from each study's
own effect size and standard error, so studies with very different noise
levels each get a self-calibrated prior.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Tuple, Union

import numpy as np
from joblib import Parallel, delayed
from tqdm import tqdm

from .config import DEFAULT_CONFIG
from .evidence import (
    EvidenceRecord,
    HypothesisProbs,
    NullRegion,
    ResultKind,
    compute_evidence,
    check_ci,
    check_finite,
    check_positive,
)
from .exceptions import CombinationError, InvalidInputError, NumericDegeneracyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombinationTrace:
    """Hypothesis probabilities accumulated over an ordered set of studies.

    Attributes:
        initial_probs: Hypothesis probabilities before any evidence ("study 0")
        records: One EvidenceRecord per study, in order
        scaled: Whether effect sizes were standardised before updating
        adjusted: Whether near-zero probabilities were adjusted between studies
    """
    kind: ClassVar[ResultKind] = ResultKind.MULTI_STUDY

    initial_probs: HypothesisProbs
    records: Tuple[EvidenceRecord, ...]
    scaled: bool = False
    adjusted: bool = False

    @property
    def n_studies(self) -> int:
        return len(self.records)

    @property
    def beta(self) -> np.ndarray:
        return np.array([r.beta for r in self.records])

    @property
    def se_beta(self) -> np.ndarray:
        return np.array([r.se_beta for r in self.records])

    @property
    def beta0(self) -> np.ndarray:
        return np.array([r.beta0 for r in self.records])

    @property
    def se0(self) -> np.ndarray:
        return np.array([r.se0 for r in self.records])

    @property
    def ci(self) -> float:
        return self.records[0].ci

    @property
    def null_region(self) -> NullRegion:
        return self.records[0].null_region

    @property
    def final_probs(self) -> HypothesisProbs:
        return self.records[-1].posterior_probs

    def probability_table(self) -> np.ndarray:
        """
        Hypothesis probabilities after each study.

        Returns
        -------
        table : array of shape (n_studies + 1, 3)
            Row 0 holds the initial probabilities; row i the probabilities
            after study i. Columns are (H<0, H=0, H>0).
        """
        rows = [self.initial_probs.as_array()]
        rows.extend(r.posterior_probs.as_array() for r in self.records)
        return np.vstack(rows)

    def summary(self, digits: int = 1) -> str:
        """Tabular text summary (see ``bayescombo.summary``)."""
        from .summary import summarize
        return summarize(self, digits=digits)


def adjust_probs(
    probs: HypothesisProbs,
    epsilon: float = DEFAULT_CONFIG["adjust_epsilon"],
    adj_factor: float = DEFAULT_CONFIG["adj_factor"],
) -> HypothesisProbs:
    """
    Lift probabilities below epsilon by adj_factor and renormalise.

    A hypothesis with probability ~0 can never recover under multiplicative
    updating; the adjustment leaves later studies able to revive it.
    """
    arr = probs.as_array()
    low = arr < epsilon
    if not low.any():
        return probs
    arr = np.where(low, arr + adj_factor, arr)
    arr = arr / arr.sum()
    logger.warning(
        "Adjusted hypothesis probabilities %s -> %s",
        np.round(probs.as_array(), 8), np.round(arr, 8),
    )
    return HypothesisProbs(*(float(v) for v in arr))


def ev_combo(
    beta: Sequence[float],
    se_beta: Sequence[float],
    beta0: Optional[float] = None,
    se0: Optional[float] = None,
    se_mult: float = DEFAULT_CONFIG["se_mult"],
    ci: float = DEFAULT_CONFIG["ci"],
    null_region: Union[float, Sequence[float], NullRegion] = DEFAULT_CONFIG["null_region"],
    priors: Union[Sequence[float], HypothesisProbs] = DEFAULT_CONFIG["priors"],
    scale: bool = False,
    adjust: bool = False,
    epsilon: float = DEFAULT_CONFIG["adjust_epsilon"],
    adj_factor: float = DEFAULT_CONFIG["adj_factor"],
    eps: float = DEFAULT_CONFIG["degeneracy_eps"],
) -> CombinationTrace:
    """
    Combine evidence from several studies given as parallel vectors.

    Parameters
    ----------
    beta : sequence of float
        Effect sizes, one per study, in the order they are combined
    se_beta : sequence of float
        Standard errors, same length as beta
    beta0 : float, optional
        Prior mean shared by all studies; 0 if omitted
    se0 : float, optional
        Prior standard error shared by all studies; derived per study if omitted
    se_mult : float
        Multiplier on each study's prior standard error
    ci : float
        Confidence level in percent for the automatic prior
    null_region : float or (lower, upper)
        Point null or interval null
    priors : sequence of 3 floats
        Initial probabilities of (H<0, H=0, H>0)
    scale : bool
        Standardise each study to (beta / se_beta, 1) before updating
    adjust : bool
        Lift probabilities below epsilon by adj_factor between studies
    epsilon, adj_factor : float
        Adjustment threshold and amount
    eps : float
        Degeneracy threshold passed to compute_evidence

    Returns
    -------
    trace : CombinationTrace

    Raises
    ------
    InvalidInputError
        On malformed arguments, including fewer than two studies
    CombinationError
        If a Bayes factor is undefined for one of the studies
    """
    beta = np.atleast_1d(np.asarray(beta, dtype=float))
    se_beta = np.atleast_1d(np.asarray(se_beta, dtype=float))
    if beta.ndim != 1 or se_beta.ndim != 1:
        raise InvalidInputError("beta and se_beta must be one-dimensional")
    if len(beta) != len(se_beta):
        raise InvalidInputError(
            f"beta and se_beta must have the same length, got {len(beta)} and {len(se_beta)}"
        )
    if len(beta) < 2:
        raise InvalidInputError(
            f"at least two studies are required, got {len(beta)}; "
            "use compute_evidence for a single study"
        )

    # Validate everything up front so nothing is partially computed
    for i, (b, s) in enumerate(zip(beta, se_beta), start=1):
        check_finite(f"beta[{i}]", b)
        check_positive(f"se_beta[{i}]", s)
    if beta0 is not None:
        beta0 = check_finite("beta0", beta0)
    if se0 is not None:
        se0 = check_positive("se0", se0)
    se_mult = check_positive("se_mult", se_mult)
    ci = check_ci(ci)
    region = NullRegion.from_value(null_region)
    current = HypothesisProbs.from_sequence(priors)
    if adjust and (epsilon < 0 or adj_factor <= 0):
        raise InvalidInputError("epsilon must be >= 0 and adj_factor > 0")

    if scale:
        beta = beta / se_beta
        se_beta = np.ones_like(se_beta)

    initial = current
    records: List[EvidenceRecord] = []
    for i, (b, s) in enumerate(zip(beta, se_beta), start=1):
        try:
            record = compute_evidence(
                b, s,
                beta0=beta0,
                se0=se0,
                se_mult=se_mult,
                ci=ci,
                null_region=region,
                priors=current,
                eps=eps,
            )
        except NumericDegeneracyError as e:
            logger.warning("Combination aborted at study %d: %s", i, e)
            raise CombinationError(
                f"study {i}: {e}", region=e.region, study_index=i, partial=records,
            ) from e

        records.append(record)
        logger.debug("Study %d: PPH=%s", i, np.round(record.posterior_probs.as_array(), 4))

        current = record.posterior_probs
        if adjust:
            current = adjust_probs(current, epsilon, adj_factor)

    return CombinationTrace(
        initial_probs=initial,
        records=tuple(records),
        scaled=scale,
        adjusted=adjust,
    )


def combine(
    studies: Sequence[Tuple[float, float]],
    **options,
) -> CombinationTrace:
    """
    Combine evidence from an ordered sequence of (beta, se_beta) pairs.

    Keyword options are those of ``ev_combo``.

    Examples
    --------
    >>> trace = combine([(2.3, 1.03), (1.2, 0.75), (0.2, 0.16), (0.44, 0.28)])
    >>> trace.final_probs.pos > 0.95
    True
    """
    try:
        arr = np.asarray(studies, dtype=float)
    except (TypeError, ValueError):
        raise InvalidInputError("studies must be a sequence of (beta, se_beta) pairs")
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidInputError(
            f"studies must be a sequence of (beta, se_beta) pairs, got shape {arr.shape}"
        )
    return ev_combo(arr[:, 0], arr[:, 1], **options)


def batch_combine(
    study_sets: Sequence[Sequence[Tuple[float, float]]],
    n_jobs: int = 1,
    show_progress: bool = False,
    **options,
) -> List[CombinationTrace]:
    """
    Run ``combine`` over independent study sets, optionally in parallel.

    Parameters
    ----------
    study_sets : sequence
        Each item is a sequence of (beta, se_beta) pairs
    n_jobs : int
        Number of worker processes (-1 uses all cores)
    show_progress : bool
        Show a progress bar
    **options
        Passed to ``combine``

    Returns
    -------
    traces : list of CombinationTrace
        In the same order as study_sets
    """
    study_sets = list(study_sets)
    iterator = tqdm(study_sets, desc="Combining study sets", unit="set",
                    disable=not show_progress)

    if n_jobs == 1:
        return [combine(studies, **options) for studies in iterator]

    return Parallel(n_jobs=n_jobs, prefer="processes")(
        delayed(combine)(studies, **options) for studies in iterator
    )
