"""
Text summaries of evidence records and combination traces.

``summarize`` dispatches on the ``kind`` discriminant of the result.
"""

from typing import List, Union

from .combination import CombinationTrace
from .evidence import EvidenceRecord, NullRegion, ResultKind

HYPOTHESIS_LABELS = ("H<0", "H=0", "H>0")


def format_percent(p: float, decimals: int = 1) -> str:
    """Format a probability as a percentage."""
    return f"{p * 100:.{decimals}f}%"


def format_null(region: NullRegion) -> str:
    if region.is_point:
        return f"point at {region.lower:g}"
    return f"interval [{region.lower:g}, {region.upper:g}]"


def _summarize_record(record: EvidenceRecord, digits: int) -> str:
    d = digits
    lines: List[str] = [
        "Posterior probability of hypotheses (single study)",
        "",
        f"  Data:      beta = {record.beta:.{d}f}, se = {record.se_beta:.{d}f}",
        f"  Prior:     beta0 = {record.beta0:.{d}f}, se0 = {record.se0:.{d}f} "
        f"(ci = {record.ci:g}%, se_mult = {record.se_mult:g})",
        f"  Posterior: post_b = {record.post_b:.{d}f}, post_se = {record.post_se:.{d}f}",
        f"  Null:      {format_null(record.null_region)}",
        "",
        f"  {'Hypothesis':<12}{'Prior':>10}{'BF':>12}{'Posterior':>12}",
    ]
    rows = zip(
        HYPOTHESIS_LABELS,
        record.prior_probs.as_tuple(),
        record.bayes_factors.as_tuple(),
        record.posterior_probs.as_tuple(),
    )
    for label, prior, bf, post in rows:
        lines.append(
            f"  {label:<12}{format_percent(prior):>10}{bf:>12.{d}f}{format_percent(post):>12}"
        )
    return "\n".join(lines)


def _summarize_trace(trace: CombinationTrace, digits: int) -> str:
    lines: List[str] = [
        f"Posterior probability of hypotheses ({trace.n_studies} studies)",
        "",
        f"  Null: {format_null(trace.null_region)}"
        + ("  [standardised]" if trace.scaled else "")
        + ("  [adjusted]" if trace.adjusted else ""),
        "",
        f"  {'Study':<8}" + "".join(f"{h:>10}" for h in HYPOTHESIS_LABELS),
    ]
    for i, row in enumerate(trace.probability_table()):
        lines.append(
            f"  {i:<8}" + "".join(f"{format_percent(p, digits):>10}" for p in row)
        )
    return "\n".join(lines)


def summarize(result: Union[EvidenceRecord, CombinationTrace], digits: int = 3) -> str:
    """
    Render a result as tabular text.

    Parameters
    ----------
    result : EvidenceRecord or CombinationTrace
        Output of compute_evidence or combine
    digits : int
        Decimals for estimates and Bayes factors (single study) or for
        percentages (combination)

    Returns
    -------
    text : str
    """
    kind = getattr(result, "kind", None)
    if kind is ResultKind.SINGLE_STUDY:
        return _summarize_record(result, digits)
    if kind is ResultKind.MULTI_STUDY:
        return _summarize_trace(result, digits)
    raise TypeError(f"Cannot summarize object of type {type(result).__name__}")
