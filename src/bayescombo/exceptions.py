"""Error kinds raised by the evidence and combination routines."""

from typing import Optional, Tuple


class BayesComboError(Exception):
    """Base class for all package errors."""


class InvalidInputError(BayesComboError, ValueError):
    """Malformed arguments, detected before any computation."""


class NumericDegeneracyError(BayesComboError, ArithmeticError):
    """A Bayes factor or normalisation cannot be formed.

    Attributes:
        region: Hypothesis region at fault ("neg", "zero", "pos"), or None
            when the weighted probabilities cannot be normalised
        study_index: 1-based study number when raised during a combination
    """

    def __init__(
        self,
        message: str,
        region: Optional[str] = None,
        study_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.region = region
        self.study_index = study_index

    def __reduce__(self):
        # Keep attributes when crossing process boundaries (joblib)
        return (type(self), (str(self), self.region, self.study_index))


class CombinationError(NumericDegeneracyError):
    """A sequential combination aborted at one study.

    ``partial`` holds the records of the studies that completed before the
    failure, for diagnostics only.
    """

    def __init__(
        self,
        message: str,
        region: Optional[str] = None,
        study_index: Optional[int] = None,
        partial: Tuple = (),
    ):
        super().__init__(message, region=region, study_index=study_index)
        self.partial = tuple(partial)

    def __reduce__(self):
        return (type(self), (str(self), self.region, self.study_index, self.partial))
