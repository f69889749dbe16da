"""
Tests for single-study posterior probabilities of hypotheses.

- Published example values
- Probabilities sum to one, symmetry, monotonicity
- Point-null (Savage-Dickey) and interval-null Bayes factors
- Input validation and numeric degeneracy
"""

import pytest
import numpy as np

from bayescombo.core import default_prior_se, normal_cdf, normal_pdf, normal_sf
from bayescombo.evidence import (
    EvidenceRecord,
    NormalEstimate,
    NullRegion,
    HypothesisProbs,
    BayesFactors,
    ResultKind,
    bayes_factors,
    update_probs,
    compute_evidence,
)
from bayescombo.exceptions import InvalidInputError, NumericDegeneracyError

from conftest import TestConfig, expected_posterior, expected_prior_se


@pytest.mark.tier2
class TestPublishedExamples:
    """Values reported for the negative-effect example study."""

    def test_default_options(self, negative_study, config):
        rec = compute_evidence(negative_study.beta, negative_study.se_beta)
        post = rec.posterior_probs

        assert np.isclose(post.neg, 0.912, atol=config.pph_atol)
        assert np.isclose(post.zero, 0.077, atol=config.pph_atol)
        assert np.isclose(post.pos, 0.011, atol=config.pph_atol)

    def test_flatter_prior(self, negative_study, config):
        default = compute_evidence(negative_study.beta, negative_study.se_beta)
        wide = compute_evidence(negative_study.beta, negative_study.se_beta, se_mult=2)

        assert np.isclose(wide.posterior_probs.neg, 0.91, atol=config.loose_atol)
        assert np.isclose(wide.se0, 2 * default.se0)
        # Posterior se moves toward the data's se
        assert abs(wide.post_se - negative_study.se_beta) < abs(default.post_se - negative_study.se_beta)

    def test_record_fields(self, negative_study):
        rec = compute_evidence(negative_study.beta, negative_study.se_beta)
        se0 = expected_prior_se(negative_study.beta, negative_study.se_beta)
        post_b, post_se = expected_posterior(negative_study.beta, negative_study.se_beta, 0.0, se0)

        assert rec.kind is ResultKind.SINGLE_STUDY
        assert rec.beta == negative_study.beta
        assert rec.se_beta == negative_study.se_beta
        assert rec.beta0 == 0.0
        assert np.isclose(rec.se0, se0)
        assert np.isclose(rec.post_b, post_b)
        assert np.isclose(rec.post_se, post_se)
        assert rec.null_region.is_point
        assert rec.ci == 99
        assert np.isclose(rec.posterior.mean, -0.2011, atol=1e-3)
        assert np.isclose(rec.posterior.se, 0.0884, atol=1e-3)


@pytest.mark.tier2
class TestProbabilityProperties:
    """Structural properties of the posterior probabilities."""

    def test_sum_to_one(self, beta_values, se_values, config):
        rec = compute_evidence(beta_values, se_values)
        assert abs(sum(rec.posterior_probs.as_tuple()) - 1) < config.sum_atol

    @pytest.mark.parametrize("priors", [
        (0.2, 0.6, 0.2),
        (0.1, 0.1, 0.8),
        (0.0, 0.5, 0.5),
    ])
    def test_sum_to_one_with_priors(self, priors, config):
        rec = compute_evidence(0.4, 0.3, beta0=0.1, se0=0.5, priors=priors)
        assert abs(sum(rec.posterior_probs.as_tuple()) - 1) < config.sum_atol

    def test_zero_prior_stays_zero(self):
        rec = compute_evidence(0.4, 0.3, priors=(0.0, 0.5, 0.5))
        assert rec.posterior_probs.neg == 0.0

    def test_symmetry_at_zero_effect(self):
        rec = compute_evidence(0.0, 0.5, beta0=0.0, se0=1.0)
        assert np.isclose(rec.posterior_probs.neg, rec.posterior_probs.pos)
        assert np.isclose(rec.bayes_factors.neg, 1.0)
        assert np.isclose(rec.bayes_factors.pos, 1.0)

    def test_sign_flip_swaps_hypotheses(self):
        up = compute_evidence(0.6, 0.3)
        down = compute_evidence(-0.6, 0.3)
        assert np.isclose(up.posterior_probs.pos, down.posterior_probs.neg)
        assert np.isclose(up.posterior_probs.zero, down.posterior_probs.zero)

    def test_monotone_in_beta(self):
        """With a fixed prior, larger positive effects give larger P(H>0)."""
        betas = np.linspace(0.05, 1.5, 15)
        p_pos = [compute_evidence(b, 0.3, beta0=0.0, se0=1.0).posterior_probs.pos for b in betas]
        assert np.all(np.diff(p_pos) > 0)

    def test_wider_prior_moves_posterior_to_data(self):
        beta, se_beta = 1.2, 0.5
        post_b = [compute_evidence(beta, se_beta, se0=1.0, se_mult=m).post_b
                  for m in (1, 2, 5, 20, 1000)]
        gaps = np.abs(beta - np.array(post_b))
        assert np.all(np.diff(gaps) < 0)
        assert gaps[-1] < 1e-5

    def test_uniform_default_priors(self):
        rec = compute_evidence(0.3, 0.2)
        np.testing.assert_allclose(rec.prior_probs.as_array(), 1 / 3)


@pytest.mark.tier2
class TestBayesFactors:
    """Point and interval null Bayes factors."""

    def test_savage_dickey_point_null(self):
        rec = compute_evidence(0.5, 0.25, beta0=0.0, se0=1.0)
        expected = (normal_pdf(0.0, rec.post_b, rec.post_se)
                    / normal_pdf(0.0, 0.0, 1.0))
        assert np.isclose(rec.bayes_factors.zero, expected)

    def test_tail_ratios_point_null(self):
        rec = compute_evidence(0.5, 0.25, beta0=0.0, se0=1.0)
        assert np.isclose(rec.bayes_factors.neg, normal_cdf(0.0, rec.post_b, rec.post_se) / 0.5)
        assert np.isclose(rec.bayes_factors.pos, normal_sf(0.0, rec.post_b, rec.post_se) / 0.5)

    def test_nonzero_point_null(self):
        rec = compute_evidence(0.5, 0.25, beta0=0.0, se0=1.0, null_region=0.2)
        prior_neg = normal_cdf(0.2, 0.0, 1.0)
        assert np.isclose(rec.bayes_factors.neg,
                          normal_cdf(0.2, rec.post_b, rec.post_se) / prior_neg)

    def test_interval_null_probability_ratios(self, config):
        lo, hi = -0.1, 0.1
        rec = compute_evidence(0.3, 0.2, beta0=0.0, se0=0.8, null_region=(lo, hi))

        def mass(m, s):
            return normal_cdf(hi, m, s) - normal_cdf(lo, m, s)

        assert not rec.null_region.is_point
        assert np.isclose(rec.bayes_factors.zero,
                          mass(rec.post_b, rec.post_se) / mass(0.0, 0.8))
        assert np.isclose(rec.bayes_factors.neg,
                          normal_cdf(lo, rec.post_b, rec.post_se) / normal_cdf(lo, 0.0, 0.8))
        assert np.isclose(rec.bayes_factors.pos,
                          normal_sf(hi, rec.post_b, rec.post_se) / normal_sf(hi, 0.0, 0.8))
        assert abs(sum(rec.posterior_probs.as_tuple()) - 1) < config.sum_atol

    def test_wider_null_interval_favours_null(self):
        narrow = compute_evidence(0.05, 0.1, null_region=(-0.05, 0.05))
        wide = compute_evidence(0.05, 0.1, null_region=(-0.3, 0.3))
        assert wide.posterior_probs.zero > narrow.posterior_probs.zero

    def test_bayes_factors_function(self):
        prior = NormalEstimate(0.0, 1.0)
        posterior = NormalEstimate(0.0, 1.0)
        bf = bayes_factors(prior, posterior, NullRegion())
        np.testing.assert_allclose(bf.as_array(), 1.0)

    def test_update_probs(self):
        probs = update_probs(HypothesisProbs(0.25, 0.5, 0.25), BayesFactors(2.0, 1.0, 0.0))
        np.testing.assert_allclose(probs.as_array(), [0.5, 0.5, 0.0])


@pytest.mark.tier2
class TestInputValidation:
    """Malformed arguments raise InvalidInputError before any computation."""

    @pytest.mark.parametrize("se_beta", [0.0, -0.1, np.inf, np.nan])
    def test_bad_se_beta(self, se_beta):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, se_beta)

    def test_bad_se0(self):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, se0=0.0)

    def test_bad_se_mult(self):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, se_mult=0.0)

    @pytest.mark.parametrize("ci", [0, 100, -5, 150])
    def test_bad_ci(self, ci):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, ci=ci)

    def test_priors_not_summing_to_one(self):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, priors=(0.5, 0.5, 0.5))

    def test_inverted_null_interval(self):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, null_region=(0.1, -0.1))

    def test_prebuilt_priors_validated(self):
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, priors=HypothesisProbs(0.5, 0.5, 0.5))

    def test_prebuilt_inverted_null_interval(self):
        """An inverted interval is bad input, not a degenerate prior mass."""
        with pytest.raises(InvalidInputError):
            compute_evidence(0.2, 0.1, null_region=NullRegion(0.1, -0.1))

    def test_prebuilt_values_accepted(self, config):
        rec = compute_evidence(0.2, 0.1, null_region=NullRegion(-0.05, 0.05),
                               priors=HypothesisProbs(0.25, 0.5, 0.25))
        assert rec.prior_probs == HypothesisProbs(0.25, 0.5, 0.25)
        assert np.isclose(sum(rec.posterior_probs.as_tuple()), 1.0, atol=config.sum_atol)

    def test_non_numeric_beta(self):
        with pytest.raises(InvalidInputError):
            compute_evidence("large", 0.1)


@pytest.mark.tier2
class TestNumericDegeneracy:
    """Undefined Bayes factors are reported, never coerced."""

    def test_prior_density_at_null_vanishes(self):
        # Prior N(10, 0.01): density at 0 underflows to exactly zero
        with pytest.raises(NumericDegeneracyError) as excinfo:
            compute_evidence(10.0, 0.5, beta0=10.0, se0=0.01)
        assert excinfo.value.region in ("neg", "zero")

    def test_prior_tail_vanishes_with_interval_null(self):
        with pytest.raises(NumericDegeneracyError) as excinfo:
            compute_evidence(10.0, 0.5, beta0=10.0, se0=0.01, null_region=(-0.1, 0.1))
        assert excinfo.value.region == "neg"

    def test_custom_eps(self):
        """A larger eps flags near-degenerate priors."""
        compute_evidence(1.0, 0.5, beta0=1.0, se0=0.2)
        with pytest.raises(NumericDegeneracyError) as excinfo:
            compute_evidence(1.0, 0.5, beta0=1.0, se0=0.2, eps=1e-3)
        assert excinfo.value.region == "neg"

    def test_all_weights_zero(self):
        with pytest.raises(NumericDegeneracyError) as excinfo:
            update_probs(HypothesisProbs(1.0, 0.0, 0.0), BayesFactors(0.0, 2.0, 2.0))
        assert excinfo.value.region is None
