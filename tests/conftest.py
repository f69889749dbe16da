"""
Pytest fixtures and configuration for bayescombo tests.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass
class Study:
    """Container for one study's effect size and standard error."""
    beta: float  # Effect size
    se_beta: float  # Standard error

    @property
    def pair(self) -> Tuple[float, float]:
        return (self.beta, self.se_beta)


@dataclass
class TestConfig:
    """Tolerances for numerical comparisons."""
    sum_atol: float = 1e-9  # Probabilities must sum to 1
    pph_atol: float = 0.01  # Published PPH values
    loose_atol: float = 0.02  # PPH values read off a plot


# Published example values
NEGATIVE_STUDY = Study(beta=-0.252, se_beta=0.099)
SEQUENTIAL_BETA = [2.3, 1.2, 0.2, 0.44]
SEQUENTIAL_SE = [1.03, 0.75, 0.16, 0.28]


@pytest.fixture
def config():
    """Standard test configuration."""
    return TestConfig()


@pytest.fixture
def negative_study():
    """Single study with a clearly negative effect."""
    return NEGATIVE_STUDY


@pytest.fixture
def sequential_studies():
    """Four studies that jointly support a positive effect."""
    return [Study(b, s) for b, s in zip(SEQUENTIAL_BETA, SEQUENTIAL_SE)]


@pytest.fixture(params=[-2.0, -0.5, 0.0, 0.3, 1.5])
def beta_values(request):
    """Parametrized effect sizes."""
    return request.param


@pytest.fixture(params=[0.1, 0.5, 2.0])
def se_values(request):
    """Parametrized standard errors."""
    return request.param


@pytest.fixture(params=[90, 95, 99])
def ci_values(request):
    """Parametrized confidence levels."""
    return request.param


@pytest.fixture(autouse=True)
def close_figures():
    """Close matplotlib figures created by a test."""
    yield
    import matplotlib.pyplot as plt
    plt.close("all")


# Helper functions for tests
def expected_prior_se(beta: float, se_beta: float, ci: float = 99) -> float:
    """Closed form of the automatic prior standard error."""
    from scipy import stats
    z = stats.norm.ppf(1 - (1 - ci / 100) / 2)
    return (abs(beta) + z * se_beta) / z


def expected_posterior(beta: float, se_beta: float, beta0: float, se0: float):
    """Precision-weighted posterior mean and standard error."""
    prec = 1 / se_beta**2 + 1 / se0**2
    post_se = np.sqrt(1 / prec)
    post_b = (beta / se_beta**2 + beta0 / se0**2) / prec
    return post_b, post_se


# Pytest configuration
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "tier1: Tier 1 foundational tests")
    config.addinivalue_line("markers", "tier2: Tier 2 single-study evidence tests")
    config.addinivalue_line("markers", "tier3: Tier 3 sequential combination tests")
    config.addinivalue_line("markers", "tier4: Tier 4 summary and plotting tests")
