"""Shared pytest fixtures for dealsurv tests."""

import numpy as np
import pytest

from dealsurv.data.cohort import Sample
from dealsurv.data.hazards import WeibullHazard


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducibility."""
    return 42


@pytest.fixture
def rng(random_seed):
    """Seeded random generator."""
    return np.random.default_rng(random_seed)


@pytest.fixture
def reference_hazard():
    """Weibull hazard of the reference scenario."""
    return WeibullHazard(shape=1.05, scale=250.0)


@pytest.fixture
def small_sample():
    """Two events at t=5 and one deal censored at t=10."""
    return Sample.from_pairs([(5, False), (5, False), (10, True)])


@pytest.fixture
def random_sample(rng):
    """Sample with tied durations and roughly 30% censoring."""
    n_samples = 200
    durations = rng.integers(1, 20, size=n_samples)
    censored = rng.random(n_samples) < 0.3
    return Sample(durations=durations, censored=censored)


@pytest.fixture
def tmp_output_dir(tmp_path):
    """Create a temporary output directory."""
    out_dir = tmp_path / "outputs"
    out_dir.mkdir()
    return out_dir
