"""fast_bernoulli: Bernoulli sampling of event streams with geometric skip counts."""

from __future__ import annotations

import logging

from fast_bernoulli.errors import (
    ConfigError,
    FastBernoulliError,
    InvalidProbabilityError,
    RandomSourceError,
    ValidationError,
)
from fast_bernoulli.random_source import RandomSource, as_random_source, seeded_source
from fast_bernoulli.sampler import MAX_SKIP_COUNT, FastBernoulli, SamplerMode

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FastBernoulli",
    "SamplerMode",
    "MAX_SKIP_COUNT",
    "RandomSource",
    "as_random_source",
    "seeded_source",
    "FastBernoulliError",
    "ConfigError",
    "ValidationError",
    "InvalidProbabilityError",
    "RandomSourceError",
    "__version__",
]
