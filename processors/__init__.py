"""Samplers and span processors built on FastBernoulli."""

from fast_bernoulli.processors.sampler import Sampler, SamplingResult
from fast_bernoulli.processors.otel_sampler import (
    FastBernoulliOTelSampler,
    parent_based_fast_bernoulli,
)
from fast_bernoulli.processors.sampling_processor import SamplingSpanProcessor

__all__ = [
    "Sampler",
    "SamplingResult",
    "FastBernoulliOTelSampler",
    "parent_based_fast_bernoulli",
    "SamplingSpanProcessor",
]
