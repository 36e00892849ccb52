"""Sampling decisions for event streams."""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from typing import Any, Optional

from fast_bernoulli.random_source import as_random_source
from fast_bernoulli.sampler import FastBernoulli


@dataclass
class SamplingResult:
    sampled: bool


class Sampler:
    """
    Head-based sampler using a fixed probability.

    Owns its random source and a ``FastBernoulli`` instance, and serializes
    access to both so one sampler can be shared between threads.
    """

    def __init__(self, sample_rate: float = 1.0, rng: Optional[Any] = None) -> None:
        self._rng = as_random_source(rng) if rng is not None else random.Random()
        self._bernoulli = FastBernoulli(sample_rate, self._rng)
        self._lock = threading.Lock()

    @property
    def sample_rate(self) -> float:
        return self._bernoulli.probability

    def set_sample_rate(self, sample_rate: float) -> None:
        """Change the rate. The pending skip count is discarded."""
        with self._lock:
            self._bernoulli.reset(sample_rate, self._rng)

    def should_sample(self) -> SamplingResult:
        with self._lock:
            return SamplingResult(sampled=self._bernoulli.trial(self._rng))

    def should_sample_weighted(self, weight: int) -> SamplingResult:
        """Sample an event that counts as ``weight`` independent trials."""
        with self._lock:
            return SamplingResult(sampled=self._bernoulli.multi_trial(weight, self._rng))
