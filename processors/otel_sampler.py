"""OpenTelemetry SDK sampler backed by FastBernoulli."""

from __future__ import annotations

import random
import threading
from typing import Any, Optional, Sequence

from opentelemetry.context import Context
from opentelemetry.sdk.trace.sampling import (
    Decision,
    ParentBased,
    Sampler as OTelSampler,
    SamplingResult as OTelSamplingResult,
)
from opentelemetry.trace import Link, SpanKind, get_current_span
from opentelemetry.trace.span import TraceState
from opentelemetry.util.types import Attributes

from fast_bernoulli.random_source import as_random_source
from fast_bernoulli.sampler import FastBernoulli


class FastBernoulliOTelSampler(OTelSampler):
    """
    Samples root spans independently with a fixed probability.

    Unlike ``TraceIdRatioBased`` the decision does not depend on the trace
    id, so only one random draw is made per sampled span. The OTel SDK calls
    samplers from any thread, so trials are serialized with a lock.
    """

    def __init__(self, rate: float, rng: Optional[Any] = None) -> None:
        self._rng = as_random_source(rng) if rng is not None else random.Random()
        self._bernoulli = FastBernoulli(rate, self._rng)
        self._lock = threading.Lock()

    @property
    def rate(self) -> float:
        return self._bernoulli.probability

    def should_sample(
        self,
        parent_context: Optional[Context],
        trace_id: int,
        name: str,
        kind: Optional[SpanKind] = None,
        attributes: Attributes = None,
        links: Optional[Sequence[Link]] = None,
        trace_state: Optional[TraceState] = None,
    ) -> OTelSamplingResult:
        with self._lock:
            sampled = self._bernoulli.trial(self._rng)

        decision = Decision.RECORD_AND_SAMPLE if sampled else Decision.DROP
        if not sampled:
            attributes = None
        parent_span_context = get_current_span(parent_context).get_span_context()
        return OTelSamplingResult(
            decision,
            attributes,
            parent_span_context.trace_state if parent_span_context.is_valid else trace_state,
        )

    def get_description(self) -> str:
        return f"FastBernoulliSampler{{{self.rate}}}"


def parent_based_fast_bernoulli(rate: float, rng: Optional[Any] = None) -> ParentBased:
    """Sample root spans with ``rate``; child spans follow their parent."""
    return ParentBased(root=FastBernoulliOTelSampler(rate, rng))
