"""Span processor that forwards a Bernoulli sample of ended spans."""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Optional

from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor

from fast_bernoulli.random_source import as_random_source
from fast_bernoulli.sampler import FastBernoulli

logger = logging.getLogger(__name__)


class SamplingSpanProcessor(SpanProcessor):
    """
    Span processor that samples ended spans before passing them on.

    Each span ending is one event in the stream; a selected span is handed
    to ``next_processor``, the rest are dropped. When ``weight_attribute`` is
    set and a span carries a non-negative integer under that attribute, the
    span counts as that many trials (e.g. bytes allocated or tokens used), so
    heavier spans are proportionally more likely to be kept.

    Add this early in the processor chain so that dropped spans never reach
    the exporters.
    """

    def __init__(
        self,
        next_processor,
        sample_rate: float = 1.0,
        *,
        weight_attribute: Optional[str] = None,
        rng: Optional[Any] = None,
    ):
        """
        Initialize sampling processor.

        Args:
            next_processor: Next processor in the chain
            sample_rate: Probability with which each span (or each unit of
                weight) is selected
            weight_attribute: Optional integer span attribute used as weight
            rng: Optional random source, defaults to a fresh ``random.Random``
        """
        self.next_processor = next_processor
        self.weight_attribute = weight_attribute
        self._rng = as_random_source(rng) if rng is not None else random.Random()
        self._bernoulli = FastBernoulli(sample_rate, self._rng)
        self._lock = threading.Lock()

        # Stats
        self._total_spans = 0
        self._sampled_spans = 0

    @property
    def sample_rate(self) -> float:
        return self._bernoulli.probability

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        """Called when span starts - pass through to next processor."""
        if self.next_processor and hasattr(self.next_processor, 'on_start'):
            self.next_processor.on_start(span, parent_context=parent_context)

    def on_end(self, span: ReadableSpan) -> None:
        """
        Called when span ends - sample before passing to next processor.

        Spans that are not selected are dropped and not passed on.
        """
        weight = self._weight_of(span)
        with self._lock:
            self._total_spans += 1
            if weight is None:
                sampled = self._bernoulli.trial(self._rng)
            else:
                sampled = self._bernoulli.multi_trial(weight, self._rng)
            if sampled:
                self._sampled_spans += 1

        if not sampled:
            return

        if self.next_processor and hasattr(self.next_processor, 'on_end'):
            self.next_processor.on_end(span)

    def get_stats(self) -> dict:
        """Get sampling statistics."""
        with self._lock:
            sampled_rate = (
                self._sampled_spans / self._total_spans * 100
            ) if self._total_spans > 0 else 0
            return {
                "sample_rate": self._bernoulli.probability,
                "total_spans": self._total_spans,
                "sampled_spans": self._sampled_spans,
                "dropped_spans": self._total_spans - self._sampled_spans,
                "sampled_percent": round(sampled_rate, 2),
            }

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        with self._lock:
            self._total_spans = 0
            self._sampled_spans = 0

    def shutdown(self) -> None:
        """Shutdown processor and log final stats."""
        stats = self.get_stats()
        if stats["total_spans"] > 0:
            logger.info(
                "Sampling processor shutdown. Final stats: %d/%d spans sampled (%s%%)",
                stats["sampled_spans"],
                stats["total_spans"],
                stats["sampled_percent"],
            )

        if self.next_processor and hasattr(self.next_processor, 'shutdown'):
            self.next_processor.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Force flush - pass through to next processor."""
        if self.next_processor and hasattr(self.next_processor, 'force_flush'):
            return self.next_processor.force_flush(timeout_millis)
        return True

    # Internal
    def _weight_of(self, span: ReadableSpan) -> Optional[int]:
        if self.weight_attribute is None:
            return None
        attributes = getattr(span, "attributes", None) or {}
        weight = attributes.get(self.weight_attribute)
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            return None
        return weight
