"""Fast Bernoulli sampling with geometrically distributed skip counts.

Instead of drawing a fresh random number for every trial, the sampler draws a
"skip count": how many times to return False before the next True. Once it
returns True it draws a new skip count and starts counting down again.

Skip counts of Bernoulli trials with probability ``P`` follow a geometric
distribution. Spread all possible futures along the unit interval: in portion
``P`` of them the next trial succeeds (skip 0), in portion ``1-P`` the skip is
1 or more, and that remaining portion is subdivided the same way. The
likelihood that the next ``n`` trials all fail is ``(1-P)**n``::

    skip >= 0:  |------------------------------------------ (1-P)**0 --|
    skip >= 1:  |               ------------------------------ (1-P)**1 --|
    skip >= 2:  |                        --------------------- (1-P)**2 --|
    skip >= 3:  |                           ^       ---------- (1-P)**3 --|
                                            X

A uniform point ``X`` falls inside the ``>= k`` range but not the
``>= k+1`` range exactly when ``k = floor(log(X) / log(1-P))``. Picking ``X``
at random therefore yields skip counts indistinguishable from rolling the dice
on every trial, and trials are memoryless, so a new skip count may be drawn at
any point without skewing the distribution.
"""

from __future__ import annotations

import enum
import logging
import math
import numbers
from typing import Any

from fast_bernoulli.errors import InvalidProbabilityError
from fast_bernoulli.random_source import draw_open_unit

logger = logging.getLogger(__name__)

# Saturation value for skip counts, also the "never sample" sentinel.
MAX_SKIP_COUNT = 2**64 - 1


class SamplerMode(enum.Enum):
    """Which of the three sampling regimes a sampler is in."""

    NEVER = "never"      # probability == 0
    ALWAYS = "always"    # probability == 1
    GENERAL = "general"  # 0 < probability < 1


def validate_probability(probability: Any) -> float:
    """
    Check that ``probability`` is a real number in ``[0, 1]``.

    Returns:
        The probability as a float

    Raises:
        InvalidProbabilityError: If it is not a real number, is NaN or lies
            outside the closed unit interval
    """
    if isinstance(probability, bool) or not isinstance(probability, numbers.Real):
        raise InvalidProbabilityError(probability)
    value = float(probability)
    if not 0.0 <= value <= 1.0:
        raise InvalidProbabilityError(probability)
    return value


def mode_for(probability: float) -> SamplerMode:
    if probability == 0.0:
        return SamplerMode.NEVER
    if probability == 1.0:
        return SamplerMode.ALWAYS
    return SamplerMode.GENERAL


def geometric_skip_count(u: float, log_q: float) -> int:
    """
    Inverse geometric CDF: ``floor(log(u) / log_q)``, saturated.

    Args:
        u: Uniform value in ``(0, 1]``
        log_q: ``log(1 - probability)``, strictly negative

    Returns:
        Number of failures before the next success, at most ``MAX_SKIP_COUNT``
    """
    log_u = math.log(u)
    # Both logs are <= 0, so the quotient is >= MAX_SKIP_COUNT exactly when
    # log_u <= MAX_SKIP_COUNT * log_q. Comparing this way avoids an infinite
    # quotient for denormal probabilities.
    if log_u <= MAX_SKIP_COUNT * log_q:
        return MAX_SKIP_COUNT
    return min(math.floor(log_u / log_q), MAX_SKIP_COUNT)


class FastBernoulli:
    """
    Fast Bernoulli sampling: each event has equal probability of being sampled.

    Call ``trial`` each time an event occurs; it returns True with the
    configured probability. Almost every call is a single integer decrement,
    a random number is only drawn when an event is sampled, so the lower the
    probability the cheaper sampling becomes.

    The random source is passed to each call rather than stored. Instances
    are not thread-safe; use one per thread or lock around them.

    Example:
        rng = random.Random()
        bernoulli = FastBernoulli(0.05, rng)

        def on_my_event():
            if bernoulli.trial(rng):
                record_sample()
    """

    __slots__ = ("_probability", "_mode", "_log_q", "_skip_count")

    def __init__(self, probability: float, rng: Any) -> None:
        """
        Create a sampler that samples events with the given probability.

        Args:
            probability: Sampling probability, ``0.0 <= probability <= 1.0``
            rng: Random source, used for the initial skip count unless the
                probability is exactly 0 or 1

        Raises:
            InvalidProbabilityError: If the probability is out of range
        """
        self._probability = 0.0
        self._mode = SamplerMode.NEVER
        self._log_q = 0.0
        self._skip_count = MAX_SKIP_COUNT
        self._configure(probability, rng)

    @property
    def probability(self) -> float:
        """The probability with which events are sampled."""
        return self._probability

    @property
    def mode(self) -> SamplerMode:
        return self._mode

    @property
    def skip_count(self) -> int:
        """
        How many events will be skipped until the next event is sampled.

        When the probability is 0 this reports ``MAX_SKIP_COUNT``; logically
        it is infinite and the count never decreases.
        """
        return self._skip_count

    def trial(self, rng: Any) -> bool:
        """
        Perform one Bernoulli trial: returns True with the configured probability.

        Args:
            rng: Random source, only consulted when this trial is sampled

        Returns:
            True if the event should be sampled
        """
        if self._mode is SamplerMode.NEVER:
            return False
        if self._skip_count > 0:
            self._skip_count -= 1
            return False
        self._skip_count = self._next_skip_count(rng)
        return True

    def multi_trial(self, n: int, rng: Any) -> bool:
        """
        Perform ``n`` Bernoulli trials at once, in constant time.

        Returns True if any of the ``n`` trials would have been sampled. This
        suits events that differ in size, e.g. sampling an allocation of
        ``s`` bytes as if every byte were its own trial. Results then need to
        be weighted by ``n`` when analysed, since large events are more likely
        to be sampled.

        After a sampled batch a fresh skip count is drawn rather than
        carrying the overshoot forward; trials are memoryless, so the outcome
        distribution matches ``n`` calls to ``trial``.

        Args:
            n: Number of trials, a non-negative integer
            rng: Random source, only consulted when the batch is sampled

        Returns:
            True if the batch should be sampled

        Raises:
            ValueError: If ``n`` is negative or not an integer
        """
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 0:
            raise ValueError(f"n must be a non-negative integer, got {n!r}")
        if n == 0 or self._mode is SamplerMode.NEVER:
            return False
        if n <= self._skip_count:
            self._skip_count -= n
            return False
        self._skip_count = self._next_skip_count(rng)
        return True

    def reset(self, probability: float, rng: Any) -> None:
        """
        Change the probability, as if constructing a new sampler.

        The current skip count is discarded and a new one drawn for the new
        probability. On error the sampler is left unchanged.

        Raises:
            InvalidProbabilityError: If the probability is out of range
        """
        self._configure(probability, rng)

    def __repr__(self) -> str:
        return (
            f"FastBernoulli(probability={self._probability!r}, "
            f"skip_count={self._skip_count})"
        )

    # Internal
    def _configure(self, probability: Any, rng: Any) -> None:
        value = validate_probability(probability)
        mode = mode_for(value)
        log_q = math.log1p(-value) if mode is SamplerMode.GENERAL else 0.0

        if mode is SamplerMode.NEVER:
            skip_count = MAX_SKIP_COUNT
        elif mode is SamplerMode.ALWAYS:
            skip_count = 0
        else:
            skip_count = geometric_skip_count(draw_open_unit(rng), log_q)

        self._probability = value
        self._mode = mode
        self._log_q = log_q
        self._skip_count = skip_count
        logger.debug(
            "Configured sampler: probability=%r mode=%s skip_count=%d",
            value,
            mode.value,
            skip_count,
        )

    def _next_skip_count(self, rng: Any) -> int:
        if self._mode is SamplerMode.ALWAYS:
            return 0
        return geometric_skip_count(draw_open_unit(rng), self._log_q)
