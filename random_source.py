"""Random sources consumed by the sampler.

A random source is anything with a ``random()`` method returning a uniform
float, which covers ``random.Random``, ``random.SystemRandom`` and the
``random`` module itself. Plain zero-argument callables are accepted too.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from fast_bernoulli.errors import RandomSourceError

logger = logging.getLogger(__name__)

# Consecutive exact zeros tolerated before the source is considered broken.
MAX_ZERO_DRAWS = 64


@runtime_checkable
class RandomSource(Protocol):
    """Produces one uniform value in ``[0, 1)`` per call."""

    def random(self) -> float:
        ...


class _CallableSource:
    """Adapts a zero-argument callable to the ``RandomSource`` protocol."""

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[], float]) -> None:
        self._func = func

    def random(self) -> float:
        return self._func()

    def __repr__(self) -> str:
        return f"_CallableSource({self._func!r})"


def as_random_source(source: Any) -> RandomSource:
    """
    Normalize ``source`` to an object with a ``random()`` method.

    Args:
        source: A ``RandomSource`` (e.g. ``random.Random``) or a callable
            returning floats

    Returns:
        An object satisfying ``RandomSource``

    Raises:
        TypeError: If ``source`` is neither
    """
    if isinstance(source, RandomSource):
        return source
    if callable(source):
        return _CallableSource(source)
    raise TypeError(
        f"random source must provide random() or be callable, got {type(source).__name__}"
    )


def seeded_source(seed: Optional[int] = None) -> random.Random:
    """Return a ``random.Random`` seeded with ``seed`` (OS entropy when None)."""
    return random.Random(seed)


def draw_open_unit(source: Any) -> float:
    """
    Draw a uniform value in ``(0, 1]`` that is safe to pass to ``math.log``.

    Exact zeros are redrawn. Conditioning on ``u > 0`` does not change the
    distribution of a continuous uniform source, it only removes a
    probability-zero event that would make ``log(u)`` fail.

    Args:
        source: Random source, see ``as_random_source``

    Returns:
        A float ``u`` with ``0 < u <= 1``

    Raises:
        RandomSourceError: If the source returns NaN or a value outside
            ``[0, 1]``, or returns only zeros ``MAX_ZERO_DRAWS`` times in a row
    """
    draw = getattr(source, "random", None)
    if draw is None:
        draw = as_random_source(source).random
    for attempt in range(MAX_ZERO_DRAWS):
        u = draw()
        if u == 0.0:
            logger.debug("Random source returned 0.0, redrawing (attempt %d)", attempt + 1)
            continue
        if math.isnan(u) or not 0.0 < u <= 1.0:
            raise RandomSourceError(
                "random source returned a value outside [0, 1]",
                details={"value": u},
            )
        return u

    raise RandomSourceError(
        "random source returned only zeros",
        details={"draws": MAX_ZERO_DRAWS},
    )
