"""Tests for random source adapters and the zero-draw policy."""

import logging
import random

import pytest

from fast_bernoulli import random_source
from fast_bernoulli.errors import RandomSourceError
from fast_bernoulli.random_source import (
    MAX_ZERO_DRAWS,
    RandomSource,
    as_random_source,
    draw_open_unit,
    seeded_source,
)


class CountingZeros:
    def __init__(self):
        self.calls = 0

    def random(self):
        self.calls += 1
        return 0.0


def test_standard_library_sources_satisfy_protocol():
    assert isinstance(random.Random(), RandomSource)
    assert isinstance(random.SystemRandom(), RandomSource)
    assert as_random_source(random) is random


def test_callable_is_wrapped():
    source = as_random_source(lambda: 0.25)
    assert source.random() == 0.25


def test_non_source_is_rejected():
    with pytest.raises(TypeError):
        as_random_source(42)


def test_seeded_source_is_reproducible():
    a = seeded_source(5)
    b = seeded_source(5)
    assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]


def test_draw_open_unit_passes_values_through():
    assert draw_open_unit(lambda: 0.5) == 0.5
    assert draw_open_unit(lambda: 1.0) == 1.0


def test_draw_open_unit_calls_random_method_directly(monkeypatch):
    def no_wrapping(source):
        raise AssertionError("sources with random() must not be wrapped")

    monkeypatch.setattr(random_source, "as_random_source", no_wrapping)
    expected = random.Random(8).random()
    assert draw_open_unit(random.Random(8)) == expected


def test_draw_open_unit_redraws_zero(caplog):
    values = iter([0.0, 0.75])
    with caplog.at_level(logging.DEBUG, logger="fast_bernoulli.random_source"):
        assert draw_open_unit(lambda: next(values)) == 0.75
    assert "redrawing" in caplog.text


def test_draw_open_unit_gives_up_on_constant_zero():
    source = CountingZeros()
    with pytest.raises(RandomSourceError) as exc_info:
        draw_open_unit(source)
    assert source.calls == MAX_ZERO_DRAWS
    assert exc_info.value.details["draws"] == MAX_ZERO_DRAWS


@pytest.mark.parametrize("value", [float("nan"), -0.5, 1.5, float("inf")])
def test_draw_open_unit_rejects_out_of_range(value):
    with pytest.raises(RandomSourceError):
        draw_open_unit(lambda: value)
