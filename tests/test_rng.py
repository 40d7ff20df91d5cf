import math

import pytest

from signshape.rng import Random


def _draw(gen, n):
    return [gen.uniform() for _ in range(n)]


def test_same_seed_same_sequence():
    first = _draw(Random(42), 50)
    second = _draw(Random(42), 50)
    assert len(first) == 50
    assert len(set(first)) == 50
    assert all(0.0 < v < 1.0 for v in first)
    assert first == second


def test_different_seeds_differ():
    assert _draw(Random(42), 20) != _draw(Random(43), 20)


def test_seed_zero_and_one_match():
    assert _draw(Random(0), 30) == _draw(Random(1), 30)


def test_default_seed_matches_zero():
    assert _draw(Random(), 10) == _draw(Random(0), 10)


def test_negative_seed_matches_absolute():
    assert _draw(Random(-17), 30) == _draw(Random(17), 30)


def test_randomize_restarts_sequence():
    gen = Random(7)
    first = _draw(gen, 25)
    gen.randomize(7)
    assert _draw(gen, 25) == first


def test_uniform_in_open_unit_interval():
    values = _draw(Random(123), 5000)
    assert all(0.0 < v < 1.0 for v in values)
    assert 0.45 < sum(values) / len(values) < 0.55


def test_uniform_between_bounds():
    gen = Random(5)
    values = [gen.uniform_between(-3.0, 2.0) for _ in range(2000)]
    assert all(-3.0 <= v <= 2.0 for v in values)


def test_uniform_int_inclusive_range():
    gen = Random(99)
    values = {gen.uniform_int(1, 6) for _ in range(3000)}
    assert values == {1, 2, 3, 4, 5, 6}


def test_gaussian_zero_deviation_returns_mean():
    gen = Random(3)
    assert gen.gaussian(2.5, 0.0) == 2.5


def test_gaussian_statistics():
    gen = Random(11)
    samples = [gen.gaussian(10.0, 2.0) for _ in range(20000)]
    mean = sum(samples) / len(samples)
    var = sum((s - mean) ** 2 for s in samples) / len(samples)
    assert mean == pytest.approx(10.0, abs=0.1)
    assert math.sqrt(var) == pytest.approx(2.0, rel=0.05)
    assert all(abs(s - 10.0) <= 12.0 for s in samples)


def test_exponential_positive_with_expected_mean():
    gen = Random(21)
    samples = [gen.exponential(4.0) for _ in range(20000)]
    assert all(s > 0 for s in samples)
    assert sum(samples) / len(samples) == pytest.approx(0.25, rel=0.05)


def test_exponential_zero_rate_fails():
    with pytest.raises(ZeroDivisionError):
        Random(1).exponential(0)