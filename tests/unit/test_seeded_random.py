from datetime import date

import pytest

from app.services.divination.seeded_random import (
    SeededRandom,
    day_of_year,
    day_random,
    epoch_millis,
    pick,
    tarot_seed,
)


def test_sequence_follows_lcg():
    rng = SeededRandom(1)
    assert rng.next() == 58598 / 233280
    assert rng.next() == 127215 / 233280


def test_same_seed_same_sequence():
    first = SeededRandom(20240101)
    second = SeededRandom(20240101)
    assert [first.next() for _ in range(20)] == [second.next() for _ in range(20)]


def test_values_in_unit_interval():
    rng = SeededRandom(987654321)
    for _ in range(500):
        value = rng.next()
        assert 0 <= value < 1


def test_shuffle_is_permutation_and_repeatable():
    items = list(range(32))
    shuffled = SeededRandom(42).shuffle(items)
    assert sorted(shuffled) == items
    assert shuffled == SeededRandom(42).shuffle(items)
    assert items == list(range(32))


def test_pick_bounds():
    options = ["a", "b", "c", "d"]
    assert pick(options, 0.0) == "a"
    assert pick(options, 0.999999) == "d"
    assert pick(options, 0.5) == "c"
    assert pick(options, 1.0) == "d"


def test_pick_empty_raises():
    with pytest.raises(ValueError):
        pick([], 0.3)


def test_day_random_matches_formula():
    assert day_random(10, 3) == ((10 * 9301 + 3 * 49297) % 233280) / 233280


def test_tarot_seed_with_base_is_deterministic():
    seed = tarot_seed("Ann", date(1990, 5, 17), base=1000)
    expected = 1000 + ord("A") * 1 + ord("n") * 2 + ord("n") * 3 + epoch_millis(date(1990, 5, 17))
    assert seed == expected
    assert tarot_seed(base=7) == 7


def test_next_int_and_chance():
    rng = SeededRandom(1)
    assert rng.next_int(10) == 2
    assert rng.chance() is True


def test_day_of_year():
    assert day_of_year(date(2024, 1, 1)) == 1
    assert day_of_year(date(2024, 12, 31)) == 366
