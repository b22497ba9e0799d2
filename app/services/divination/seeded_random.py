# app/services/divination/seeded_random.py
import math
import time
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280


class SeededRandom:
    """
    Linear congruential generator. The same seed always yields the same sequence,
    which is what makes a draw reproducible when the caller supplies the seed.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)

    def next(self) -> float:
        self.seed = (self.seed * MULTIPLIER + INCREMENT) % MODULUS
        return self.seed / MODULUS

    def next_int(self, max_value: int) -> int:
        return math.floor(self.next() * max_value)

    def chance(self, threshold: float = 0.5) -> bool:
        return self.next() > threshold

    def shuffle(self, items: Sequence[T]) -> List[T]:
        shuffled = list(items)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.next_int(i + 1)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled


def pick(options: Sequence[T], p: float) -> T:
    """Select options[floor(p * n)] for p in [0, 1)."""
    if not options:
        raise ValueError("Cannot pick from an empty template list")
    p = min(max(p, 0.0), math.nextafter(1.0, 0.0))
    return options[math.floor(p * len(options))]


def day_of_year(value: date) -> int:
    return value.timetuple().tm_yday


def day_random(doy: int, seed: int) -> float:
    """Per-day pseudo random value used for the daily horoscope templates."""
    return ((doy * MULTIPLIER + seed * INCREMENT) % MODULUS) / MODULUS


def epoch_millis(value) -> int:
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        moment = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def tarot_seed(name: Optional[str] = None, birth_date: Optional[date] = None, base: Optional[int] = None) -> int:
    """
    Seed for a tarot draw. Without an explicit base the current time is used, so every
    draw is fresh; pass a base to make the draw repeatable.
    """
    seed = int(base) if base is not None else int(time.time() * 1000)
    if name:
        for i, char in enumerate(name):
            seed += ord(char) * (i + 1)
    if birth_date:
        seed += epoch_millis(birth_date)
    return seed
