import random
from typing import List, Set, Tuple

from .errors import PoolExhausted


class DrawPool:
    """Numbers 1..number_max split between the undrawn pool and the drawn sequence."""

    def __init__(self, number_max: int = 75, rng=None):
        self.number_max = number_max
        self._rng = rng or random.SystemRandom()
        self._remaining: Set[int] = set()
        self._drawn: List[int] = []
        self.reset()

    def reset(self) -> None:
        self._remaining = set(range(1, self.number_max + 1))
        self._drawn = []

    def draw(self) -> int:
        if not self._remaining:
            raise PoolExhausted('All numbers have been drawn')
        # sorted() so a seeded rng gives the same sequence across runs
        number = self._rng.choice(sorted(self._remaining))
        self._remaining.remove(number)
        self._drawn.append(number)
        return number

    @property
    def drawn(self) -> Tuple[int, ...]:
        return tuple(self._drawn)

    @property
    def remaining(self) -> frozenset:
        return frozenset(self._remaining)

    @property
    def exhausted(self) -> bool:
        return not self._remaining

    def has_drawn(self, number: int) -> bool:
        return 1 <= number <= self.number_max and number not in self._remaining
