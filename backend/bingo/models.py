from dataclasses import dataclass
from typing import FrozenSet, Optional


class SessionStatus:
    IDLE = 'idle'
    RUNNING = 'running'
    OVER = 'over'


@dataclass
class Ticket:
    id: int
    numbers: FrozenSet[int]
    name: Optional[str] = None
    ready: bool = False
    winner: bool = False

    def __post_init__(self):
        self.numbers = frozenset(self.numbers)
        if not self.name:
            self.name = f'Player {self.id}'

    def hits(self, drawn) -> int:
        return len(self.numbers.intersection(drawn))

    def is_complete(self, drawn) -> bool:
        return self.numbers.issubset(drawn)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'numbers': sorted(self.numbers),
            'ready': self.ready,
            'winner': self.winner,
        }
