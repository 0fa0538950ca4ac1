import random
from typing import Dict, List, Optional

from bingo.models import Ticket
from .errors import InvalidInput, TicketIdsExhausted, TicketNotFound

TICKET_ID_MIN = 10000
TICKET_ID_MAX = 99999
MAX_ID_ATTEMPTS = 1000


def generate_ticket_id(rng, taken) -> int:
    """Generate a 5-digit ticket id not present in ``taken``."""
    if len(taken) >= TICKET_ID_MAX - TICKET_ID_MIN + 1:
        raise TicketIdsExhausted('Every ticket id is in use')
    for _ in range(MAX_ID_ATTEMPTS):
        ticket_id = rng.randint(TICKET_ID_MIN, TICKET_ID_MAX)
        if ticket_id not in taken:
            return ticket_id
    raise TicketIdsExhausted(f'No free ticket id after {MAX_ID_ATTEMPTS} attempts')


class TicketStore:
    """Issued tickets for the active session, in issue order.

    Not thread-safe on its own; ``GameSession`` serializes access.
    """

    def __init__(self, number_max: int = 75, ticket_size: int = 15, rng=None):
        if ticket_size > number_max:
            raise ValueError('ticket_size cannot exceed number_max')
        self.number_max = number_max
        self.ticket_size = ticket_size
        self._rng = rng or random.SystemRandom()
        self._tickets: Dict[int, Ticket] = {}
        self.expected_player_count = 0

    def __len__(self):
        return len(self._tickets)

    def __iter__(self):
        return iter(list(self._tickets.values()))

    def __contains__(self, ticket_id):
        return ticket_id in self._tickets

    def issue(self, name: Optional[str] = None) -> Ticket:
        ticket_id = generate_ticket_id(self._rng, self._tickets)
        numbers = self._rng.sample(range(1, self.number_max + 1), self.ticket_size)
        name = name.strip() if isinstance(name, str) else None
        ticket = Ticket(id=ticket_id, numbers=numbers, name=name or None)
        self._tickets[ticket_id] = ticket
        return ticket

    def issue_bulk(self, names) -> List[Ticket]:
        """Replace every ticket with one per non-blank name.

        The expected player count becomes ``len(names)`` as given, blank
        entries included.
        """
        if not isinstance(names, list) or not names:
            raise InvalidInput('names must be a non-empty list')
        cleaned = [n.strip() for n in names if isinstance(n, str) and n.strip()]
        if not cleaned:
            raise InvalidInput('names must contain at least one non-blank name')
        self.clear_all()
        self.expected_player_count = len(names)
        return [self.issue(n) for n in cleaned]

    def get(self, ticket_id: int) -> Ticket:
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFound(ticket_id)
        return ticket

    def mark_ready(self, ticket_id: int) -> Ticket:
        ticket = self.get(ticket_id)
        ticket.ready = True
        return ticket

    def readiness_gate_satisfied(self) -> bool:
        expected = self.expected_player_count
        if expected <= 0 or len(self._tickets) < expected:
            return False
        return all(t.ready for t in self._tickets.values())

    def reset_flags(self) -> None:
        for ticket in self._tickets.values():
            ticket.ready = False
            ticket.winner = False

    def clear_all(self) -> None:
        self._tickets.clear()
        self.expected_player_count = 0
