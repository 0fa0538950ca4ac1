from typing import Any, Dict, Iterable, List

from bingo.models import Ticket


def project_progress(tickets: Iterable[Ticket], drawn: Iterable[int]) -> List[Dict[str, Any]]:
    """Per-ticket progress against the drawn numbers.

    Recomputed on every call; callers must not cache the result across
    mutations.
    """
    drawn_set = set(drawn)
    snapshot = []
    for ticket in tickets:
        total = len(ticket.numbers)
        hits = ticket.hits(drawn_set)
        snapshot.append({
            'id': ticket.id,
            'name': ticket.name,
            'hits': hits,
            'total': total,
            'progressPercent': round(100 * hits / total) if total else 0,
            'ready': ticket.ready,
            'winner': ticket.winner,
        })
    return snapshot
