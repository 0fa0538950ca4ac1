import dataclasses
import logging
import threading
from typing import Any, Dict, List, Optional

from bingo.models import SessionStatus, Ticket
from .draws import DrawPool
from .errors import NotRunning
from .progress import project_progress
from .tickets import TicketStore


def _sanitize_marked(marked) -> List[int]:
    # Client marks are display-only telemetry, never used for the win check
    if not isinstance(marked, (list, tuple)):
        return []
    return [n for n in marked if isinstance(n, int) and not isinstance(n, bool)]


class GameSession:
    """The single live bingo session.

    Every mutation and every snapshot read happens under ``_lock``. Events
    are built and queued on the hub inside the lock, right after the
    mutation that caused them, so observers see them in mutation order.
    Delivery happens after the lock is released; a stuck observer never
    holds up the next mutation.
    """

    def __init__(self, hub=None, number_max: int = 75, ticket_size: int = 15,
                 rng=None, logger: Optional[logging.Logger] = None):
        self._lock = threading.RLock()
        self.tickets = TicketStore(number_max=number_max, ticket_size=ticket_size, rng=rng)
        self.pool = DrawPool(number_max=number_max, rng=rng)
        self.status = SessionStatus.IDLE
        self.hub = hub
        self.logger = logger or logging.getLogger(__name__)

    # ---- snapshots (caller holds the lock) ----
    def _players(self) -> List[Dict[str, Any]]:
        return project_progress(self.tickets, self.pool.drawn)

    def _players_event(self):
        return ('players', {'players': self._players()})

    def _state(self) -> Dict[str, Any]:
        return {
            'drawn': list(self.pool.drawn),
            'players': self._players(),
            'gameOver': self.status == SessionStatus.OVER,
            'expectedPlayerCount': self.tickets.expected_player_count,
            'status': self.status,
        }

    def _may_start(self) -> bool:
        # No declared expectation means no gate; otherwise the gate must hold
        if self.tickets.expected_player_count == 0:
            return True
        return self.tickets.readiness_gate_satisfied()

    def _queue(self, events) -> None:
        # Called under _lock so queue order matches mutation order
        if self.hub is not None and events:
            self.hub.enqueue(events)

    def _flush(self) -> None:
        if self.hub is not None:
            self.hub.flush()

    # ---- reads ----
    def state(self) -> Dict[str, Any]:
        with self._lock:
            return self._state()

    def players(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._players()

    def get_ticket(self, ticket_id: int) -> Ticket:
        with self._lock:
            return dataclasses.replace(self.tickets.get(ticket_id))

    # ---- tickets ----
    def issue_ticket(self, name: Optional[str] = None) -> Ticket:
        with self._lock:
            ticket = dataclasses.replace(self.tickets.issue(name))
            events = [self._players_event()]
            self._queue(events)
        self.logger.info(f"[ticket] issued id={ticket.id} name={ticket.name!r}")
        self._flush()
        return ticket

    def issue_bulk(self, names) -> List[Ticket]:
        with self._lock:
            issued = [dataclasses.replace(t) for t in self.tickets.issue_bulk(names)]
            expected = self.tickets.expected_player_count
            events = [self._players_event()]
            self._queue(events)
        self.logger.info(f"[ticket] bulk issued count={len(issued)} expected={expected}")
        self._flush()
        return issued

    def mark_ready(self, ticket_id: int) -> bool:
        with self._lock:
            was_ready = self.tickets.readiness_gate_satisfied()
            self.tickets.mark_ready(ticket_id)
            all_ready = self.tickets.readiness_gate_satisfied()
            events = [self._players_event()]
            if all_ready and not was_ready:
                events.append(('all_ready', {
                    'expectedPlayerCount': self.tickets.expected_player_count,
                }))
            self._queue(events)
        self.logger.info(f"[ready] ticket={ticket_id} all_ready={all_ready}")
        self._flush()
        return all_ready

    # ---- status transitions ----
    def start(self) -> Dict[str, Any]:
        with self._lock:
            if self.status == SessionStatus.OVER:
                return {'ok': False, 'gameOver': True}
            if not self._may_start():
                self.logger.info(
                    f"[start-reject] tickets={len(self.tickets)} expected={self.tickets.expected_player_count}"
                )
                return {'ok': False, 'reason': 'not_all_ready'}
            self.status = SessionStatus.RUNNING
        self.logger.info("[start] session running")
        return {'ok': True}

    def stop(self) -> None:
        with self._lock:
            if self.status == SessionStatus.RUNNING:
                self.status = SessionStatus.IDLE
                self.logger.info("[stop] session idle")

    def draw_next(self) -> Dict[str, Any]:
        """Draw one number; returns ``{number, drawn, players}``.

        Raises ``NotRunning`` unless running and ``PoolExhausted`` when no
        numbers remain. Drawing the last number moves the session to idle
        and emits ``done`` after ``number``.
        """
        with self._lock:
            if self.status != SessionStatus.RUNNING:
                raise NotRunning('Session is not running')
            number = self.pool.draw()
            result = {
                'number': number,
                'drawn': list(self.pool.drawn),
                'players': self._players(),
            }
            events = [('number', result)]
            if self.pool.exhausted:
                self.status = SessionStatus.IDLE
                events.append(('done', {'drawn': result['drawn']}))
            remaining = len(self.pool.remaining)
            self._queue(events)
        self.logger.info(f"[draw] number={number} remaining={remaining}")
        self._flush()
        return result

    def submit_bingo(self, ticket_id: int, marked=None) -> bool:
        marked = _sanitize_marked(marked)
        with self._lock:
            ticket = self.tickets.get(ticket_id)
            winner = ticket.is_complete(self.pool.drawn)
            events = [('bingo', {
                'ticketId': ticket.id,
                'name': ticket.name,
                'winner': winner,
                'marked': marked,
            })]
            if winner:
                ticket.winner = True
                events.append(self._players_event())
                # A second ticket completed by the same number shares the win
                # but does not end the session again
                if self.status != SessionStatus.OVER:
                    self.status = SessionStatus.OVER
                    events.append(('gameover', {
                        'ticketId': ticket.id,
                        'name': ticket.name,
                        'drawn': list(self.pool.drawn),
                    }))
            self._queue(events)
        self.logger.info(f"[bingo] ticket={ticket_id} winner={winner} marked={len(marked)}")
        self._flush()
        return winner

    def reset_keep_players(self) -> None:
        with self._lock:
            self.pool.reset()
            self.tickets.reset_flags()
            self.status = SessionStatus.IDLE
            events = [('reset', {}), self._players_event()]
            self._queue(events)
        self.logger.info("[reset] numbers cleared, players kept")
        self._flush()

    def new_game(self) -> None:
        with self._lock:
            self.pool.reset()
            self.tickets.clear_all()
            self.status = SessionStatus.IDLE
            events = [('newgame', {})]
            self._queue(events)
        self.logger.info("[newgame] tickets cleared")
        self._flush()
