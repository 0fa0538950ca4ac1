import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

Sender = Callable[[str, Dict[str, Any], str, str], None]
Event = Tuple[str, Dict[str, Any]]


class BroadcastHub:
    """Set of connected observers and best-effort fan-out to them.

    ``sender(event_type, message, sid, namespace)`` delivers one message to
    one observer. An observer whose send raises is dropped; the failure never
    reaches the publisher.
    """

    def __init__(self, sender: Sender, logger: Optional[logging.Logger] = None):
        self._sender = sender
        self._observers: Dict[str, str] = {}  # sid -> namespace
        self._lock = threading.Lock()
        self._pending: Deque[Event] = deque()
        self._dispatch_lock = threading.Lock()
        self.logger = logger or logging.getLogger(__name__)

    def __len__(self):
        with self._lock:
            return len(self._observers)

    def add(self, sid: str, namespace: str = '/ws') -> None:
        with self._lock:
            self._observers[sid] = namespace
        self.logger.info(f"[observer-add] sid={sid} namespace={namespace}")

    def discard(self, sid: str) -> None:
        with self._lock:
            removed = self._observers.pop(sid, None)
        if removed is not None:
            self.logger.info(f"[observer-drop] sid={sid}")

    def observers(self) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._observers.items())

    def _deliver(self, event_type: str, payload: Optional[Dict[str, Any]]) -> int:
        """Send ``{type, **payload}`` to every observer; return the delivery count."""
        message = {'type': event_type}
        message.update(payload or {})
        delivered = 0
        for sid, namespace in self.observers():
            try:
                self._sender(event_type, message, sid, namespace)
            except Exception as exc:
                self.logger.warning(f"[broadcast-fail] event={event_type} sid={sid} error={exc}")
                self.discard(sid)
                continue
            delivered += 1
        return delivered

    def enqueue(self, events: Iterable[Event]) -> None:
        """Append events to the ordered pending queue without sending them."""
        self._pending.extend(events)

    def flush(self) -> None:
        """Deliver pending events in queue order.

        Only one thread drains at a time. A caller that finds another
        drainer active returns at once; that drainer re-checks the queue
        after releasing and picks up anything queued meanwhile.
        """
        while self._pending:
            if not self._dispatch_lock.acquire(blocking=False):
                return
            try:
                while True:
                    try:
                        event_type, payload = self._pending.popleft()
                    except IndexError:
                        break
                    self._deliver(event_type, payload)
            finally:
                self._dispatch_lock.release()

    def publish(self, event_type: str, payload: Optional[Dict[str, Any]] = None) -> None:
        self.publish_all([(event_type, payload)])

    def publish_all(self, events: Iterable[Event]) -> None:
        self.enqueue(events)
        self.flush()
