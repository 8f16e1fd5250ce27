"""
Bounded rolling logs of page events.

Both logs are scoped to the active page: the SessionManager clears them
whenever a different page becomes active. Mutation happens inside engine
callbacks on the event loop thread; the lock is held only for the in-memory
update and never across an await.
"""

import datetime
import threading
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..constants import CONSOLE_BUFFER_LIMIT, NETWORK_BUFFER_LIMIT


def _utcnow() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass
class ConsoleMessageEntry:
    type: str
    text: str
    args: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=_utcnow)

    @classmethod
    def from_message(cls, message: Any) -> "ConsoleMessageEntry":
        args = []
        for arg in getattr(message, "args", None) or []:
            if arg is not None:
                args.append(str(arg))
        return cls(type=message.type, text=message.text, args=args)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NetworkRequestEntry:
    method: str
    url: str
    resource_type: Optional[str] = None
    status: Optional[int] = None
    failure: Optional[str] = None
    timestamp: str = field(default_factory=_utcnow)

    @classmethod
    def from_request(cls, request: Any) -> "NetworkRequestEntry":
        return cls(
            method=request.method,
            url=request.url,
            resource_type=getattr(request, "resource_type", None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConsoleLog:
    """Append-only console buffer with oldest-first eviction."""

    def __init__(self, limit: int = CONSOLE_BUFFER_LIMIT):
        self.limit = max(0, limit)
        self._entries: Deque[ConsoleMessageEntry] = deque()
        self._lock = threading.Lock()

    def append(self, entry: ConsoleMessageEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            while len(self._entries) > self.limit:
                self._entries.popleft()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [entry.to_dict() for entry in self._entries]

    def __len__(self):
        with self._lock:
            return len(self._entries)


class NetworkLog:
    """
    Network request buffer keyed by request identity.

    An entry is created when a request starts and later updated in place when
    its response or failure arrives. Those callbacks come out of order with
    respect to other requests, so updates look the entry up by the request
    object rather than by position.
    """

    def __init__(self, limit: int = NETWORK_BUFFER_LIMIT):
        self.limit = max(0, limit)
        self._entries: Deque[Tuple[Any, NetworkRequestEntry]] = deque()
        self._by_request: Dict[Any, NetworkRequestEntry] = {}
        self._lock = threading.Lock()

    def record_request(self, request: Any, entry: NetworkRequestEntry) -> None:
        with self._lock:
            self._entries.append((request, entry))
            self._by_request[request] = entry
            while len(self._entries) > self.limit:
                evicted_request, evicted = self._entries.popleft()
                if self._by_request.get(evicted_request) is evicted:
                    del self._by_request[evicted_request]

    def record_response(self, request: Any, status: int) -> bool:
        with self._lock:
            entry = self._by_request.get(request)
            if entry is None:
                return False
            entry.status = status
            return True

    def record_failure(self, request: Any, failure: Optional[str]) -> bool:
        with self._lock:
            entry = self._by_request.get(request)
            if entry is None:
                return False
            entry.failure = failure
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._by_request.clear()

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [entry.to_dict() for _, entry in self._entries]

    def __len__(self):
        with self._lock:
            return len(self._entries)


__all__ = [
    "ConsoleMessageEntry",
    "NetworkRequestEntry",
    "ConsoleLog",
    "NetworkLog",
]
