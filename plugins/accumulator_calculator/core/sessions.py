"""In-memory calculator sessions."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from common.logging import get_logger

from .accumulator import Accumulator, Evaluation
from .operations import DEFAULT_PRECISION

logger = get_logger("accumulator_calculator.sessions")


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown or has expired."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class CalculatorSession:
    """One client's accumulator plus the variable bindings it evaluates against."""

    accumulator: Accumulator
    session_id: str = ""
    variables: dict[str, float] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    last_accessed: datetime = field(default_factory=_now)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def touch(self) -> None:
        self.last_accessed = _now()

    def evaluate(self) -> Evaluation:
        return self.accumulator.evaluate(self.variables)

    def set_variable(self, name: str, value: float) -> Evaluation:
        self.variables[name] = float(value)
        return self.evaluate()

    def unset_variable(self, name: str) -> Evaluation:
        self.variables.pop(name, None)
        return self.evaluate()

    def reset(self) -> None:
        self.accumulator.reset()
        self.variables.clear()


class SessionStore:
    """Thread-safe in-memory session registry with TTL purging and LRU eviction."""

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(minutes=30),
        max_sessions: int = 1000,
        precision: int = DEFAULT_PRECISION,
    ) -> None:
        self._items: dict[str, CalculatorSession] = {}
        self._lock = threading.Lock()
        self.ttl = ttl
        self.max_sessions = max_sessions
        self.precision = precision

    def __len__(self) -> int:
        with self._lock:
            self._purge_locked()
            return len(self._items)

    def _purge_locked(self) -> None:
        now = _now()
        expired = [
            session_id
            for session_id, session in self._items.items()
            if now - session.last_accessed > self.ttl
        ]
        for session_id in expired:
            self._items.pop(session_id, None)
            logger.debug("session %s expired", session_id)

    def _evict_locked(self) -> None:
        while len(self._items) >= self.max_sessions:
            oldest = min(self._items.values(), key=lambda item: item.last_accessed)
            self._items.pop(oldest.session_id, None)
            logger.info("session %s evicted, store full", oldest.session_id)

    def create(self) -> CalculatorSession:
        session_id = uuid.uuid4().hex
        session = CalculatorSession(
            accumulator=Accumulator(precision=self.precision),
            session_id=session_id,
        )
        with self._lock:
            self._purge_locked()
            self._evict_locked()
            self._items[session_id] = session
        logger.info("session %s created", session_id)
        return session

    def get(self, session_id: str) -> CalculatorSession:
        with self._lock:
            self._purge_locked()
            try:
                session = self._items[session_id]
            except KeyError as exc:
                raise SessionNotFoundError("Session expired or not found") from exc
            session.touch()
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            session = self._items.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError("Session expired or not found")
        logger.info("session %s deleted", session_id)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


__all__ = ["CalculatorSession", "SessionNotFoundError", "SessionStore"]
