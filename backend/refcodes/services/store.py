from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict

from refcodes.errors import NotFoundError
from refcodes.services.session import SearchSession


def new_session_id() -> str:
    return f"ses_{uuid.uuid4().hex[:16]}"


@dataclass
class SessionStore:
    """Search sessions held in process memory; lost on restart."""

    sessions: Dict[str, SearchSession] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def create(self) -> SearchSession:
        session = SearchSession(session_id=new_session_id())
        self.save(session)
        return session

    def get(self, session_id: str) -> SearchSession:
        with self._lock:
            session = self.sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"Search session {session_id} not found")
        return session

    def get_or_create(self, session_id: str | None) -> SearchSession:
        if session_id:
            with self._lock:
                session = self.sessions.get(session_id)
            if session is not None:
                return session
        return self.create()

    def save(self, session: SearchSession) -> SearchSession:
        with self._lock:
            self.sessions[session.session_id] = session
        return session

    def update(self, session_id: str, transition: Callable[[SearchSession], SearchSession]) -> SearchSession:
        """Apply ``transition`` to the stored session and save the result in one step."""
        with self._lock:
            current = self.sessions.get(session_id)
            if current is None:
                raise NotFoundError(f"Search session {session_id} not found")
            updated = transition(current)
            self.sessions[session_id] = updated
        return updated


store = SessionStore()
