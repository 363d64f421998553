"""Conversation sessions kept in memory for the shell."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass
class ConversationMessage:
    """A single message in a conversation."""

    role: str
    content: Any


@dataclass
class Session:
    """A conversation with its history; safe to use from several threads."""

    id: str
    history: list[ConversationMessage] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def add_message(self, role: str, content: Any) -> None:
        """Append a message to the history."""
        with self._lock:
            self.history.append(ConversationMessage(role, content))

    def get_history(self) -> list[ConversationMessage]:
        """Return a copy of the history."""
        with self._lock:
            return [replace(message) for message in self.history]

    def history_as_dicts(self) -> list[dict[str, Any]]:
        """Return the history as role/content mappings, as the API expects."""
        with self._lock:
            return [
                {"role": message.role, "content": message.content}
                for message in self.history
            ]

    def is_empty(self) -> bool:
        """True when the session holds no messages."""
        with self._lock:
            return not self.history

    def clear(self) -> None:
        """Remove every message, keeping the session."""
        with self._lock:
            self.history = []


class SessionManager:
    """Keeps sessions by identifier."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def get_session(self, session_id: str) -> Session:
        """Return the session with this identifier, creating it if needed."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(id=session_id)
                self._sessions[session_id] = session
            return session

    def remove_session(self, session_id: str) -> None:
        """Forget a session; unknown identifiers are ignored."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def list_sessions(self) -> list[str]:
        """Identifiers of all sessions, in creation order."""
        with self._lock:
            return list(self._sessions)

    def session_count(self) -> int:
        """Number of sessions held."""
        with self._lock:
            return len(self._sessions)


session_manager = SessionManager()


def get_or_create_session(conversation_id: str) -> Session:
    """Return the shared session for a conversation."""
    return session_manager.get_session(conversation_id)


def add_message_to_session(conversation_id: str, role: str, content: Any) -> None:
    """Append a message to a shared session."""
    session_manager.get_session(conversation_id).add_message(role, content)


def get_session_history(conversation_id: str) -> list[dict[str, Any]]:
    """History of a shared session as role/content mappings."""
    return session_manager.get_session(conversation_id).history_as_dicts()


def is_session_empty(conversation_id: str) -> bool:
    """True when the shared session holds no messages."""
    return session_manager.get_session(conversation_id).is_empty()


def clear_session(conversation_id: str) -> None:
    """Empty the history of a shared session."""
    session_manager.get_session(conversation_id).clear()


def remove_session(conversation_id: str) -> None:
    """Forget a shared session."""
    session_manager.remove_session(conversation_id)


def active_session_count() -> int:
    """Number of shared sessions."""
    return session_manager.session_count()


def list_active_sessions() -> list[str]:
    """Identifiers of all shared sessions."""
    return session_manager.list_sessions()