"""
Conversation Store

In-memory conversation history keyed by bot conversation id.

This stands in for the bot framework's storage layer: the planner reads the
recent turns of a conversation from here and appends the new exchange after
each reply.

Design choices
--------------
- In-memory only (no persistence across process restarts).
- Per-conversation message lists with an optional maximum length.
- Thread-safe access using a re-entrant lock.
- Copy-on-read semantics (callers cannot mutate internal state).
"""

from __future__ import annotations

from typing import Dict, List, Optional
from threading import RLock

from ..api.models import ChatMessage


class SessionStore:
    """
    In-memory store mapping conversation IDs to ordered lists of ChatMessage
    objects.
    """

    def __init__(self, max_messages_per_session: Optional[int] = None) -> None:
        """
        Parameters
        ----------
        max_messages_per_session : Optional[int]
            If provided, each conversation's history is truncated to keep at
            most this many most recent messages.
        """
        self._store: Dict[str, List[ChatMessage]] = {}
        self._lock = RLock()
        self._max_messages_per_session = max_messages_per_session

    def get_history(self, session_id: str) -> List[ChatMessage]:
        """Return a copy of the history for `session_id` (empty if unknown)."""
        with self._lock:
            return list(self._store.get(session_id, []))

    def add_messages(self, session_id: str, new_messages: List[ChatMessage]) -> None:
        """
        Append messages to a conversation, creating it if needed, then trim to
        the most recent `max_messages_per_session`.
        """
        if not new_messages:
            return

        with self._lock:
            history = self._store.setdefault(session_id, [])
            history.extend(new_messages)

            limit = self._max_messages_per_session
            if limit is not None and limit > 0:
                excess = len(history) - limit
                if excess > 0:
                    self._store[session_id] = history[excess:]

