"""
Per-chat tracking of two-step requests.

A chat is active while it has a session. Each session holds the pending
requests of its users; a user has at most one pending request per chat.
Sessions are guarded by their own lock so chats never block each other; the
chat map lock is only held to insert, remove or look up a session.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Set

from .types import PendingRequest, RequestKind
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _ChatSession:
    lock: threading.Lock = field(default_factory=threading.Lock)
    pending: Set[PendingRequest] = field(default_factory=set)


class RequestTracker:
    """Thread-safe registry of active chats and their pending requests."""

    def __init__(self) -> None:
        self._sessions: Dict[int, _ChatSession] = {}
        self._sessions_lock = threading.Lock()

    def _session(self, chat_id: int) -> Optional[_ChatSession]:
        with self._sessions_lock:
            return self._sessions.get(chat_id)

    def activate(self, chat_id: int) -> bool:
        """Start accepting requests in a chat. Returns False if it was already active."""
        with self._sessions_lock:
            if chat_id in self._sessions:
                return False
            self._sessions[chat_id] = _ChatSession()
            active = sorted(self._sessions)
        logger.info(
            f"✔ Bot activated in chat {chat_id}",
            extra={"subsys": "tracker", "event": "chat.activate", "chat_id": chat_id,
                   "detail": {"active_chats": active}},
        )
        return True

    def deactivate(self, chat_id: int) -> bool:
        """Stop accepting requests in a chat, discarding its pending requests."""
        with self._sessions_lock:
            session = self._sessions.pop(chat_id, None)
            active = sorted(self._sessions)
        if session is None:
            return False
        with session.lock:
            dropped = len(session.pending)
            session.pending.clear()
        logger.info(
            f"✔ Bot removed from chat {chat_id} ({dropped} pending dropped)",
            extra={"subsys": "tracker", "event": "chat.deactivate", "chat_id": chat_id,
                   "detail": {"active_chats": active, "dropped": dropped}},
        )
        return True

    def is_active(self, chat_id: int) -> bool:
        return self._session(chat_id) is not None

    def begin_request(self, chat_id: int, user_id: int, kind: RequestKind) -> bool:
        """Register a pending request.

        Fails when the chat is inactive or when the user already waits on
        another request in this chat.
        """
        session = self._session(chat_id)
        if session is None:
            return False
        request = PendingRequest(user_id, kind)
        with session.lock:
            if any(p.user_id == user_id for p in session.pending):
                return False
            session.pending.add(request)
            recap = sorted(str(p) for p in session.pending)
        logger.info(
            f"New \"{kind.value}\" request in chat {chat_id}",
            extra={"subsys": "tracker", "event": "request.begin", "chat_id": chat_id,
                   "user_id": user_id, "detail": {"pending": recap}},
        )
        return True

    def consume(self, chat_id: int, user_id: int, kind: RequestKind) -> bool:
        """Atomically remove a matching pending request. Returns whether one was removed."""
        session = self._session(chat_id)
        if session is None:
            return False
        request = PendingRequest(user_id, kind)
        with session.lock:
            if request not in session.pending:
                return False
            session.pending.remove(request)
            recap = sorted(str(p) for p in session.pending)
        logger.info(
            f"\"{kind.value}\" request consumed in chat {chat_id}",
            extra={"subsys": "tracker", "event": "request.consume", "chat_id": chat_id,
                   "user_id": user_id, "detail": {"pending": recap}},
        )
        return True

    def has_pending(self, chat_id: int, user_id: int) -> bool:
        session = self._session(chat_id)
        if session is None:
            return False
        with session.lock:
            return any(p.user_id == user_id for p in session.pending)

    def pending(self, chat_id: int) -> FrozenSet[PendingRequest]:
        """Snapshot of a chat's pending requests (empty if inactive)."""
        session = self._session(chat_id)
        if session is None:
            return frozenset()
        with session.lock:
            return frozenset(session.pending)

    def active_chats(self) -> FrozenSet[int]:
        with self._sessions_lock:
            return frozenset(self._sessions)
