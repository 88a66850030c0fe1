"""In-memory message cache keyed by conversation id."""

from __future__ import annotations

import itertools
import logging
import time
from datetime import datetime, timezone

from support_chat.chat.models import TEMP_ID_PREFIX, ChatMessage

logger = logging.getLogger(__name__)


class SequenceGuard:
    """Drops responses that resolve after a newer request for the same key.

    Every request takes a ticket from ``issue(key)``; ``accept(key, ticket)``
    is true only if no later-issued ticket for that key was accepted first.
    """

    def __init__(self):
        self._issued: dict[str, int] = {}
        self._applied: dict[str, int] = {}

    def issue(self, key: str) -> int:
        ticket = self._issued.get(key, 0) + 1
        self._issued[key] = ticket
        return ticket

    def accept(self, key: str, ticket: int) -> bool:
        if ticket <= self._applied.get(key, 0):
            return False
        self._applied[key] = ticket
        return True

    def bump(self, key: str) -> int:
        """Record a local write: responses to requests issued earlier are stale."""
        ticket = self.issue(key)
        self.accept(key, ticket)
        return ticket

    def latest(self, key: str) -> int:
        return self._applied.get(key, 0)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MessageCache:
    """Message histories for every conversation seen in this session.

    Only the event loop thread mutates the cache.
    """

    def __init__(self):
        self._messages: dict[str, list[ChatMessage]] = {}
        self.sequence = SequenceGuard()
        self._temp_counter = itertools.count(1)

    def get(self, conversation_id: str) -> list[ChatMessage]:
        """Messages of a conversation (a copy; empty if never loaded)."""
        return list(self._messages.get(conversation_id, []))

    def has(self, conversation_id: str) -> bool:
        return conversation_id in self._messages

    def ensure(self, conversation_id: str) -> None:
        """Start an empty history for a conversation not cached yet."""
        self._messages.setdefault(conversation_id, [])

    def replace(
        self,
        conversation_id: str,
        messages: list[ChatMessage],
        ticket: int | None = None,
    ) -> bool:
        """Swap in a freshly fetched history.

        With a ticket, the swap only happens if it is the newest response
        for this conversation. Returns whether the history was applied.
        """
        if ticket is not None and not self.sequence.accept(conversation_id, ticket):
            logger.debug(
                f"Dropping stale history for {conversation_id} "
                f"(ticket {ticket} <= {self.sequence.latest(conversation_id)})"
            )
            return False
        self._messages[conversation_id] = list(messages)
        return True

    def new_temp_id(self) -> str:
        return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}-{next(self._temp_counter)}"

    def add_optimistic(
        self,
        conversation_id: str,
        body: str,
        sender_role: str,
        sender_id: str = "current_user",
        sender_name: str = "You",
    ) -> ChatMessage:
        """Append a temporary message for a send that is still in flight."""
        temp = ChatMessage(
            id=self.new_temp_id(),
            sender_id=sender_id,
            sender_name=sender_name,
            sender_role=sender_role,
            body=body,
            message_type="text",
            created_at=_now_iso(),
            is_read=False,
        )
        self.sequence.bump(conversation_id)
        self._messages.setdefault(conversation_id, []).append(temp)
        return temp

    def confirm(self, conversation_id: str, temp_id: str, message: ChatMessage) -> None:
        """Replace a temporary message by the server's canonical copy.

        If a refresh already dropped the temporary entry, the canonical
        message is appended unless it is cached already.
        Fetches issued before this call can no longer replace the history.
        """
        self.sequence.bump(conversation_id)
        messages = self._messages.setdefault(conversation_id, [])
        for i, existing in enumerate(messages):
            if existing.id == temp_id:
                if any(m.id == message.id for m in messages):
                    del messages[i]
                else:
                    messages[i] = message
                return
        if not any(m.id == message.id for m in messages):
            messages.append(message)

    def discard(self, conversation_id: str, temp_id: str) -> bool:
        """Remove a temporary message. Returns whether it was present."""
        messages = self._messages.get(conversation_id)
        if not messages:
            return False
        kept = [m for m in messages if m.id != temp_id]
        self._messages[conversation_id] = kept
        return len(kept) != len(messages)
