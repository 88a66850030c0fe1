"""Data models for the support chat."""

from __future__ import annotations

from dataclasses import dataclass

TEMP_ID_PREFIX = "temp_"


@dataclass
class ChatContact:
    """A 1:1 conversation between the current user and one administrator."""

    id: str
    name: str
    type: str = "direct"
    last_message: str = "No messages yet"
    unread_count: int = 0
    created_at: str = ""  # ISO 8601
    updated_at: str = ""  # ISO 8601


@dataclass
class ChatMessage:
    """A single message in a conversation."""

    id: str
    sender_id: str
    sender_name: str
    sender_role: str  # student | tutor | admin | super_admin | manager
    body: str
    message_type: str = "text"
    created_at: str = ""  # ISO 8601
    is_read: bool = False

    @property
    def is_temporary(self) -> bool:
        """True for optimistic messages not yet acknowledged by the backend."""
        return self.id.startswith(TEMP_ID_PREFIX)


@dataclass
class AdminUser:
    """An entry of the administrator directory."""

    id: str
    full_name: str
    email: str
    role: str
    avatar_url: str | None = None
    status: str = "active"
    created_at: str = ""


@dataclass
class Notification:
    """A transient toast shown for user-initiated actions."""

    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"
