"""Parse support-messaging API payloads into chat models."""

from __future__ import annotations

from datetime import datetime, timezone

import dateutil.parser

from support_chat.chat.models import AdminUser, ChatContact, ChatMessage
from support_chat.exceptions import SupportChatResponseError

_ROLE_DISPLAY = {
    "super_admin": "Super Admin",
    "admin": "Administrator",
    "manager": "Manager",
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def unwrap(payload, key: str | None = None):
    """Return ``payload["data"]`` (or ``payload["data"][key]``).

    Raises SupportChatResponseError when the envelope is missing.
    """
    if not isinstance(payload, dict) or "data" not in payload:
        raise SupportChatResponseError("Response has no 'data' envelope")
    data = payload["data"]
    if key is None:
        return data
    if not isinstance(data, dict) or key not in data:
        raise SupportChatResponseError(f"Response data has no '{key}' field")
    return data[key]


def _require_id(raw: dict, kind: str) -> str:
    if not isinstance(raw, dict):
        raise SupportChatResponseError(f"Expected {kind} object, got {type(raw).__name__}")
    raw_id = raw.get("id")
    if raw_id is None or raw_id == "":
        raise SupportChatResponseError(f"{kind} without id: {raw!r}")
    return str(raw_id)


def _as_int(value) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SupportChatResponseError(f"Expected an integer, got {value!r}") from e


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or value == "":
        return False
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no"):
        return False
    raise SupportChatResponseError(f"Expected a boolean, got {value!r}")


def parse_contact(raw: dict) -> ChatContact:
    contact_id = _require_id(raw, "chat")
    return ChatContact(
        id=contact_id,
        name=raw.get("name") or "",
        type=raw.get("type") or "direct",
        last_message=raw.get("last_message") or "No messages yet",
        unread_count=_as_int(raw.get("unread_count")),
        created_at=raw.get("created_at") or "",
        updated_at=raw.get("updated_at") or "",
    )


def parse_message(raw: dict) -> ChatMessage:
    message_id = _require_id(raw, "message")
    return ChatMessage(
        id=message_id,
        sender_id=str(raw.get("sender_id") or ""),
        sender_name=raw.get("sender_name") or "",
        sender_role=raw.get("sender_role") or "",
        body=raw.get("message") or "",
        message_type=raw.get("message_type") or "text",
        created_at=raw.get("created_at") or "",
        is_read=_as_bool(raw.get("is_read")),
    )


def parse_admin(raw: dict) -> AdminUser:
    admin_id = _require_id(raw, "admin")
    return AdminUser(
        id=admin_id,
        full_name=raw.get("full_name") or "",
        email=raw.get("email") or "",
        role=raw.get("role") or "admin",
        avatar_url=raw.get("avatar_url"),
        status=raw.get("status") or "active",
        created_at=raw.get("created_at") or "",
    )


def _parse_list(items, parse_one, kind: str) -> list:
    if items is None:
        return []
    if not isinstance(items, list):
        raise SupportChatResponseError(f"Expected a list of {kind}, got {type(items).__name__}")
    return [parse_one(item) for item in items]


def parse_contacts(items) -> list[ChatContact]:
    return _parse_list(items, parse_contact, "chats")


def parse_admins(items) -> list[AdminUser]:
    return _parse_list(items, parse_admin, "admins")


def parse_messages(items) -> list[ChatMessage]:
    """Parse a message history, ordered by ``created_at`` ascending."""
    messages = _parse_list(items, parse_message, "messages")
    return sort_messages(messages)


def timestamp_key(value: str) -> datetime:
    """Sort key for ISO 8601 strings; unparseable values sort first."""
    if not value:
        return _EPOCH
    try:
        parsed = dateutil.parser.isoparse(value)
    except (ValueError, OverflowError):
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_messages(messages: list[ChatMessage]) -> list[ChatMessage]:
    # sorted() is stable, so equal timestamps keep server order
    return sorted(messages, key=lambda m: timestamp_key(m.created_at))


def role_display(role: str) -> str:
    """Human label for an administrator role."""
    return _ROLE_DISPLAY.get(role, role)


def parse_chat_id(payload) -> str:
    """Conversation id from a start-with-admin response."""
    chat_id = unwrap(payload, "chatId")
    if chat_id is None or chat_id == "":
        raise SupportChatResponseError("Response has an empty 'chatId'")
    return str(chat_id)
