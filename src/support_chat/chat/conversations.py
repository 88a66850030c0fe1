"""Conversation list, admin directory and admin search."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from support_chat.api.base import AsyncSupportAPI
from support_chat.chat.cache import SequenceGuard
from support_chat.chat.models import AdminUser, ChatContact, Notification
from support_chat.exceptions import SupportChatError

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
UNREAD_BADGE_CAP = 99

_CHATS_KEY = "chats"
_ADMINS_KEY = "admins"
_SEARCH_KEY = "admin-search"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversationListManager:
    """Keeps the current user's conversations with administrators.

    Args:
        api: Backend client.
        notify: Called with a Notification for user-initiated actions.
        search_limit: Max results requested by ``search_admins``.
    """

    def __init__(
        self,
        api: AsyncSupportAPI,
        notify: Callable[[Notification], None] | None = None,
        search_limit: int = 10,
    ):
        self._api = api
        self._notify = notify or (lambda notification: None)
        self.search_limit = search_limit
        self._sequence = SequenceGuard()
        self.contacts: list[ChatContact] = []
        self.admins: list[AdminUser] = []
        self.admin_search_term = ""
        self.admin_search_results: list[AdminUser] = []

    def get(self, conversation_id: str) -> ChatContact | None:
        for contact in self.contacts:
            if contact.id == conversation_id:
                return contact
        return None

    async def load_conversations(self) -> bool:
        """Refresh the list from the backend, replacing it wholesale.

        On failure the previous list is kept. Returns whether a new list
        was applied.
        """
        ticket = self._sequence.issue(_CHATS_KEY)
        try:
            contacts = await self._api.list_chats()
        except SupportChatError as e:
            logger.error(f"Error loading chats: {e}")
            return False
        if not self._sequence.accept(_CHATS_KEY, ticket):
            logger.debug(f"Dropping stale chat list (ticket {ticket})")
            return False
        self.contacts = contacts
        return True

    async def load_admins(self) -> bool:
        """Refresh the full administrator directory."""
        ticket = self._sequence.issue(_ADMINS_KEY)
        try:
            admins = await self._api.list_admins()
        except SupportChatError as e:
            logger.error(f"Error loading admins: {e}")
            return False
        if not self._sequence.accept(_ADMINS_KEY, ticket):
            return False
        self.admins = admins
        return True

    async def search_admins(self, query: str) -> list[AdminUser]:
        """Search the administrator directory.

        Queries shorter than two characters clear the results without a
        request.
        """
        self.admin_search_term = query
        ticket = self._sequence.issue(_SEARCH_KEY)
        if len(query) < MIN_SEARCH_LENGTH:
            # also invalidates any longer query still in flight
            self._sequence.accept(_SEARCH_KEY, ticket)
            self.admin_search_results = []
            return []

        try:
            results = await self._api.list_admins(search=query, limit=self.search_limit)
        except SupportChatError as e:
            logger.error(f"Error searching admins: {e}")
            return self.admin_search_results
        if self._sequence.accept(_SEARCH_KEY, ticket):
            self.admin_search_results = results
        return self.admin_search_results

    def _find_admin(self, admin_id: str) -> AdminUser | None:
        for admin in [*self.admin_search_results, *self.admins]:
            if admin.id == admin_id:
                return admin
        return None

    async def start_conversation(self, admin_id: str) -> ChatContact | None:
        """Create or fetch the conversation with an administrator.

        The conversation is added to the list unless its id is already
        there. Returns the listed contact, or None on failure.
        """
        try:
            chat_id = await self._api.start_chat_with_admin(admin_id)
        except SupportChatError as e:
            logger.error(f"Error starting chat with admin {admin_id}: {e}")
            self._notify(Notification(
                title="Error",
                description="Failed to start chat. Please try again.",
                variant="destructive",
            ))
            return None

        admin = self._find_admin(admin_id)
        admin_name = admin.full_name if admin else "Administrator"

        contact = self.get(chat_id)
        if contact is None:
            now = _now_iso()
            contact = ChatContact(
                id=chat_id,
                name=f"Chat with {admin_name}",
                type="direct",
                last_message="Chat started",
                unread_count=0,
                created_at=now,
                updated_at=now,
            )
            self.contacts.append(contact)
            logger.info(f"Started chat {chat_id} with admin {admin_id}")

        self.admin_search_term = ""
        self.admin_search_results = []
        self._notify(Notification(
            title="Chat started",
            description=f"Started conversation with {admin_name}",
        ))
        return contact

    def update_preview(self, conversation_id: str, text: str) -> None:
        contact = self.get(conversation_id)
        if contact is not None:
            contact.last_message = text
            contact.updated_at = _now_iso()

    def mark_viewed(self, conversation_id: str) -> None:
        """Reset the local unread counter of a conversation being viewed."""
        contact = self.get(conversation_id)
        if contact is not None:
            contact.unread_count = 0

    def filter_contacts(self, term: str) -> list[ChatContact]:
        """Conversations whose name contains ``term`` (case-insensitive)."""
        needle = term.lower()
        return [c for c in self.contacts if needle in c.name.lower()]

    def filter_admins(self, term: str) -> list[AdminUser]:
        """Cached admins whose name or email contains ``term``."""
        needle = term.lower()
        return [
            a for a in self.admins
            if needle in a.full_name.lower() or needle in a.email.lower()
        ]

    def total_unread(self) -> int:
        return sum(c.unread_count for c in self.contacts)

    def unread_badge(self) -> str:
        """Badge text for the chat button; empty when nothing is unread."""
        total = self.total_unread()
        if total <= 0:
            return ""
        if total > UNREAD_BADGE_CAP:
            return f"{UNREAD_BADGE_CAP}+"
        return str(total)
