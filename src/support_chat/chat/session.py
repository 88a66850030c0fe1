"""Admin-moderated support chat session.

Ties the conversation list, the message cache and the two pollers
together and owns the optimistic send path. All work runs on one asyncio
event loop; nothing here is thread-safe.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable

from support_chat.api.base import AsyncSupportAPI
from support_chat.chat.cache import MessageCache
from support_chat.chat.conversations import ConversationListManager
from support_chat.chat.models import AdminUser, ChatContact, ChatMessage, Notification
from support_chat.chat.poller import Poller
from support_chat.config import (
    DEFAULT_ADMIN_SEARCH_LIMIT,
    DEFAULT_LIST_POLL_INTERVAL,
    DEFAULT_MESSAGE_POLL_INTERVAL,
    ChatSettings,
)
from support_chat.exceptions import SupportChatError

logger = logging.getLogger(__name__)


class ChatWidgetState(str, enum.Enum):
    CLOSED = "closed"
    NO_CONVERSATION_SELECTED = "no-conversation-selected"
    CONVERSATION_ACTIVE = "conversation-active"


class SupportChatSession:
    """Chat widget state for a student or tutor talking to administrators.

    Usage::

        async with SupportChatSession(client, settings) as chat:
            await chat.start_conversation(admin_id)
            chat.draft = "Hello"
            await chat.send()

    Args:
        api: Backend client (``AsyncSupportMessagingClient`` or any
            ``AsyncSupportAPI``).
        settings: Polling intervals and search limit. Defaults apply when
            omitted.
        sender_role: Role of the current user, stamped on optimistic
            messages.
        on_notify: Called for every toast-style notification.
    """

    def __init__(
        self,
        api: AsyncSupportAPI,
        settings: ChatSettings | None = None,
        sender_role: str = "student",
        on_notify: Callable[[Notification], None] | None = None,
    ):
        self._api = api
        self.sender_role = sender_role
        self.message_poll_interval = (
            settings.message_poll_interval if settings else DEFAULT_MESSAGE_POLL_INTERVAL
        )
        self.list_poll_interval = (
            settings.list_poll_interval if settings else DEFAULT_LIST_POLL_INTERVAL
        )
        self.restore_draft_on_failure = (
            settings.restore_draft_on_failure if settings else True
        )
        self._on_notify = on_notify
        self.notifications: list[Notification] = []

        self.conversations = ConversationListManager(
            api,
            notify=self._notify,
            search_limit=settings.admin_search_limit if settings else DEFAULT_ADMIN_SEARCH_LIMIT,
        )
        self.cache = MessageCache()

        self.is_open = False
        self.selected_id: str | None = None
        self.draft = ""
        self.failed_draft: str | None = None

        self._list_poller: Poller | None = None
        self._message_poller: Poller | None = None
        self._generation = 0

    async def __aenter__(self) -> SupportChatSession:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # ---- Widget state ----

    @property
    def state(self) -> ChatWidgetState:
        if not self.is_open:
            return ChatWidgetState.CLOSED
        if self.selected_id is None:
            return ChatWidgetState.NO_CONVERSATION_SELECTED
        return ChatWidgetState.CONVERSATION_ACTIVE

    @property
    def active_conversation(self) -> ChatContact | None:
        if self.selected_id is None:
            return None
        return self.conversations.get(self.selected_id)

    @property
    def messages(self) -> list[ChatMessage]:
        """Messages of the active conversation, oldest first."""
        if self.selected_id is None:
            return []
        return self.cache.get(self.selected_id)

    def _notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self._on_notify is not None:
            self._on_notify(notification)

    async def open(self) -> None:
        """Open the widget: load conversations and admins, start list polling."""
        if self.is_open:
            return
        self.is_open = True
        self._generation += 1
        generation = self._generation
        await self.refresh_conversations()
        if generation != self._generation:
            # closed (or closed and reopened) while the first load was in flight
            return
        self._list_poller = Poller(
            "chat-list", self.list_poll_interval, self.refresh_conversations
        )
        self._list_poller.start()
        if self.selected_id is not None:
            self._start_message_polling(self.selected_id)

    def close(self) -> None:
        """Close the widget and stop every poller. The selection is kept."""
        self.is_open = False
        self._generation += 1
        self._stop_message_polling()
        if self._list_poller is not None:
            self._list_poller.stop()
            self._list_poller = None

    async def refresh_conversations(self) -> None:
        await self.conversations.load_conversations()
        await self.conversations.load_admins()

    # ---- Selection & message polling ----

    def _start_message_polling(self, conversation_id: str) -> None:
        self._stop_message_polling()

        async def tick() -> None:
            await self.load_messages(conversation_id)

        self._message_poller = Poller(
            f"messages:{conversation_id}", self.message_poll_interval, tick
        )
        self._message_poller.start()

    def _stop_message_polling(self) -> None:
        if self._message_poller is not None:
            self._message_poller.stop()
            self._message_poller = None

    async def select(self, conversation_id: str | None) -> None:
        """Make a conversation active (or none), restarting message polling."""
        if conversation_id is None:
            self.deselect()
            return
        self._stop_message_polling()
        self.selected_id = conversation_id
        self.conversations.mark_viewed(conversation_id)
        self.cache.ensure(conversation_id)
        await self.load_messages(conversation_id)
        if self.is_open and self.selected_id == conversation_id:
            self._start_message_polling(conversation_id)

    def deselect(self) -> None:
        self._stop_message_polling()
        self.selected_id = None

    async def load_messages(self, conversation_id: str) -> bool:
        """Fetch the whole history of a conversation and replace the cache.

        Failures are logged and leave the cached history untouched.
        """
        ticket = self.cache.sequence.issue(conversation_id)
        try:
            messages = await self._api.get_messages(conversation_id)
        except SupportChatError as e:
            logger.error(f"Error loading messages for {conversation_id}: {e}")
            return False
        return self.cache.replace(conversation_id, messages, ticket)

    # ---- Admin directory ----

    async def search_admins(self, query: str) -> list[AdminUser]:
        return await self.conversations.search_admins(query)

    async def start_conversation(self, admin_id: str) -> ChatContact | None:
        """Start (or reopen) the conversation with an admin and select it."""
        contact = await self.conversations.start_conversation(admin_id)
        if contact is not None:
            await self.select(contact.id)
        return contact

    # ---- Send path ----

    async def send(self, text: str | None = None) -> ChatMessage | None:
        """Send ``text`` (or the current draft) to the active conversation.

        The message shows up at once as a temporary entry. It is swapped for
        the server's copy on success and removed on failure, in which case
        the text is kept in ``failed_draft``. Returns the stored message or
        None.
        """
        body = (self.draft if text is None else text).strip()
        conversation_id = self.selected_id
        if not body or conversation_id is None:
            return None

        self.draft = ""
        self.failed_draft = None
        temp = self.cache.add_optimistic(conversation_id, body, self.sender_role)

        try:
            message = await self._api.send_message(conversation_id, body)
        except SupportChatError as e:
            logger.error(f"Error sending message to {conversation_id}: {e}")
            self.cache.discard(conversation_id, temp.id)
            self.failed_draft = body
            if self.restore_draft_on_failure and not self.draft:
                self.draft = body
            self._notify(Notification(
                title="Error",
                description="Failed to send message. Please try again.",
                variant="destructive",
            ))
            return None

        self.cache.confirm(conversation_id, temp.id, message)
        self.conversations.update_preview(conversation_id, body)
        await self.conversations.load_conversations()
        return message
