"""Admin-moderated support chat: models, cache, polling and session."""

from support_chat.chat.models import AdminUser, ChatContact, ChatMessage, Notification
from support_chat.chat.parser import role_display
from support_chat.chat.cache import MessageCache, SequenceGuard
from support_chat.chat.poller import Poller
from support_chat.chat.conversations import ConversationListManager
from support_chat.chat.session import ChatWidgetState, SupportChatSession

__all__ = [
    "AdminUser",
    "ChatContact",
    "ChatMessage",
    "Notification",
    "role_display",
    "MessageCache",
    "SequenceGuard",
    "Poller",
    "ConversationListManager",
    "ChatWidgetState",
    "SupportChatSession",
]
