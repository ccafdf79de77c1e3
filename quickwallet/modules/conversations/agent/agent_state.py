from typing import TypedDict

from quickwallet.modules.conversations.dtos.conversation import ConversationState, InboundMessage
from quickwallet.modules.users.dtos.user import UserProfile


class AgentState(TypedDict, total=False):
    message: InboundMessage
    user: UserProfile | None
    conversation: ConversationState | None
    replies: list[str]
    next_conversation: ConversationState | None
    state_changed: bool
