"""
Ship or Sink: Change
AI Assistants package.

Assistants:
    - conversation_starters: tailored opening lines for one stakeholder
    - chat: AI change coach with cross-project context
"""

from app.ai.assistants.chat import ChatAssistant
from app.ai.assistants.conversation_starters import ConversationStarterAssistant

__all__ = [
    "ChatAssistant",
    "ConversationStarterAssistant",
]
