"""openaicli: a terminal client for OpenAI-compatible chat completions.

The package centres on :class:`~openaicli.chat.engine.ConversationEngine`,
which keeps the transcript, persists it between sessions and writes code
blocks found in replies to standalone files.
"""

from .chat import ConversationEngine, Message, Role
from .config import Settings, load_settings

__all__ = ["ConversationEngine", "Message", "Role", "Settings", "load_settings"]
