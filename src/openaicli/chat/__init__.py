"""Conversation engine and the collaborators it drives.

The engine owns the transcript and the session options; the remaining
modules are stateless helpers (code block extraction, file naming) or thin
boundaries (history storage, completion client).
"""

from .client import CompletionClient, OpenAIChatClient
from .code_blocks import extract_blocks, extract_language_tag, has_code
from .engine import Continue, ConversationEngine, EngineResult, Options, State, Stopped
from .history import HistoryStore
from .models import Message, Role
from .naming import FileNamer

__all__ = [
    "CompletionClient",
    "Continue",
    "ConversationEngine",
    "EngineResult",
    "FileNamer",
    "HistoryStore",
    "Message",
    "OpenAIChatClient",
    "Options",
    "Role",
    "State",
    "Stopped",
    "extract_blocks",
    "extract_language_tag",
    "has_code",
]
