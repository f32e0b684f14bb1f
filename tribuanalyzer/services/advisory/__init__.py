"""Advisory Pipeline Package

Conversational and one-shot diagnostic advice from a language model:
- Prompt construction from account snapshots (Spanish media-buyer persona)
- Ordered fallback across model identifiers
- Cancellable, single-use token streams with timeouts
- Sessions that keep at most one stream in flight
"""

from .backends import LLMBackend, PydanticAIBackend
from .models import (
    AdvisoryChunk,
    AdvisoryMode,
    AdvisoryRequest,
    AdvisoryState,
    ConversationMessage,
    InsufficientDataError,
)
from .pipeline import FAILURE_MESSAGE, AdvisoryPipeline, AdvisoryStream
from .session import AdvisorySession

__all__ = [
    'LLMBackend',
    'PydanticAIBackend',
    'AdvisoryChunk',
    'AdvisoryMode',
    'AdvisoryRequest',
    'AdvisoryState',
    'ConversationMessage',
    'InsufficientDataError',
    'FAILURE_MESSAGE',
    'AdvisoryPipeline',
    'AdvisoryStream',
    'AdvisorySession',
]
