"""Types for the advisory pipeline: requests, stream chunks, lifecycle states."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models import AccountSnapshot


class InsufficientDataError(ValueError):
    """Request rejected before any backend call: nothing to advise on."""


class AdvisoryMode(str, Enum):
    CONVERSATIONAL = "conversational"
    DIAGNOSTIC = "diagnostic"


class AdvisoryState(str, Enum):
    BUILT = "built"
    ATTEMPTING = "attempting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset([AdvisoryState.COMPLETED, AdvisoryState.FAILED, AdvisoryState.CANCELLED])


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AdvisoryRequest(BaseModel):
    """One user turn: the conversation so far plus the account context."""

    conversation_history: List[ConversationMessage] = Field(default_factory=list)
    snapshot: AccountSnapshot


class AdvisoryChunk(BaseModel):
    """A piece of generated text.

    `restart` is set on the first chunk of a fallback attempt when an
    earlier attempt already emitted text: whatever was shown for this turn
    must be dropped. `model` is None for the synthetic failure message.
    """

    text: str
    model: Optional[str] = None
    restart: bool = False


class BackendAttempt(BaseModel):
    """Outcome of one backend invocation, kept for logging and tests."""

    model: str
    error: Optional[str] = None
    chunks: int = 0
