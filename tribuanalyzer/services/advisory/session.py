"""AdvisorySession: one conversation, at most one in-flight stream.

Starting a new turn cancels whatever stream is still running for the
session. Completed replies are appended to the history so follow-up
questions carry context; cancelled or failed turns are not.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..models import AccountSnapshot
from .models import AdvisoryRequest, AdvisoryState, ConversationMessage, InsufficientDataError
from .pipeline import AdvisoryPipeline, AdvisoryStream

logger = logging.getLogger(__name__)


class AdvisorySession:
    """Conversation state for one user against one account snapshot."""

    def __init__(self, pipeline: AdvisoryPipeline, snapshot: AccountSnapshot):
        self.pipeline = pipeline
        self.snapshot = snapshot
        self.history: List[ConversationMessage] = []
        self._active: Optional[AdvisoryStream] = None

    @property
    def active_stream(self) -> Optional[AdvisoryStream]:
        if self._active is not None and not self._active.done:
            return self._active
        return None

    def cancel_active(self) -> bool:
        """Cancel the in-flight stream, if any. Returns True if one was cancelled."""
        stream = self.active_stream
        if stream is None:
            return False
        logger.info("Cancelling in-flight advisory stream")
        stream.cancel()
        return True

    def ask(self, question: str) -> AdvisoryStream:
        """
        Start a new turn, cancelling the previous one if still streaming.

        Raises:
            InsufficientDataError: If the question is blank. The in-flight
                stream is left running.
        """
        question = question.strip()
        if not question:
            raise InsufficientDataError("No hay mensajes")

        self.cancel_active()

        # A previous question left unanswered (cancelled or failed) is dropped
        answered = list(self.history)
        if answered and answered[-1].role == "user":
            answered.pop()

        turn = answered + [ConversationMessage(role="user", content=question)]

        stream = self.pipeline.run_advisory(
            AdvisoryRequest(conversation_history=turn, snapshot=self.snapshot)
        )
        self.history = turn
        self._active = stream
        return stream

    def record_reply(self, stream: AdvisoryStream) -> bool:
        """Append a completed reply to the history. Returns False otherwise."""
        if stream.state is not AdvisoryState.COMPLETED or stream is not self._active:
            return False
        self.history.append(ConversationMessage(role="assistant", content=stream.text))
        return True

    def clear(self) -> None:
        self.cancel_active()
        self.history = []
        self._active = None
