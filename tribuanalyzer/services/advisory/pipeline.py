"""
AdvisoryPipeline - streams media-buyer advice with ordered model fallback.

Each request becomes an AdvisoryStream that walks a small state machine:

    BUILT -> ATTEMPTING(i) -> STREAMING -> COMPLETED
                  |               |
                  +---------------+--> ATTEMPTING(i+1) ... -> FAILED
    any non-terminal state -> CANCELLED

A failing backend is never retried; the next model in the list starts
from scratch with the full prompt. Only exhaustion is user-visible, as a
single plain-text message. Cancellation is silent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence

from ...core.config import Config
from ...core.observability import get_logfire
from ..campaign_metrics.health_classifier import HealthClassifier
from ..models import AccountSnapshot
from .backends import LLMBackend, PydanticAIBackend
from .models import (
    TERMINAL_STATES,
    AdvisoryChunk,
    AdvisoryMode,
    AdvisoryRequest,
    AdvisoryState,
    BackendAttempt,
    ConversationMessage,
    InsufficientDataError,
)
from .prompts import DIAGNOSTIC_SYSTEM_PROMPT, build_chat_system_prompt, build_diagnostic_prompt

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = (
    "# ⚠️ Error del asistente\n\n"
    "No fue posible generar una respuesta con ninguno de los modelos disponibles "
    "({attempts} intentos). Intenta de nuevo en unos minutos.\n\n"
    "_Último error: {last_error}_"
)


class EmptyResponseError(Exception):
    """Backend finished without producing any text."""


class _StreamCancelled(Exception):
    """Internal signal: the caller cancelled while a chunk was pending."""


class AdvisoryStream:
    """
    Lazy, single-use stream of AdvisoryChunk for one advisory request.

    Iterate with `async for`; call cancel() from anywhere to stop it.
    `text` holds the current attempt's output only, so after completion it
    is exactly one backend's generation.
    """

    def __init__(
        self,
        backend: LLMBackend,
        models: Sequence[str],
        system_prompt: str,
        messages: Sequence[ConversationMessage],
        mode: AdvisoryMode,
        attempt_timeout: float,
        request_timeout: float,
    ):
        self._backend = backend
        self._models = list(models)
        self.system_prompt = system_prompt
        self.messages = list(messages)
        self.mode = mode
        self.attempt_timeout = attempt_timeout
        self.request_timeout = request_timeout

        self.state = AdvisoryState.BUILT
        self.backend_index: Optional[int] = None
        self.model: Optional[str] = None
        self.text = ""
        self.attempts: List[BackendAttempt] = []

        self._cancel_event = asyncio.Event()
        self._consumed = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def cancelled(self) -> bool:
        return self.state is AdvisoryState.CANCELLED

    def cancel(self) -> None:
        """Request cancellation. Idempotent; no-op once the stream has finished."""
        if self.done:
            return
        self._cancel_event.set()
        if not self._consumed:
            self._set_state(AdvisoryState.CANCELLED)

    def __aiter__(self) -> AsyncIterator[AdvisoryChunk]:
        if self._consumed:
            raise RuntimeError("AdvisoryStream can only be consumed once")
        self._consumed = True
        return self._run()

    async def collect(self) -> str:
        """Consume the whole stream and return the final text."""
        async for _ in self:
            pass
        return self.text

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _set_state(self, state: AdvisoryState) -> None:
        logger.debug(f"Advisory {self.mode.value}: {self.state.value} -> {state.value}")
        self.state = state

    async def _run(self) -> AsyncIterator[AdvisoryChunk]:
        if self._cancel_event.is_set():
            self._set_state(AdvisoryState.CANCELLED)
            return

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.request_timeout
        forwarded = False

        try:
            for index, model_id in enumerate(self._models):
                if self._cancel_event.is_set():
                    break
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.error(f"Advisory request exceeded {self.request_timeout:.0f}s before trying {model_id}")
                    break

                self.backend_index = index
                self.model = model_id
                self.text = ""
                self._set_state(AdvisoryState.ATTEMPTING)
                attempt = BackendAttempt(model=model_id)
                self.attempts.append(attempt)
                restart = forwarded

                chunks = self._attempt(model_id, min(self.attempt_timeout, remaining))
                try:
                    async for chunk in chunks:
                        if self.state is AdvisoryState.ATTEMPTING:
                            self._set_state(AdvisoryState.STREAMING)
                        self.text += chunk
                        attempt.chunks += 1
                        yield AdvisoryChunk(text=chunk, model=model_id, restart=restart)
                        restart = False
                        forwarded = True
                        if self._cancel_event.is_set():
                            raise _StreamCancelled()
                    if attempt.chunks == 0:
                        raise EmptyResponseError(f"{model_id} returned no text")
                except _StreamCancelled:
                    logger.info(f"Advisory stream cancelled during {model_id}")
                    self._set_state(AdvisoryState.CANCELLED)
                    return
                except Exception as e:
                    attempt.error = f"{type(e).__name__}: {e}"
                    logger.error(f"Model {model_id} failed: {attempt.error}")
                    if index < len(self._models) - 1:
                        logger.info(f"Falling back from {model_id} to {self._models[index + 1]}")
                    continue
                finally:
                    await chunks.aclose()
                    self._record_attempt(index, attempt)

                self._set_state(AdvisoryState.COMPLETED)
                logger.info(f"Advisory completed with {model_id} ({attempt.chunks} chunks)")
                return

            if self._cancel_event.is_set():
                self._set_state(AdvisoryState.CANCELLED)
                return

            self._set_state(AdvisoryState.FAILED)
            last_error = self.attempts[-1].error if self.attempts else "tiempo de espera agotado"
            logger.error(f"All advisory models failed: {[a.model for a in self.attempts]}")
            self.text = FAILURE_MESSAGE.format(attempts=len(self.attempts), last_error=last_error)
            yield AdvisoryChunk(text=self.text, model=None, restart=forwarded)
        finally:
            # Consumer stopped iterating (break/aclose) or the task was cancelled
            if not self.done:
                self._set_state(AdvisoryState.CANCELLED)
            self._record_request()

    def _record_attempt(self, index: int, attempt: BackendAttempt) -> None:
        # Logged as events; no span may stay open across a yield in _run
        get_logfire().info(
            "advisory_attempt {model}",
            model=attempt.model,
            index=index,
            chunks=attempt.chunks,
            error=attempt.error,
        )

    def _record_request(self) -> None:
        get_logfire().info(
            "advisory_request {mode} {state}",
            mode=self.mode.value,
            state=self.state.value,
            models=[a.model for a in self.attempts],
        )

    async def _attempt(self, model_id: str, timeout: float) -> AsyncIterator[str]:
        """
        Pull chunks from one backend, racing each read against cancellation
        and the attempt deadline.

        Raises:
            asyncio.TimeoutError: The attempt ran past its deadline.
            _StreamCancelled: cancel() was called while a chunk was pending.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        source = self._backend(model_id, self.system_prompt, self.messages).__aiter__()

        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise asyncio.TimeoutError(f"{model_id} exceeded {timeout:.0f}s")

                next_chunk = asyncio.ensure_future(source.__anext__())
                cancel_wait = asyncio.ensure_future(self._cancel_event.wait())
                try:
                    done, _ = await asyncio.wait(
                        {next_chunk, cancel_wait},
                        timeout=remaining,
                        return_when=asyncio.FIRST_COMPLETED,
                    )
                finally:
                    cancel_wait.cancel()
                    if not next_chunk.done():
                        next_chunk.cancel()
                    await asyncio.gather(next_chunk, cancel_wait, return_exceptions=True)

                if self._cancel_event.is_set():
                    raise _StreamCancelled()
                if next_chunk not in done:
                    raise asyncio.TimeoutError(f"{model_id} exceeded {timeout:.0f}s")

                try:
                    chunk = next_chunk.result()
                except StopAsyncIteration:
                    return
                if chunk:
                    yield chunk
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception as e:
                    logger.debug(f"Error closing {model_id} stream: {e}")


class AdvisoryPipeline:
    """
    Entry point for conversational and diagnostic advice.

    Features:
    - Ordered fallback across model identifiers (full re-prompt per model)
    - Per-attempt and per-request wall-clock ceilings
    - Cooperative cancellation via AdvisoryStream.cancel()
    - Input validation before any backend is touched
    """

    def __init__(
        self,
        backend: LLMBackend,
        models: Sequence[str],
        attempt_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
        classifier: Optional[HealthClassifier] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            backend: Streaming callable shared by every request.
            models: Model identifiers, highest priority first.
            attempt_timeout: Seconds allowed per backend attempt.
            request_timeout: Seconds allowed for the whole request.
            classifier: Health policy used when describing campaigns.

        Raises:
            ValueError: If no models are given.
        """
        if not models:
            raise ValueError("At least one advisory model is required")

        self.backend = backend
        self.models = list(models)
        self.attempt_timeout = attempt_timeout or Config.ADVISORY_ATTEMPT_TIMEOUT
        self.request_timeout = request_timeout or Config.ADVISORY_REQUEST_TIMEOUT
        self.classifier = classifier or HealthClassifier()

        logger.info(f"AdvisoryPipeline initialized with models: {', '.join(self.models)}")

    @classmethod
    def from_config(cls) -> "AdvisoryPipeline":
        """Build the production pipeline (Pydantic AI backend, configured models)."""
        return cls(backend=PydanticAIBackend(), models=Config.get_advisory_models())

    def _stream(
        self,
        system_prompt: str,
        messages: Sequence[ConversationMessage],
        mode: AdvisoryMode,
    ) -> AdvisoryStream:
        return AdvisoryStream(
            backend=self.backend,
            models=self.models,
            system_prompt=system_prompt,
            messages=messages,
            mode=mode,
            attempt_timeout=self.attempt_timeout,
            request_timeout=self.request_timeout,
        )

    def run_advisory(self, request: AdvisoryRequest) -> AdvisoryStream:
        """
        Start a conversational turn.

        Raises:
            InsufficientDataError: Empty history, or the last turn is not the user's.
        """
        history = request.conversation_history
        if not history:
            raise InsufficientDataError("No hay mensajes")
        if history[-1].role != "user":
            raise InsufficientDataError("El último mensaje debe ser del usuario")

        system_prompt = build_chat_system_prompt(request.snapshot, self.classifier)
        return self._stream(system_prompt, history, AdvisoryMode.CONVERSATIONAL)

    def diagnostic_stream(self, snapshot: AccountSnapshot) -> AdvisoryStream:
        """
        Build the one-shot diagnostic stream (six fixed sections).

        Raises:
            InsufficientDataError: The snapshot has no campaigns.
        """
        if not snapshot.campaigns:
            raise InsufficientDataError("No hay campañas para analizar")

        prompt = build_diagnostic_prompt(snapshot, self.classifier)
        messages = [ConversationMessage(role="user", content=prompt)]
        return self._stream(DIAGNOSTIC_SYSTEM_PROMPT, messages, AdvisoryMode.DIAGNOSTIC)

    async def run_diagnostic(self, snapshot: AccountSnapshot) -> str:
        """Run the diagnostic and return the full text (or the failure message)."""
        stream = self.diagnostic_stream(snapshot)
        return await stream.collect()
