"""LLM backends for the advisory pipeline.

A backend is any callable

    backend(model_id, system_prompt, messages) -> AsyncIterator[str]

that streams text deltas and signals failure by raising. The pipeline
owns fallback, timeouts and cancellation; backends just stream.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, List, Optional, Protocol, Sequence, Union

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)

from ...core.config import Config
from .models import ConversationMessage

logger = logging.getLogger(__name__)


class LLMBackend(Protocol):
    def __call__(
        self,
        model_id: str,
        system_prompt: str,
        messages: Sequence[ConversationMessage],
    ) -> AsyncIterator[str]:
        ...


def to_message_history(
    messages: Sequence[ConversationMessage],
    system_prompt: str,
) -> List[ModelMessage]:
    """
    Convert prior conversation turns to Pydantic AI message history.

    The system prompt rides on the first request so it survives when
    history is non-empty.
    """
    history: List[ModelMessage] = []
    for i, message in enumerate(messages):
        if message.role == "user":
            parts = [UserPromptPart(content=message.content)]
            if i == 0:
                parts.insert(0, SystemPromptPart(content=system_prompt))
            history.append(ModelRequest(parts=parts))
        else:
            if i == 0:
                history.append(ModelRequest(parts=[SystemPromptPart(content=system_prompt)]))
            history.append(ModelResponse(parts=[TextPart(content=message.content)]))
    return history


class PydanticAIBackend:
    """
    Streams text from any Pydantic AI model string (e.g. 'google-gla:gemini-3-flash-preview').

    Constructed once at startup and injected into the pipeline; each call
    builds a fresh Agent so attempts never share state. The API key stays on
    the instance and reaches Gemini through an explicit provider.
    """

    GEMINI_PREFIX = "google-gla:"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or Config.GEMINI_API_KEY

        if not self.api_key:
            logger.warning("GEMINI_API_KEY not found - advisory backends will fail")

    def resolve_model(self, model_id: Union[str, Model]) -> Union[str, Model]:
        """
        Turn a 'google-gla:<name>' identifier into a GoogleModel bound to this
        backend's key. Other identifiers and Model instances pass through.
        """
        if isinstance(model_id, str) and model_id.startswith(self.GEMINI_PREFIX) and self.api_key:
            name = model_id[len(self.GEMINI_PREFIX):]
            return GoogleModel(name, provider=GoogleProvider(api_key=self.api_key))
        return model_id

    async def __call__(
        self,
        model_id: str,
        system_prompt: str,
        messages: Sequence[ConversationMessage],
    ) -> AsyncIterator[str]:
        if not messages:
            raise ValueError("At least one message is required")

        prompt = messages[-1].content
        history = to_message_history(messages[:-1], system_prompt)

        agent = Agent(self.resolve_model(model_id), system_prompt=system_prompt)

        logger.debug(f"Streaming from {model_id} ({len(history)} history messages)")
        async with agent.run_stream(prompt, message_history=history or None) as result:
            async for delta in result.stream_text(delta=True):
                yield delta
