"""
Tests for the Pydantic AI backend and message-history conversion.

Uses pydantic-ai's TestModel so no provider is contacted.
"""

import os

import pytest
from pydantic_ai.messages import ModelRequest, ModelResponse, SystemPromptPart, TextPart, UserPromptPart
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.test import TestModel as CannedModel

from tribuanalyzer.core.config import Config
from tribuanalyzer.services.advisory.backends import PydanticAIBackend, to_message_history
from tribuanalyzer.services.advisory.models import ConversationMessage


def _msg(role, content):
    return ConversationMessage(role=role, content=content)


class TestToMessageHistory:
    def test_empty(self):
        assert to_message_history([], "sistema") == []

    def test_system_prompt_rides_on_first_request(self):
        history = to_message_history([_msg("user", "hola"), _msg("assistant", "¡hola!")], "sistema")

        assert len(history) == 2
        first, second = history
        assert isinstance(first, ModelRequest)
        assert isinstance(first.parts[0], SystemPromptPart)
        assert first.parts[0].content == "sistema"
        assert isinstance(first.parts[1], UserPromptPart)
        assert first.parts[1].content == "hola"
        assert isinstance(second, ModelResponse)
        assert isinstance(second.parts[0], TextPart)
        assert second.parts[0].content == "¡hola!"

    def test_leading_assistant_turn_gets_system_request(self):
        history = to_message_history([_msg("assistant", "bienvenido")], "sistema")
        assert isinstance(history[0], ModelRequest)
        assert isinstance(history[0].parts[0], SystemPromptPart)
        assert isinstance(history[1], ModelResponse)

    def test_later_requests_have_no_system_part(self):
        history = to_message_history(
            [_msg("user", "a"), _msg("assistant", "b"), _msg("user", "c")],
            "sistema",
        )
        assert [type(p) for p in history[2].parts] == [UserPromptPart]


class TestPydanticAIBackend:
    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "config-key")

    def test_explicit_key_stays_on_instance(self):
        backend = PydanticAIBackend(api_key="instance-key")

        assert backend.api_key == "instance-key"
        assert Config.GEMINI_API_KEY == "config-key"
        assert "GEMINI_API_KEY" not in os.environ

    def test_key_defaults_to_config(self):
        assert PydanticAIBackend().api_key == "config-key"

    def test_gemini_ids_get_explicit_provider(self):
        backend = PydanticAIBackend(api_key="instance-key")

        model = backend.resolve_model("google-gla:gemini-3-flash-preview")

        assert isinstance(model, GoogleModel)
        assert model.model_name == "gemini-3-flash-preview"
        assert "GEMINI_API_KEY" not in os.environ

    def test_other_models_pass_through(self):
        backend = PydanticAIBackend(api_key="instance-key")
        canned = CannedModel()
        assert backend.resolve_model(canned) is canned
        assert backend.resolve_model("openai:gpt-4o") == "openai:gpt-4o"

    def test_no_key_leaves_identifier_unresolved(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "")
        backend = PydanticAIBackend()
        assert backend.resolve_model("google-gla:gemini-3-flash-preview") == "google-gla:gemini-3-flash-preview"

    @pytest.mark.asyncio
    async def test_streams_text(self):
        backend = PydanticAIBackend()
        model = CannedModel(custom_output_text="Escala la campaña ganadora")

        chunks = [c async for c in backend(model, "sistema", [_msg("user", "¿qué hago?")])]

        assert "".join(chunks) == "Escala la campaña ganadora"

    @pytest.mark.asyncio
    async def test_streams_with_history(self):
        backend = PydanticAIBackend()
        model = CannedModel(custom_output_text="ok")
        messages = [_msg("user", "hola"), _msg("assistant", "¡hola!"), _msg("user", "¿y ahora?")]

        chunks = [c async for c in backend(model, "sistema", messages)]

        assert "".join(chunks) == "ok"

    @pytest.mark.asyncio
    async def test_requires_messages(self):
        backend = PydanticAIBackend()
        with pytest.raises(ValueError):
            await backend("google-gla:gemini-3-flash-preview", "sistema", []).__anext__()
