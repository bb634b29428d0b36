"""
Test suite for GenerationClient.

Tests message conversion, empty-output handling and error translation.

System role: Verification of the generation boundary
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from backend.boundary.llm.generation_client import GenerationClient, to_langchain_messages
from backend.core.exceptions import TransientError
from backend.models.query import ChatMessage


def _client_replying(content) -> GenerationClient:
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return GenerationClient(model)


class TestToLangchainMessages:
    """Test suite for to_langchain_messages()."""

    def test_roles_should_map_in_order(self) -> None:
        """Test system/user/assistant map to LangChain message types."""
        # Act
        result = to_langchain_messages([
            ChatMessage(role="system", content="ctx"),
            ChatMessage(role="user", content="q"),
            ChatMessage(role="assistant", content="a"),
        ])

        # Assert
        assert [type(m) for m in result] == [SystemMessage, HumanMessage, AIMessage]
        assert [m.content for m in result] == ["ctx", "q", "a"]


class TestGenerationClient:
    """Test suite for GenerationClient.generate()."""

    @pytest.mark.asyncio
    async def test_generate_should_return_model_text(self) -> None:
        """Test the model's reply is returned."""
        client = GenerationClient(FakeListChatModel(responses=["three"]))

        result = await client.generate([ChatMessage(role="user", content="sqrt 9?")])

        assert result == "three"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", []])
    async def test_generate_should_return_none_for_empty_reply(self, content) -> None:
        """Test empty output is reported as None."""
        assert await _client_replying(content).generate([ChatMessage(role="user", content="q")]) is None

    @pytest.mark.asyncio
    async def test_generate_should_join_text_parts(self) -> None:
        """Test multi-part content keeps only the text."""
        client = _client_replying(["Hello, ", {"type": "text", "text": "world"}])

        assert await client.generate([ChatMessage(role="user", content="q")]) == "Hello, world"

    @pytest.mark.asyncio
    async def test_generate_should_wrap_provider_errors(self) -> None:
        """Test provider failures become TransientError."""
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("quota"))

        # Act & Assert
        with pytest.raises(TransientError):
            await GenerationClient(model).generate([ChatMessage(role="user", content="q")])
