"""
Generation client.

Sends an ordered message sequence to a LangChain chat model and returns
the generated text, or None when the model produced nothing usable.

Dependencies: langchain_core, backend.boundary.timeouts, backend.models.query
System role: Remote answer generation for the retrieval query path
"""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from backend.boundary.timeouts import bounded
from backend.core.exceptions import TransientError
from backend.models.query import ChatMessage

logger = logging.getLogger(__name__)

_MESSAGE_TYPES: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: list[ChatMessage]) -> list[BaseMessage]:
    """Convert role/content pairs to LangChain message objects, preserving order."""
    return [_MESSAGE_TYPES[message.role](content=message.content) for message in messages]


class GenerationClient:
    """Chat model wrapper; one call per answered question."""

    def __init__(self, model: BaseChatModel, call_timeout: float = 8.0) -> None:
        """
        Initialize client.

        Args:
            model: LangChain chat model
            call_timeout: Upper bound for one call in seconds
        """
        self._model = model
        self._call_timeout = call_timeout

    async def generate(self, messages: list[ChatMessage]) -> str | None:
        """
        Generate a reply.

        Args:
            messages: Ordered system/user/assistant messages

        Returns:
            Generated text, or None if the model returned empty content

        Raises:
            TransientError: If the call failed or timed out
        """
        try:
            response = await bounded(
                self._model.ainvoke(to_langchain_messages(messages)),
                self._call_timeout,
                "generate",
            )
        except TransientError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:generate - {type(e).__name__}: {e}")
            raise TransientError("Generation request failed", operation="generate") from e

        content = response.content
        if isinstance(content, list):
            # Multi-part responses: keep the text parts
            content = "".join(
                part if isinstance(part, str) else part.get("text", "")
                for part in content
            )
        if not content or not content.strip():
            logger.warning(f"{__name__}:generate - Model returned empty content")
            return None
        return content
