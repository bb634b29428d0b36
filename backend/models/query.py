"""
Query domain models and schemas.

Message and context types for grounded answer generation.

Dependencies: pydantic
System role: Retrieval query API contracts
"""

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One message sent to the generation model."""

    role: Literal["system", "user", "assistant"]
    content: str


class QueryContext(BaseModel):
    """Per-request retrieval state, discarded once the answer is returned."""

    question: str
    retrieved_notes: list[str] = Field(default_factory=list)
    top_k: int = 1


class QueryResponse(BaseModel):
    """Response schema for a grounded answer."""

    question: str
    answer: str
    context: list[str] = Field(description="Note texts used as grounding context")
