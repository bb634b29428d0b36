"""
Vector index schemas.

Pydantic models for vector operations (upsert records and query matches).
Used for type-safe vector index interactions.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import uuid

from pydantic import BaseModel, Field


class VectorRecord(BaseModel):
    """One entry to upsert; the id is the owning note's id."""

    id: uuid.UUID = Field(description="Note ID, reused as the vector ID")
    vector: list[float] = Field(description="Embedding vector")
    owner_id: str = Field(description="Owner of the note, stored as filterable metadata")


class VectorMatch(BaseModel):
    """Single result from a top-K query."""

    id: uuid.UUID = Field(description="Note ID of the matched vector")
    score: float = Field(description="Cosine similarity (higher is closer)")
