"""
Vector store configuration settings.

Manages the FAISS note index and the embedding model that feeds it.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector index and embedding configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    persist_directory: str | None = Field(
        default=None,
        description="Directory for FAISS index persistence (in-memory when unset)",
    )
    index_name: str = Field(default="notes", description="FAISS index file name")

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Embedding vector dimension",
        ge=1,
    )

    top_k: int = Field(default=1, description="Number of notes used as grounding context", ge=1)
    call_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single embedding or index call",
        gt=0,
    )
    reconcile_on_startup: bool = Field(
        default=True,
        description="Run the reconcile sweep at startup, re-indexing notes the index lacks",
    )
