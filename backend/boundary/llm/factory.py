"""
Model client factory.

Builds the production Google Gemini embedding and chat models from
configuration and wraps them in the service-facing clients.

Dependencies: langchain_google_genai, backend.configs
System role: Model client instantiation
"""

import logging

from langchain_google_genai import ChatGoogleGenerativeAI

from backend.boundary.llm.embedding_client import EmbeddingClient
from backend.boundary.llm.embeddings_wrapper import FixedDimensionEmbeddings
from backend.boundary.llm.generation_client import GenerationClient
from backend.configs.llm import LLMSettings
from backend.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_embeddings(settings: VectorStoreSettings) -> FixedDimensionEmbeddings:
    """Gemini embedding model with the index's dimension."""
    logger.info(
        f"{__name__}:get_embeddings - Creating embeddings model={settings.embedding_model}, "
        f"dimension={settings.embedding_dimension}"
    )
    return FixedDimensionEmbeddings(
        model=settings.embedding_model,
        output_dimensionality=settings.embedding_dimension,
    )


def get_embedding_client(
    settings: VectorStoreSettings,
    embeddings: FixedDimensionEmbeddings | None = None,
) -> EmbeddingClient:
    """Embedding client over the Gemini embedding model."""
    return EmbeddingClient(
        embeddings=embeddings or get_embeddings(settings),
        dimension=settings.embedding_dimension,
        call_timeout=settings.call_timeout_seconds,
    )


def get_generation_client(settings: LLMSettings) -> GenerationClient:
    """Generation client over the Gemini chat model."""
    logger.info(f"{__name__}:get_generation_client - Creating chat model={settings.generation_model}")
    model = ChatGoogleGenerativeAI(
        model=settings.generation_model,
        temperature=settings.temperature,
    )
    return GenerationClient(model=model, call_timeout=settings.call_timeout_seconds)
