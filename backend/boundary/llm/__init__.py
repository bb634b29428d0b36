"""
Model client boundary layer.

Exports:
  - EmbeddingClient: text -> vector
  - GenerationClient: messages -> text
  - get_embedding_client(), get_generation_client(): Gemini-backed factories

Dependencies: langchain_core, langchain_google_genai
System role: Remote model adapters
"""

from backend.boundary.llm.embedding_client import EmbeddingClient
from backend.boundary.llm.generation_client import GenerationClient, to_langchain_messages

__all__ = [
    "EmbeddingClient",
    "GenerationClient",
    "to_langchain_messages",
]
