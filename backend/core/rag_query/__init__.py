"""RAG query business logic.

Includes prompt assembly and the retrieval query service.
"""

from .prompt import DEFAULT_QUESTION, build_messages
from .query_service import RetrievalQueryService

__all__ = ["DEFAULT_QUESTION", "RetrievalQueryService", "build_messages"]
