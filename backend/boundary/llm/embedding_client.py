"""
Embedding client.

Maps text to a fixed-length vector through any LangChain ``Embeddings``
implementation and rejects unusable results.

Dependencies: langchain_core, backend.boundary.timeouts
System role: Remote embedding call for ingestion and retrieval
"""

import logging
import math

from langchain_core.embeddings import Embeddings

from backend.boundary.timeouts import bounded
from backend.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """
    Stateless text embedding client.

    Attributes:
        dimension: Expected vector length
    """

    def __init__(self, embeddings: Embeddings, dimension: int, call_timeout: float = 5.0) -> None:
        """
        Initialize client.

        Args:
            embeddings: LangChain embedding model
            dimension: Expected vector length
            call_timeout: Upper bound for one call in seconds
        """
        self._embeddings = embeddings
        self.dimension = dimension
        self._call_timeout = call_timeout

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Text to embed

        Returns:
            Vector of length ``dimension``

        Raises:
            EmbeddingError: On transport failure, timeout, or an empty/garbled vector
        """
        try:
            vector = await bounded(
                self._embeddings.aembed_query(text),
                self._call_timeout,
                "embed",
                error_cls=EmbeddingError,
            )
        except EmbeddingError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
            raise EmbeddingError("Embedding request failed", operation="embed") from e

        if not vector or len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding has {len(vector) if vector else 0} dimensions, expected {self.dimension}",
                operation="embed",
            )
        if not all(math.isfinite(value) for value in vector):
            raise EmbeddingError("Embedding contains non-finite values", operation="embed")
        return [float(value) for value in vector]
