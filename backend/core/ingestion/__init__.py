"""Note ingestion business logic."""

from .pipeline import IngestionPipeline

__all__ = ["IngestionPipeline"]
