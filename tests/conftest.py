"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite-backed session factory, deterministic fake models, wired
collaborators (store, index, clients, pipeline, query service)
Dependencies: pytest, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import uuid

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import FakeListChatModel

EMBEDDING_DIM = 16


@pytest.fixture
async def session_factory(tmp_path):
    """
    Create a file-backed SQLite async database for testing.

    A file database (rather than :memory: with one shared connection) keeps
    concurrent sessions in separate transactions.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import create_async_engine

    from backend.boundary.db.base import Base
    from backend.boundary.db.connection import create_session_factory
    from backend.boundary.db import models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """
    Open one session on the test database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def embeddings():
    """Deterministic fake embedding model (same text -> same vector)."""
    return DeterministicFakeEmbedding(size=EMBEDDING_DIM)


@pytest.fixture
def embedding_client(embeddings):
    from backend.boundary.llm.embedding_client import EmbeddingClient

    return EmbeddingClient(embeddings, dimension=EMBEDDING_DIM, call_timeout=5.0)


@pytest.fixture
def vector_index(embeddings):
    from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex

    return FAISSVectorIndex(embeddings, dimension=EMBEDDING_DIM, call_timeout=5.0)


@pytest.fixture
def relational_store(session_factory):
    from backend.boundary.db.relational_store import RelationalStore

    return RelationalStore(session_factory, call_timeout=5.0)


@pytest.fixture
def ingestion_settings():
    """Retry policy without backoff delays."""
    from backend.configs.ingestion import IngestionSettings

    return IngestionSettings(
        max_attempts=3,
        backoff_initial_seconds=0,
        backoff_max_seconds=0,
        backoff_jitter_seconds=0,
    )


@pytest.fixture
def pipeline(relational_store, embedding_client, vector_index, ingestion_settings):
    from backend.core.ingestion import IngestionPipeline

    return IngestionPipeline(
        store=relational_store,
        embedding_client=embedding_client,
        vector_index=vector_index,
        settings=ingestion_settings,
    )


@pytest.fixture
def chat_model():
    """Fake chat model that always answers the same way."""
    return FakeListChatModel(responses=["The answer is 3."])


@pytest.fixture
def generation_client(chat_model):
    from backend.boundary.llm.generation_client import GenerationClient

    return GenerationClient(chat_model, call_timeout=5.0)


@pytest.fixture
def query_service(embedding_client, vector_index, relational_store, generation_client):
    from backend.core.rag_query import RetrievalQueryService

    return RetrievalQueryService(
        embedding_client=embedding_client,
        vector_index=vector_index,
        store=relational_store,
        generation_client=generation_client,
        top_k=1,
    )


@pytest.fixture
def notes_service(relational_store, vector_index, pipeline, query_service):
    from backend.application.services import NotesService

    return NotesService(
        store=relational_store,
        vector_index=vector_index,
        pipeline=pipeline,
        query_service=query_service,
    )


@pytest.fixture
def owner_id():
    """Generate a test owner ID."""
    return f"user-{uuid.uuid4().hex[:8]}"
