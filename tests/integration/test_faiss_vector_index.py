"""
Test suite for FAISSVectorIndex.

Tests upsert/replace, delete, membership, owner-filtered top-K queries,
dimension checks and on-disk persistence using deterministic fake embeddings.

System role: Verification of the derived note vector index
"""

import uuid
import warnings

import pytest

from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.boundary.vdb.vector_schemas import VectorRecord
from backend.core.exceptions import ValidationError, VectorStoreError


@pytest.fixture
def embed(embeddings):
    """Embed text synchronously with the fake model."""
    return embeddings.embed_query


class TestFAISSVectorIndexWrites:
    """Test suite for upsert() and delete_by_ids()."""

    @pytest.mark.asyncio
    async def test_upsert_should_store_vector_under_note_id(self, vector_index, embed) -> None:
        """Test the record id becomes the stored id."""
        # Arrange
        note_id = uuid.uuid4()

        # Act
        await vector_index.upsert([VectorRecord(id=note_id, vector=embed("hello"), owner_id="alice")])

        # Assert
        assert await vector_index.list_ids() == {note_id}

    @pytest.mark.asyncio
    async def test_upsert_should_replace_existing_entry(self, vector_index, embed) -> None:
        """Test writing the same id twice keeps one entry with the new vector."""
        # Arrange
        note_id = uuid.uuid4()
        await vector_index.upsert([VectorRecord(id=note_id, vector=embed("old"), owner_id="alice")])

        # Act
        await vector_index.upsert([VectorRecord(id=note_id, vector=embed("new"), owner_id="alice")])

        # Assert
        assert await vector_index.list_ids() == {note_id}
        matches = await vector_index.query_top_k(embed("new"), 1)
        assert matches[0].id == note_id
        assert matches[0].score == pytest.approx(1.0, abs=1e-4)

    @pytest.mark.asyncio
    async def test_upsert_should_reject_wrong_dimension(self, vector_index) -> None:
        """Test a vector of the wrong length is refused before touching FAISS."""
        record = VectorRecord(id=uuid.uuid4(), vector=[0.1] * (vector_index.dimension + 1), owner_id="alice")

        with pytest.raises(ValidationError):
            await vector_index.upsert([record])

    @pytest.mark.asyncio
    async def test_delete_by_ids_should_ignore_unknown_ids(self, vector_index, embed) -> None:
        """Test deleting known and unknown ids removes only the known one."""
        # Arrange
        note_id = uuid.uuid4()
        await vector_index.upsert([VectorRecord(id=note_id, vector=embed("x"), owner_id="alice")])

        # Act
        await vector_index.delete_by_ids([note_id, uuid.uuid4()])
        await vector_index.delete_by_ids([note_id])

        # Assert
        assert await vector_index.list_ids() == set()


    @pytest.mark.asyncio
    async def test_contains_should_follow_upsert_and_delete(self, vector_index, embed) -> None:
        """Test contains() reports exactly the ids currently stored."""
        # Arrange
        note_id = uuid.uuid4()
        await vector_index.upsert([VectorRecord(id=note_id, vector=embed("here"), owner_id="alice")])

        # Act
        before = await vector_index.contains(note_id)
        await vector_index.delete_by_ids([note_id])
        after = await vector_index.contains(note_id)

        # Assert
        assert before is True
        assert after is False
        assert await vector_index.contains(uuid.uuid4()) is False


class TestFAISSVectorIndexQuery:
    """Test suite for query_top_k()."""

    @pytest.mark.asyncio
    async def test_query_should_return_empty_on_empty_index(self, vector_index, embed) -> None:
        """Test querying an empty index is not an error."""
        assert await vector_index.query_top_k(embed("anything"), 3) == []

    @pytest.mark.asyncio
    async def test_query_should_order_by_similarity(self, vector_index, embed) -> None:
        """Test the exact vector ranks first and scores are descending."""
        # Arrange
        ids = {text: uuid.uuid4() for text in ["alpha", "beta", "gamma"]}
        await vector_index.upsert(
            [VectorRecord(id=id_, vector=embed(text), owner_id="alice") for text, id_ in ids.items()]
        )

        # Act
        matches = await vector_index.query_top_k(embed("beta"), 3)

        # Assert
        assert matches[0].id == ids["beta"]
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_query_should_filter_by_owner(self, vector_index, embed) -> None:
        """Test owner filtering never returns another owner's entry."""
        # Arrange
        alice_note = uuid.uuid4()
        bob_note = uuid.uuid4()
        await vector_index.upsert([
            VectorRecord(id=alice_note, vector=embed("shared words"), owner_id="alice"),
            VectorRecord(id=bob_note, vector=embed("other words"), owner_id="bob"),
        ])

        # Act
        matches = await vector_index.query_top_k(embed("shared words"), 5, owner_id="bob")

        # Assert
        assert [m.id for m in matches] == [bob_note]

    @pytest.mark.asyncio
    async def test_failures_should_become_vector_store_errors(self, vector_index, embed) -> None:
        """Test unexpected FAISS errors are wrapped as VectorStoreError."""
        # Arrange
        await vector_index.upsert([VectorRecord(id=uuid.uuid4(), vector=embed("x"), owner_id="alice")])

        def explode(*args, **kwargs):
            raise RuntimeError("faiss crashed")

        vector_index._vector_store.similarity_search_with_score_by_vector = explode

        # Act & Assert
        with pytest.raises(VectorStoreError):
            await vector_index.query_top_k(embed("x"), 1)


class TestFAISSVectorIndexPersistence:
    """Test suite for on-disk persistence."""

    @pytest.mark.asyncio
    async def test_index_should_reload_from_directory(self, embeddings, embed, tmp_path) -> None:
        """Test a new instance over the same directory sees earlier writes."""
        # Arrange
        note_id = uuid.uuid4()
        first = FAISSVectorIndex(embeddings, dimension=16, persist_directory=str(tmp_path))
        await first.upsert([VectorRecord(id=note_id, vector=embed("persist me"), owner_id="alice")])

        # Act
        second = FAISSVectorIndex(embeddings, dimension=16, persist_directory=str(tmp_path))

        # Assert
        assert await second.list_ids() == {note_id}
        matches = await second.query_top_k(embed("persist me"), 1, owner_id="alice")
        assert [m.id for m in matches] == [note_id]

    @pytest.mark.asyncio
    async def test_opening_index_should_not_warn_about_normalisation(
        self, embeddings, embed, tmp_path
    ) -> None:
        """Test creating and reloading a cosine index emits no normalize_L2 warning."""
        # Arrange
        first = FAISSVectorIndex(embeddings, dimension=16, persist_directory=str(tmp_path))
        await first.upsert([VectorRecord(id=uuid.uuid4(), vector=embed("quiet"), owner_id="alice")])

        # Act
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            FAISSVectorIndex(embeddings, dimension=16)
            FAISSVectorIndex(embeddings, dimension=16, persist_directory=str(tmp_path))

        # Assert
        assert not [w for w in caught if "Normalizing L2" in str(w.message)]
