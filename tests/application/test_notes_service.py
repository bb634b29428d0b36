"""
Test suite for NotesService.

Tests owner-scoped reads, listing of un-indexed notes, delete coupling
between the two stores, the reconcile sweep and re-indexing.

System role: Verification of note management use cases
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from backend.boundary.vdb.vector_schemas import VectorRecord
from backend.core.exceptions import (
    EmbeddingError,
    NoteNotFoundError,
    TerminalError,
    VectorStoreError,
)
from backend.core.ingestion import IngestionPipeline
from backend.models.note import IngestionStatus


class TestNotesServiceReads:
    """Test suite for get_note() and list_notes()."""

    @pytest.mark.asyncio
    async def test_get_note_should_hide_foreign_notes(self, notes_service, owner_id) -> None:
        """Test another owner's note reads as not found."""
        # Arrange
        result = await notes_service.ingest_note("mine", owner_id)

        # Act & Assert
        assert (await notes_service.get_note(result.note_id, owner_id)).text == "mine"
        with pytest.raises(NoteNotFoundError):
            await notes_service.get_note(result.note_id, "someone-else")

    @pytest.mark.asyncio
    async def test_list_notes_should_include_unindexed_notes(
        self, notes_service, relational_store, vector_index, ingestion_settings, owner_id
    ) -> None:
        """Test a note whose ingestion failed still appears in the owner's list."""
        # Arrange
        await notes_service.ingest_note("searchable", owner_id)
        broken = AsyncMock()
        broken.embed = AsyncMock(side_effect=EmbeddingError("down"))
        failing = IngestionPipeline(relational_store, broken, vector_index, ingestion_settings)
        with pytest.raises(TerminalError):
            await failing.ingest("not searchable", owner_id)

        # Act
        notes = await notes_service.list_notes(owner_id)

        # Assert
        statuses = {n.text: n.ingestion_status for n in notes}
        assert statuses == {
            "searchable": IngestionStatus.INDEXED,
            "not searchable": IngestionStatus.FAILED,
        }


class TestNotesServiceDelete:
    """Test suite for delete_note()."""

    @pytest.mark.asyncio
    async def test_delete_should_remove_row_and_vector(
        self, notes_service, relational_store, vector_index, owner_id
    ) -> None:
        """Test a deleted note is neither readable nor retrievable."""
        # Arrange
        result = await notes_service.ingest_note("delete me", owner_id)

        # Act
        await notes_service.delete_note(result.note_id, owner_id)

        # Assert
        assert await relational_store.get_note_by_id(result.note_id) is None
        assert result.note_id not in await vector_index.list_ids()

    @pytest.mark.asyncio
    async def test_delete_should_reject_foreign_owner(self, notes_service, vector_index, owner_id) -> None:
        """Test a note cannot be deleted by someone else and stays indexed."""
        # Arrange
        result = await notes_service.ingest_note("keep me", owner_id)

        # Act & Assert
        with pytest.raises(NoteNotFoundError):
            await notes_service.delete_note(result.note_id, "intruder")
        assert result.note_id in await vector_index.list_ids()

    @pytest.mark.asyncio
    async def test_delete_should_remove_vector_before_row(
        self, notes_service, relational_store, vector_index, owner_id
    ) -> None:
        """Test a failing row delete leaves a row without a vector, never the reverse."""
        # Arrange
        result = await notes_service.ingest_note("half deleted", owner_id)
        relational_store.delete_note_by_id = AsyncMock(side_effect=RuntimeError("db down"))

        # Act
        with pytest.raises(RuntimeError):
            await notes_service.delete_note(result.note_id, owner_id)

        # Assert
        assert result.note_id not in await vector_index.list_ids()
        assert await relational_store.get_note_by_id(result.note_id) is not None


class TestNotesServiceReconcile:
    """Test suite for reconcile()."""

    @pytest.mark.asyncio
    async def test_reconcile_should_remove_orphans_and_report_gaps(
        self, notes_service, relational_store, vector_index, embedding_client, owner_id
    ) -> None:
        """Test orphan vectors are deleted and unsearchable notes are reported without repair."""
        # Arrange
        indexed = await notes_service.ingest_note("fine", owner_id)
        lost_vector = await notes_service.ingest_note("vector lost", owner_id)
        await vector_index.delete_by_ids([lost_vector.note_id])
        pending = await relational_store.insert_note("never ingested", owner_id)
        orphan = uuid.uuid4()
        await vector_index.upsert([
            VectorRecord(id=orphan, vector=await embedding_client.embed("ghost"), owner_id=owner_id)
        ])

        # Act
        report = await notes_service.reconcile(reindex=False)

        # Assert
        assert report.orphan_vectors_removed == [orphan]
        assert report.unindexed_note_ids == [pending]
        assert report.missing_vector_note_ids == [lost_vector.note_id]
        assert report.reindexed_note_ids == []
        assert await vector_index.list_ids() == {indexed.note_id}

    @pytest.mark.asyncio
    async def test_reconcile_should_reindex_unsearchable_notes(
        self, notes_service, relational_store, vector_index, embedding_client, owner_id
    ) -> None:
        """Test the default sweep makes every stored note searchable again."""
        # Arrange
        indexed = await notes_service.ingest_note("fine", owner_id)
        lost_vector = await notes_service.ingest_note("vector lost", owner_id)
        await vector_index.delete_by_ids([lost_vector.note_id])
        pending = await relational_store.insert_note("never ingested", owner_id)

        # Act
        report = await notes_service.reconcile()

        # Assert
        assert set(report.reindexed_note_ids) == {pending, lost_vector.note_id}
        assert report.reindex_failed_note_ids == []
        assert await vector_index.list_ids() == {indexed.note_id, lost_vector.note_id, pending}
        note = await relational_store.get_note_by_id(pending)
        assert note.ingestion_status == IngestionStatus.INDEXED
        vector = await embedding_client.embed("never ingested")
        matches = await vector_index.query_top_k(vector, 1, owner_id=owner_id)
        assert [m.id for m in matches] == [pending]

    @pytest.mark.asyncio
    async def test_reconcile_should_report_notes_it_could_not_reindex(
        self, notes_service, relational_store, vector_index, owner_id
    ) -> None:
        """Test a note whose re-index gives up is reported and stays FAILED."""
        # Arrange
        pending = await relational_store.insert_note("stuck", owner_id)
        vector_index.upsert = AsyncMock(side_effect=VectorStoreError("index down"))

        # Act
        report = await notes_service.reconcile()

        # Assert
        assert report.unindexed_note_ids == [pending]
        assert report.reindexed_note_ids == []
        assert report.reindex_failed_note_ids == [pending]
        note = await relational_store.get_note_by_id(pending)
        assert note.ingestion_status == IngestionStatus.FAILED

    @pytest.mark.asyncio
    async def test_reconcile_should_recheck_index_before_reporting_missing_vectors(
        self, notes_service, vector_index, owner_id
    ) -> None:
        """Test a note indexed between the two index listings is not reported as missing."""
        # Arrange
        result = await notes_service.ingest_note("indexed meanwhile", owner_id)
        vector_index.list_ids = AsyncMock(side_effect=[set(), {result.note_id}])

        # Act
        report = await notes_service.reconcile(reindex=False)

        # Assert
        assert report.orphan_vectors_removed == []
        assert report.missing_vector_note_ids == []
        assert vector_index.list_ids.await_count == 2

    @pytest.mark.asyncio
    async def test_reconcile_should_be_noop_when_consistent(self, notes_service, owner_id) -> None:
        """Test a consistent system produces an empty report."""
        # Arrange
        await notes_service.ingest_note("fine", owner_id)

        # Act
        report = await notes_service.reconcile()

        # Assert
        assert report.orphan_vectors_removed == []
        assert report.unindexed_note_ids == []
        assert report.missing_vector_note_ids == []
        assert report.reindexed_note_ids == []


class TestNotesServiceReindex:
    """Test suite for reindex_note()."""

    @pytest.mark.asyncio
    async def test_reindex_note_should_restore_search(
        self, notes_service, vector_index, embedding_client, owner_id
    ) -> None:
        """Test re-indexing a note whose vector was lost makes it retrievable again."""
        # Arrange
        result = await notes_service.ingest_note("find me again", owner_id)
        await vector_index.delete_by_ids([result.note_id])

        # Act
        await notes_service.reindex_note(result.note_id, owner_id)

        # Assert
        vector = await embedding_client.embed("find me again")
        matches = await vector_index.query_top_k(vector, 1, owner_id=owner_id)
        assert [m.id for m in matches] == [result.note_id]

    @pytest.mark.asyncio
    async def test_reindex_note_should_reject_foreign_owner(
        self, notes_service, vector_index, owner_id
    ) -> None:
        """Test another owner cannot re-index the note."""
        # Arrange
        result = await notes_service.ingest_note("mine", owner_id)
        await vector_index.delete_by_ids([result.note_id])

        # Act & Assert
        with pytest.raises(NoteNotFoundError):
            await notes_service.reindex_note(result.note_id, "someone-else")
        assert await vector_index.contains(result.note_id) is False
