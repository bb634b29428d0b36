"""
Index reconciler.

Consistency sweep between the note table (source of truth) and the derived
vector index. Removes vectors whose note row no longer exists and re-indexes
notes that are not searchable: notes left PENDING or FAILED by ingestion,
and INDEXED notes whose vector is gone (an in-memory index after a restart).

Dependencies: backend.boundary.db, backend.boundary.vdb, backend.core.ingestion
System role: Repair of the two-store inconsistency window
"""

import logging

from backend.boundary.db.relational_store import RelationalStore
from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.core.exceptions import NoteNotFoundError, TerminalError
from backend.core.ingestion import IngestionPipeline
from backend.models.ingestion import ReconcileReport

logger = logging.getLogger(__name__)


class IndexReconciler:
    """Sweeps the vector index against the note table."""

    def __init__(
        self,
        store: RelationalStore,
        vector_index: FAISSVectorIndex,
        pipeline: IngestionPipeline,
    ) -> None:
        self._store = store
        self._vector_index = vector_index
        self._pipeline = pipeline

    async def reconcile(self, reindex: bool = True) -> ReconcileReport:
        """
        Run one sweep.

        Args:
            reindex: Re-index the unsearchable notes found; when False they are only reported

        Returns:
            ReconcileReport: What was removed, what was found unsearchable, and what was repaired
        """
        vector_ids = await self._vector_index.list_ids()
        note_ids = await self._store.list_note_ids()

        # Vectors are listed first; a vector is written only after its row exists
        orphans = sorted(vector_ids - note_ids)
        if orphans:
            await self._vector_index.delete_by_ids(orphans)

        unindexed = await self._store.list_unindexed()
        unindexed_ids = {note.id for note in unindexed}
        # Re-read: a run may have upserted and marked its note INDEXED since the first listing
        current_vector_ids = await self._vector_index.list_ids()
        missing_vector = sorted(note_ids - unindexed_ids - current_vector_ids)

        reindexed = []
        reindex_failed = []
        if reindex:
            for note_id in sorted(unindexed_ids) + missing_vector:
                try:
                    await self._pipeline.reindex(note_id)
                except NoteNotFoundError:
                    continue
                except TerminalError as e:
                    logger.error(
                        f"{__name__}:reconcile - Re-index failed at {e.step}",
                        extra={"note_id": str(note_id)},
                    )
                    reindex_failed.append(note_id)
                    continue
                reindexed.append(note_id)

        report = ReconcileReport(
            orphan_vectors_removed=orphans,
            unindexed_note_ids=sorted(unindexed_ids),
            missing_vector_note_ids=missing_vector,
            reindexed_note_ids=reindexed,
            reindex_failed_note_ids=reindex_failed,
        )
        logger.info(
            f"{__name__}:reconcile - Sweep complete",
            extra={
                "orphan_vectors_removed": len(orphans),
                "unindexed": len(unindexed_ids),
                "missing_vector": len(missing_vector),
                "reindexed": len(reindexed),
                "reindex_failed": len(reindex_failed),
            },
        )
        return report
