"""
User session CRUD operations.

Dependencies: sqlalchemy, backend.boundary.db.models.user_session_model
System role: Session state persistence for session actors
"""

from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models.user_session_model import UserSessionModel


class UserSessionCRUD(BaseCRUD[UserSessionModel]):
    """CRUD operations for UserSessionModel, keyed by session_key."""

    def __init__(self) -> None:
        """Initialize UserSessionCRUD with UserSessionModel."""
        super().__init__(UserSessionModel, pk_name="session_key")

    async def put(
        self,
        session: AsyncSession,
        session_key: str,
        user_id: str,
        created_at: datetime,
    ) -> UserSessionModel:
        """
        Insert or overwrite the state stored under ``session_key``.

        Args:
            session: Async database session
            session_key: Token digest
            user_id: Authenticated user
            created_at: Save timestamp

        Returns:
            Stored UserSessionModel
        """
        existing = await self.get_by_id(session, session_key)
        if existing is None:
            return await self.create(
                session,
                session_key=session_key,
                user_id=user_id,
                created_at=created_at,
                version=1,
            )
        existing.user_id = user_id
        existing.created_at = created_at
        existing.version += 1
        await session.flush()
        return existing

    async def delete_if_version(
        self,
        session: AsyncSession,
        session_key: str,
        version: int,
    ) -> bool:
        """
        Delete the row only if it has not been saved again since it was read.

        Args:
            session: Async database session
            session_key: Token digest
            version: Version observed by the caller

        Returns:
            True if the row was deleted
        """
        stmt = delete(UserSessionModel).where(
            UserSessionModel.session_key == session_key,
            UserSessionModel.version == version,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


user_session_crud = UserSessionCRUD()
