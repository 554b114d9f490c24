"""
Base repository pattern for database operations.
"""

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing CRUD operations.

    Repositories never commit: the caller's session scope decides when a
    unit of work is committed or rolled back.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def create(self, **kwargs) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Model fields

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        logger.debug(f"Created {self.model.__name__}: {instance.id}")
        return instance

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get record by ID.

        Args:
            id: Record ID

        Returns:
            Model instance or None
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def update_where(self, id: str, *conditions: Any, **values) -> int:
        """
        Update a record only if extra conditions hold (compare-and-swap).

        Args:
            id: Record ID
            *conditions: Additional WHERE clauses
            **values: Fields to update

        Returns:
            Number of rows updated (0 or 1)
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        result = await self.session.execute(stmt)
        await self.session.flush()

        if result.rowcount:
            logger.debug(f"Updated {self.model.__name__}: {id}")

        return result.rowcount

    async def refresh_by_id(self, id: str) -> Optional[ModelType]:
        """Re-read a record, bypassing instances already loaded in the session."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

