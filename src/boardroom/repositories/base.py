"""
Base repository class with common CRUD operations.

Repositories only ``flush``; the unit of work (``VotingService`` or the
request handler) decides when to commit or roll back, so a vote upsert,
its tally recompute and the completion outbox row land in one transaction.
"""

from abc import ABC
from typing import Any, Generic, Protocol, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.app_logger import get_logger

logger = get_logger("repositories")


class HasId(Protocol):
    id: Any


ModelType = TypeVar("ModelType", bound=HasId)


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.

    Implements the Repository pattern with async SQLAlchemy operations
    and logging.
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelType]) -> None:
        """
        Initialize repository with database session and model class.

        Args:
            session: Async SQLAlchemy session
            model_class: The SQLAlchemy model class for this repository
        """
        self.session = session
        self.model_class = model_class
        self.model_name = model_class.__name__

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new model instance and flush it so generated ids exist.

        Args:
            **kwargs: Model attributes

        Returns:
            Created model instance
        """
        try:
            instance = self.model_class(**kwargs)
            self.session.add(instance)
            await self.session.flush()

            logger.debug(f"Created {self.model_name}: {instance.id}")
            return instance

        except Exception as e:
            logger.error(f"Failed to create {self.model_name}: {e}")
            raise

    async def get_by_id(self, id: UUID, *, for_update: bool = False) -> ModelType | None:
        """
        Get model instance by ID.

        Args:
            id: Model UUID
            for_update: lock the row until the transaction ends (ignored by SQLite)

        Returns:
            Model instance or None if not found
        """
        stmt = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        if instance is None:
            logger.debug(f"{self.model_name} not found: {id}")
        return instance

    async def get_all(self, *criteria: Any, order_by: Any = None) -> list[ModelType]:
        stmt = select(self.model_class).execution_options(populate_existing=True)
        if criteria:
            stmt = stmt.where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        logger.debug(f"Retrieved {len(instances)} {self.model_name} instances")
        return instances

    async def update(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """
        Apply attribute changes to a loaded instance and flush.

        Args:
            instance: persistent model instance
            **kwargs: Attributes to update

        Returns:
            The same instance
        """
        try:
            for key, value in kwargs.items():
                setattr(instance, key, value)
            await self.session.flush()

            logger.debug(f"Updated {self.model_name}: {instance.id}")
            return instance

        except Exception as e:
            logger.error(f"Failed to update {self.model_name} {instance.id}: {e}")
            raise

    async def delete(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self.session.flush()
        logger.debug(f"Deleted {self.model_name}: {instance.id}")

    async def count(self, *criteria: Any) -> int:
        """
        Count model instances matching optional criteria.

        Returns:
            Total count of instances
        """
        stmt = select(func.count()).select_from(self.model_class)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)
