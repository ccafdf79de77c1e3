import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")


@asynccontextmanager
async def session_scope(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Unit of work: commits on success, rolls back and raises PersistenceFailure on database errors."""
    session = session_factory()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Database error, transaction rolled back: {str(e)}", exc_info=True)
        raise PersistenceFailure(str(e)) from e
    except BaseException:
        await session.rollback()
        raise
    finally:
        await session.close()


class BaseRepository(Generic[ModelType]):
    model: type[ModelType] | None = None

    def __init__(self, session: AsyncSession):
        self.session = session

    def _ensure_model(self) -> type[ModelType]:
        if self.model is None:
            raise RuntimeError("Model not set. Subclasses must define the 'model' attribute.")
        return self.model

    def _build_query(self, filters: dict[str, Any] | None = None):
        model = self._ensure_model()
        query = select(model)

        if filters:
            for key, value in filters.items():
                if hasattr(model, key):
                    query = query.where(getattr(model, key) == value)

        return query

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        return await self.session.get(self._ensure_model(), entity_id)

    async def get_all(
        self, skip: int = 0, limit: int = 100, filters: dict[str, Any] | None = None
    ) -> list[ModelType]:
        result = await self.session.execute(self._build_query(filters).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def create(self, entity: ModelType) -> ModelType:
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, instance: ModelType, data: dict[str, Any]) -> ModelType:
        for key, value in data.items():
            if not hasattr(instance, key):
                raise AttributeError(f"{type(instance).__name__} has no attribute '{key}'")
            setattr(instance, key, value)

        await self.session.flush()
        return instance

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        query = self._build_query(filters).subquery()
        result = await self.session.execute(select(func.count()).select_from(query))
        return int(result.scalar_one())
