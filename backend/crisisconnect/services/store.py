"""Entity store over the async SQLAlchemy session."""

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.database import Base
from crisisconnect.errors import NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class EntityStore:
    """
    Create, fetch and conditionally update entities.

    compare_and_set is the only write path for state-dependent transitions:
    it issues a single UPDATE ... WHERE carrying the precondition, so two
    racing callers cannot both observe success.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def add(self, entity: Base) -> None:
        self.db.add(entity)

    async def get(self, model: type[ModelT], entity_id: str) -> ModelT | None:
        """Fetch by id, always reading current row state."""
        return await self.db.get(model, entity_id, populate_existing=True)

    async def get_or_raise(
        self, model: type[ModelT], entity_id: str, label: str | None = None
    ) -> ModelT:
        entity = await self.get(model, entity_id)
        if entity is None:
            raise NotFoundError(label or model.__name__, entity_id)
        return entity

    async def find(
        self,
        model: type[ModelT],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[ModelT]:
        """Fetch all entities matching every criterion."""
        query = select(model).where(*criteria).order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def compare_and_set(
        self,
        model: type[ModelT],
        entity_id: str,
        expected: Sequence[ColumnElement[bool]],
        values: dict[str, Any],
    ) -> bool:
        """
        Atomically apply ``values`` if the row still matches ``expected``.

        Returns True when exactly one row was updated. Loaded instances are
        not synchronized; call reload() afterwards.
        """
        stmt = (
            update(model)
            .where(model.id == entity_id, *expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        won = result.rowcount == 1
        if not won:
            logger.debug(f"Conditional update on {model.__name__} {entity_id} matched no row")
        return won

    async def delete(self, model: type[ModelT], entity_id: str) -> bool:
        result = await self.db.execute(
            delete(model)
            .where(model.id == entity_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def commit(self) -> None:
        await self.db.commit()

    async def reload(self, model: type[ModelT], entity_id: str) -> ModelT:
        """Re-read a committed entity with its referenced users populated."""
        return await self.get_or_raise(model, entity_id)
