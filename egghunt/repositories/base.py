from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    Thin async CRUD gateway around one model.

    Writes commit immediately; there is no unit of work spanning calls.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    def _base_select(self) -> Select[Any]:
        return select(self.model)

    async def _scalars(self, stmt: Select[Any]) -> list[ModelT]:
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_by_id(self, entity_id: Any) -> ModelT | None:
        return await self.session.get(self.model, entity_id)

    async def get_all(self) -> list[ModelT]:
        return await self._scalars(self._base_select().order_by(self.model.id))

    async def get_active(self) -> list[ModelT]:
        stmt = self._base_select().where(self.model.is_active.is_(True)).order_by(self.model.id)
        return await self._scalars(stmt)

    async def count(self) -> int:
        return int((await self.session.execute(select(func.count()).select_from(self.model))).scalar_one())

    async def exists(self, entity_id: Any) -> bool:
        stmt = select(self.model.id).where(self.model.id == entity_id)
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def add(self, obj: ModelT) -> ModelT:
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def update(self, obj: ModelT) -> ModelT:
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def delete(self, obj: ModelT) -> None:
        await self.session.delete(obj)
        await self.session.commit()

    async def save(self) -> None:
        await self.session.commit()

    async def many_by_ids(self, ids: Sequence[Any]) -> list[ModelT]:
        if not ids:
            return []
        return await self._scalars(self._base_select().where(self.model.id.in_(list(ids))))
