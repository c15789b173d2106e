"""Generic async repository and paging types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.models import Base

ModelT = TypeVar("ModelT", bound=Base)


@dataclass(frozen=True)
class PageRequest:
    """1-based page request with an optional sort column."""

    page: int = 1
    page_size: int = 20
    sort_by: str | None = None
    descending: bool = False

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[ModelT]):
    """One page of results plus the total row count."""

    items: list[ModelT] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class Repository(Generic[ModelT]):
    """Data access for a single mapped entity.

    Subclasses set ``model`` and add named finders. Apart from ``add``,
    ``delete`` and explicitly named bulk methods nothing here writes.
    """

    model: ClassVar[type[Any]]
    default_order: ClassVar[str | None] = None

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, entity_id: Any) -> ModelT | None:
        return await self.session.get(self.model, entity_id)

    async def add(self, entity: ModelT) -> ModelT:
        """Stage an entity and flush so generated values are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def find(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
    ) -> list[ModelT]:
        query = self._apply_order(select(self.model).where(*criteria), order_by)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_one(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        result = await self.session.execute(select(self.model).where(*criteria).limit(1))
        return result.scalar_one_or_none()

    async def find_all(self) -> list[ModelT]:
        return await self.find()

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        query = select(func.count()).select_from(self.model).where(*criteria)
        return await self.session.scalar(query) or 0

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        query = select(self.model).where(*criteria).limit(1)
        result = await self.session.execute(select(query.exists()))
        return bool(result.scalar())

    async def paginate(
        self,
        *criteria: ColumnElement[bool],
        page_request: PageRequest,
    ) -> Page[ModelT]:
        """Run a filtered query one page at a time."""
        query = select(self.model).where(*criteria)
        return await self.paginate_query(query, page_request)

    async def paginate_query(self, query: Select[Any], page_request: PageRequest) -> Page[ModelT]:
        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        if page_request.sort_by:
            column = self._column(page_request.sort_by)
            query = query.order_by(column.desc() if page_request.descending else column.asc())
        else:
            query = self._apply_order(query, None)
        query = query.offset(page_request.offset).limit(page_request.page_size)

        result = await self.session.execute(query)
        return Page(
            items=list(result.scalars().all()),
            total=total,
            page=page_request.page,
            page_size=page_request.page_size,
        )

    def _column(self, name: str) -> Any:
        if name not in self.model.__table__.columns:
            raise ValueError(f"Cannot sort {self.model.__name__} by unknown field '{name}'")
        return getattr(self.model, name)

    def _apply_order(self, query: Select[Any], order_by: Sequence[Any] | None) -> Select[Any]:
        if order_by:
            return query.order_by(*order_by)
        if self.default_order:
            return query.order_by(self._column(self.default_order))
        return query
