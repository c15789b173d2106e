"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrms_core.config import get_settings
from hrms_core.database import init_db
from hrms_core.repositories import PageRequest


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for the configured database."""
    _, factory = init_db()
    return factory


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_db_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """One session per request; committed on success, rolled back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_username(
    x_username: Annotated[str | None, Header()] = None
) -> str:
    """Extract the acting username from header."""
    if not x_username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Username header is required",
        )
    return x_username


def get_page_request(
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: str | None = None,
    descending: bool = False,
) -> PageRequest:
    """Paging parameters, capped at the configured maximum page size."""
    settings = get_settings()
    size = min(page_size or settings.default_page_size, settings.max_page_size)
    return PageRequest(page=page, page_size=size, sort_by=sort_by, descending=descending)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentUsername = Annotated[str, Depends(get_current_username)]
Paging = Annotated[PageRequest, Depends(get_page_request)]
