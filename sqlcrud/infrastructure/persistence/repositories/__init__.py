"""Concrete SQLAlchemy repository implementations.

Exports the generic SqlCrudRepository and the get_repository() factory
function for wiring at the application boundary (dependency injection).
"""

from __future__ import annotations

from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from .base import SqlCrudRepository

RepositoryT = TypeVar("RepositoryT", bound=SqlCrudRepository)


def get_repository(repository_cls: type[RepositoryT], session: AsyncSession) -> RepositoryT:
    """Construct a repository bound to the given session.

    Intended for use inside a request-scoped dependency:

        async def handler(
            session: AsyncSession = Depends(get_session),
        ) -> ...:
            widgets = get_repository(SqlWidgetRepository, session)
            widget = await widgets.retrieve(widget_id)
    """
    return repository_cls(session)


__all__ = [
    "SqlCrudRepository",
    "get_repository",
]
