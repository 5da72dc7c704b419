"""Persistence package.

Exports the generic repository implementation and the DI factory.
"""

from sqlcrud.infrastructure.persistence.repositories import (
    SqlCrudRepository,
    get_repository,
)

__all__ = [
    "SqlCrudRepository",
    "get_repository",
]
