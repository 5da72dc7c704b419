"""Generic CRUD repository interface.

CrudRepository[T, PK] is the root abstraction for table-bound data access.
The concrete SQLAlchemy implementation lives in
sqlcrud/infrastructure/persistence/ and is bound to a caller-owned session.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / aiosqlite).
  - T is the domain model type (never an ORM row).  PK is the primary key
    type: int for auto-increment keys, UUID (or anything else) for keys
    supplied by the caller.
  - update() and delete() never complain about a missing row unless asked to
    with check_exist=True; callers that want to fail fast opt in.
  - Conditions are SQL expression objects built from the bound table's
    columns and are forwarded to the query builder as given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Table

T = TypeVar("T")
PK = TypeVar("PK")


class CrudRepository(ABC, Generic[T, PK]):
    """Abstract CRUD interface for the rows of a single table."""

    @property
    @abstractmethod
    def table(self) -> Table:
        """The table this repository is bound to."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Insert a new row.

        Returns a new entity carrying the generated key when PK is an
        auto-increment int, otherwise the entity that was passed in.
        Raises CreateRecordError if the insert fails.
        """

    @abstractmethod
    async def retrieve(self, id: PK) -> T | None:
        """Return the entity with the given primary key, or None if not found."""

    @abstractmethod
    async def retrieve_by(self, field: Any, value: Any) -> T | None:
        """Return the entity whose ``field`` equals ``value``, or None.

        Raises ValueError if ``field`` is not a column of this repository's table.
        """

    @abstractmethod
    async def update(self, entity: T, check_exist: bool = False) -> None:
        """Update the row identified by the entity's primary key.

        With check_exist=False an update matching no row is silently a no-op.
        With check_exist=True UpdateRecordError is raised first if the row is missing.
        """

    @abstractmethod
    async def delete(self, id: PK, check_exist: bool = False) -> None:
        """Delete the row with the given primary key.

        Same check_exist contract as update(); raises DeleteRecordError.
        """

    @abstractmethod
    async def delete_many(self, ids: Collection[PK], check_exist: bool = False) -> None:
        """Delete every row whose primary key is in ``ids``.

        With check_exist=True DeleteRecordError is raised when none of the ids exist.
        """

    @abstractmethod
    async def count(self, conditions: Iterable[ColumnElement[bool]] = ()) -> int:
        """Return the number of rows matching all conditions."""

    @abstractmethod
    async def exists(self, conditions: Iterable[ColumnElement[bool]] = ()) -> bool:
        """SELECT EXISTS (SELECT * FROM table WHERE conditions)."""

    @abstractmethod
    async def list(self, conditions: Iterable[ColumnElement[bool]] = ()) -> list[T]:
        """Return every entity matching all conditions (all rows when empty)."""
