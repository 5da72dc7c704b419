"""SQLAlchemy implementation of CrudRepository.

A concrete repository binds three things through its generic base and
nothing else:

    class SqlWidgetRepository(SqlCrudRepository[Widget, OrmWidget, int]):
        pass

Widget is the pydantic domain model, OrmWidget the declarative mapped class
whose table must have exactly one primary-key column, and int the key type.
An int key is treated as database generated (INSERT ... RETURNING); any other
key type is expected to be set on the entity by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from typing import Any, Generic, TypeVar, get_args, get_origin

from pydantic import BaseModel
from sqlalchemy import Column, ColumnElement, Table, delete, func, insert, select, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper, QueryableAttribute
from sqlalchemy.orm.exc import UnmappedColumnError

from sqlcrud.domain.exceptions import (
    CreateRecordError,
    DeleteRecordError,
    UpdateRecordError,
)
from sqlcrud.domain.repositories.base import CrudRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
OrmT = TypeVar("OrmT")
PkT = TypeVar("PkT")


class SqlCrudRepository(CrudRepository[ModelT, PkT], Generic[ModelT, OrmT, PkT]):
    """CRUD operations for one mapped table, executed on a caller-owned session.

    The repository never commits; transaction scope belongs to whoever owns
    the session (see sqlcrud.infrastructure.database.get_session).
    """

    def __init__(self, session: AsyncSession) -> None:
        model, orm_model, primary_key_type = self._resolve_type_arguments()

        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise TypeError(f"model: {model!r} must be a pydantic model")
        try:
            mapper = sa_inspect(orm_model)
        except NoInspectionAvailable as err:
            raise TypeError(f"orm model: {orm_model!r} is not a mapped class") from err
        if not isinstance(mapper, Mapper):
            raise TypeError(f"orm model: {orm_model!r} is not a mapped class")

        table = mapper.local_table
        if len(mapper.primary_key) != 1:
            raise ValueError(f"can't get table: {table.name} primary key")
        primary_key = mapper.get_property_by_column(mapper.primary_key[0]).key

        if primary_key not in model.model_fields:
            raise TypeError(
                f"model: {model.__name__} must be same type as table: {table.name} "
                f"(missing primary key field: {primary_key})"
            )

        self._session = session
        self._model: type[ModelT] = model
        self._orm_model = orm_model
        self._primary_key_type = primary_key_type
        self._mapper = mapper
        self._table: Table = table
        self._fields = frozenset(attr.key for attr in mapper.column_attrs)
        self._primary_key = primary_key
        self._primary_key_field = getattr(orm_model, primary_key)

    @classmethod
    def _resolve_type_arguments(cls) -> tuple[Any, Any, Any]:
        args = _bound_arguments(cls, {})
        if args is None or any(isinstance(arg, TypeVar) for arg in args):
            raise TypeError(
                f"{cls.__name__} must bind SqlCrudRepository[Model, OrmModel, PrimaryKey]"
            )
        return args

    @property
    def table(self) -> Table:
        return self._table

    @property
    def model(self) -> type[ModelT]:
        return self._model

    def _to_domain(self, row: Any) -> ModelT:
        return self._model.model_validate(row, from_attributes=True)

    def _values(self, entity: ModelT) -> dict[str, Any]:
        return {
            key: value for key, value in entity.model_dump().items() if key in self._fields
        }

    def _check_type(self, entity: Any) -> None:
        if type(entity) is not self._model:
            raise TypeError(
                f"entity type: {type(entity).__name__} must be same model: {self._model.__name__}"
            )

    def _field(self, field: Any) -> Any:
        """Resolve a mapped attribute, Column or attribute name to this table's attribute."""
        key = None
        if isinstance(field, str):
            key = field
        elif isinstance(field, QueryableAttribute):
            if field.class_ is self._orm_model:
                key = field.key
        elif isinstance(field, Column):
            if field.table is self._table:
                try:
                    key = self._mapper.get_property_by_column(field).key
                except UnmappedColumnError as err:
                    raise ValueError(
                        f"field: {field.key} not found in table: {self._table.name}"
                    ) from err
        if key not in self._fields:
            name = field if isinstance(field, str) else getattr(field, "key", field)
            raise ValueError(f"field: {name} not found in table: {self._table.name}")
        return getattr(self._orm_model, key)

    async def create(self, entity: ModelT) -> ModelT:
        self._check_type(entity)
        values = self._values(entity)

        if self._primary_key_type is int:
            if values.get(self._primary_key) is None:
                values.pop(self._primary_key, None)
            stmt = insert(self._orm_model).values(**values).returning(self._primary_key_field)
            try:
                result = await self._session.execute(stmt)
            except SQLAlchemyError as err:
                logger.warning("create %s record failed: %s", self._table.name, err)
                raise CreateRecordError(f"create {self._table.name} record failed") from err
            primary_key = result.scalar_one_or_none()
            if primary_key is None:
                logger.warning("create %s record returned no primary key", self._table.name)
                raise CreateRecordError(
                    f"create {self._table.name} record failed to get primary key"
                )
            logger.debug("created %s record %s", self._table.name, primary_key)
            return entity.model_copy(update={self._primary_key: primary_key})

        try:
            self._session.add(self._orm_model(**values))
            await self._session.flush()
        except SQLAlchemyError as err:
            logger.warning("create %s record failed: %s", self._table.name, err)
            raise CreateRecordError(f"create {self._table.name} record failed") from err
        logger.debug(
            "created %s record %s", self._table.name, values.get(self._primary_key)
        )
        return entity

    async def retrieve(self, id: PkT) -> ModelT | None:
        stmt = select(self._orm_model).where(self._primary_key_field == id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    async def retrieve_by(self, field: Any, value: Any) -> ModelT | None:
        column = self._field(field)
        stmt = select(self._orm_model).where(column == value)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    async def update(self, entity: ModelT, check_exist: bool = False) -> None:
        self._check_type(entity)
        primary_key = getattr(entity, self._primary_key)
        if check_exist and not await self._exists_by_id(primary_key):
            logger.warning("%s record %s not found to update", self._table.name, primary_key)
            raise UpdateRecordError(f"record: {self._table.name} not found to update")

        values = self._values(entity)
        values.pop(self._primary_key, None)
        if not values:
            return
        stmt = (
            update(self._orm_model)
            .where(self._primary_key_field == primary_key)
            .values(**values)
        )
        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as err:
            logger.warning("update %s record %s failed: %s", self._table.name, primary_key, err)
            raise UpdateRecordError(f"update {self._table.name} record failed") from err
        logger.debug("updated %s record %s", self._table.name, primary_key)

    async def delete(self, id: PkT, check_exist: bool = False) -> None:
        if check_exist and not await self._exists_by_id(id):
            logger.warning("%s record %s not found to delete", self._table.name, id)
            raise DeleteRecordError(f"record: {self._table.name} not found to delete")
        await self._delete_where(self._primary_key_field == id)

    async def delete_many(self, ids: Collection[PkT], check_exist: bool = False) -> None:
        ids = tuple(ids)
        condition = self._primary_key_field.in_(ids)
        if check_exist and not await self.exists([condition]):
            logger.warning("%s records (%d ids) not found to delete", self._table.name, len(ids))
            raise DeleteRecordError(f"{self._table.name} records not found to delete")
        await self._delete_where(condition)

    async def _delete_where(self, condition: ColumnElement[bool]) -> None:
        stmt = delete(self._orm_model).where(condition)
        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as err:
            logger.warning("delete %s records failed: %s", self._table.name, err)
            raise DeleteRecordError(f"delete {self._table.name} records failed") from err
        logger.debug("deleted %s records", self._table.name)

    async def _exists_by_id(self, id: PkT) -> bool:
        return await self.exists([self._primary_key_field == id])

    async def count(self, conditions: Iterable[ColumnElement[bool]] = ()) -> int:
        # Conditions are not checked against this table; they go to the query as given.
        stmt = select(func.count()).select_from(self._orm_model).where(*conditions)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def exists(self, conditions: Iterable[ColumnElement[bool]] = ()) -> bool:
        stmt = select(select(self._orm_model).where(*conditions).exists())
        result = await self._session.execute(stmt)
        return bool(result.scalar_one())

    async def list(self, conditions: Iterable[ColumnElement[bool]] = ()) -> list[ModelT]:
        stmt = select(self._orm_model).where(*conditions)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]


def _bound_arguments(klass: type, bindings: dict[Any, Any]) -> tuple[Any, ...] | None:
    """Walk generic bases up to SqlCrudRepository, substituting type variables on the way.

    ``bindings`` maps the type parameters of ``klass`` to the arguments a
    subclass supplied for them, so partially bound intermediates resolve.
    """
    for base in klass.__dict__.get("__orig_bases__", klass.__bases__):
        origin = get_origin(base) or base
        if not (isinstance(origin, type) and issubclass(origin, SqlCrudRepository)):
            continue
        args = tuple(bindings.get(arg, arg) for arg in get_args(base))
        if origin is SqlCrudRepository:
            return args
        parameters = getattr(origin, "__parameters__", ())
        found = _bound_arguments(origin, dict(zip(parameters, args)))
        if found is not None:
            return found
    return None
