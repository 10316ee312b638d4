import asyncio
import logging
from typing import Any, Awaitable, Callable, ClassVar, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from roybot.db.base import utcnow
from roybot.db.exceptions import DatabaseError, InvalidFieldError, RepositoryError
from roybot.db.result import Result
from roybot.db.session import ConnectionManager

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)
T = TypeVar("T")

Fields = Union[Mapping[str, Any], BaseModel]


class Repository(Generic[RecordT]):
    """
    Create/read/update/delete for one table.

    Subclasses only declare the table and the three schemas that describe it:

    - `fields_schema`: what create() accepts (id, created_at and the parent
      column are never accepted from callers)
    - `changes_schema`: the whitelist of columns update() may touch
    - `record_schema`: what reads return

    Every call returns a Result. Query failures come back as DatabaseError,
    pool/network failures as DatabaseConnectionError, rejected input as
    InvalidFieldError; nothing is raised to the caller.
    """

    entity: ClassVar[str]
    table: ClassVar[Table]
    fields_schema: ClassVar[Type[BaseModel]]
    changes_schema: ClassVar[Type[BaseModel]]
    record_schema: ClassVar[Type[BaseModel]]
    parent_column: ClassVar[Optional[str]] = None

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    @property
    def updatable_columns(self) -> tuple:
        return tuple(self.changes_schema.model_fields)

    def _as_mapping(self, fields: Fields) -> Mapping[str, Any]:
        if isinstance(fields, BaseModel):
            return fields.model_dump(exclude_unset=True)
        return fields

    def _to_record(self, row: Mapping[str, Any]) -> RecordT:
        return self.record_schema.model_validate(dict(row))

    async def _run(self, operation: str, work: Callable[[AsyncConnection], Awaitable[T]]) -> Result[T]:
        try:
            async with self.manager.connection() as conn:
                value = await asyncio.wait_for(work(conn), timeout=self.manager.query_timeout)
        except RepositoryError as e:
            logger.error(f"Error during {operation}: {e}")
            return Result.fail(e)
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} timed out after {self.manager.query_timeout}s")
            return Result.fail(DatabaseError(f"Timed out during {operation}", cause=e))
        except SQLAlchemyError as e:
            logger.error(f"Error during {operation}: {e}")
            return Result.fail(DatabaseError(f"Database error during {operation}", cause=e))
        return Result.ok(value)

    async def create(self, fields: Fields, parent_id: Optional[int] = None) -> Result[int]:
        """Insert a row; the store assigns the id and created_at is stamped now."""
        try:
            values = self.fields_schema.model_validate(self._as_mapping(fields)).model_dump()
        except ValidationError as e:
            error = InvalidFieldError.from_validation(self.entity, e)
            logger.warning(f"Rejected {self.entity} create: {error}")
            return Result.fail(error)

        if self.parent_column is not None:
            if parent_id is None:
                return Result.fail(InvalidFieldError(
                    f"{self.parent_column} is required to create a {self.entity}",
                    fields=(self.parent_column,),
                ))
            values[self.parent_column] = parent_id
        values["created_at"] = utcnow()

        async def work(conn: AsyncConnection) -> int:
            result = await conn.execute(insert(self.table).values(**values))
            await conn.commit()
            return result.inserted_primary_key[0]

        result = await self._run(f"create {self.entity}", work)
        if result.success:
            logger.info(f"Created {self.entity} {result.value}")
        return result

    async def get_by_id(self, entity_id: int) -> Result[Optional[RecordT]]:
        """None as the value means no such row."""
        return await self.find_one(self.table.c.id == entity_id, f"fetch {self.entity}")

    async def find_one(self, condition, operation: str) -> Result[Optional[RecordT]]:
        async def work(conn: AsyncConnection) -> Optional[RecordT]:
            row = (await conn.execute(select(self.table).where(condition))).mappings().first()
            return self._to_record(row) if row is not None else None

        return await self._run(operation, work)

    async def list_by_parent(self, parent_id: int) -> Result[List[RecordT]]:
        """Children of one parent, newest first; equal timestamps fall back to newest id first."""
        if self.parent_column is None:
            raise TypeError(f"{self.entity} has no parent")
        parent = self.table.c[self.parent_column]

        async def work(conn: AsyncConnection) -> List[RecordT]:
            stmt = (
                select(self.table)
                .where(parent == parent_id)
                .order_by(self.table.c.created_at.desc(), self.table.c.id.desc())
            )
            rows = (await conn.execute(stmt)).mappings().all()
            return [self._to_record(row) for row in rows]

        return await self._run(f"list {self.entity} for {self.parent_column}={parent_id}", work)

    async def update(self, entity_id: int, fields: Fields) -> Result[bool]:
        """Apply whitelisted changes. False when no row has this id."""
        try:
            changes = self.changes_schema.model_validate(self._as_mapping(fields)).model_dump(exclude_unset=True)
        except ValidationError as e:
            error = InvalidFieldError.from_validation(self.entity, e)
            logger.warning(f"Rejected {self.entity} update: {error}")
            return Result.fail(error)
        if not changes:
            return Result.fail(InvalidFieldError(
                f"No updatable {self.entity} fields given; allowed: {', '.join(self.updatable_columns)}"
            ))

        async def work(conn: AsyncConnection) -> bool:
            result = await conn.execute(
                update(self.table).where(self.table.c.id == entity_id).values(**changes)
            )
            await conn.commit()
            return result.rowcount > 0

        return await self._run(f"update {self.entity} {entity_id}", work)

    async def delete(self, entity_id: int) -> Result[bool]:
        """False when there was nothing to delete."""
        async def work(conn: AsyncConnection) -> bool:
            result = await conn.execute(delete(self.table).where(self.table.c.id == entity_id))
            await conn.commit()
            return result.rowcount > 0

        result = await self._run(f"delete {self.entity} {entity_id}", work)
        if result.success and result.value:
            logger.info(f"Deleted {self.entity} {entity_id}")
        return result
