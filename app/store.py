from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StoreError

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT')


class EntityStore:
    """Collection-style access to the catalog and order tables.

    Every database failure raised inside these operations is logged and
    re-raised as ``StoreError`` so the service layer deals with a single
    persistence error type.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            logger.exception('Constraint violation during %s', operation)
            raise StoreError(f'Duplicate or conflicting data during {operation}') from exc
        except SQLAlchemyError as exc:
            logger.exception('Database failure during %s', operation)
            raise StoreError(f'Database failure during {operation}') from exc

    def find(self, model: type[ModelT], *criteria: Any, order_by: Any = None) -> list[ModelT]:
        stmt = select(model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        with self._guard(f'find {model.__name__}'):
            return list(self.db.execute(stmt).scalars().all())

    def find_one(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        with self._guard(f'find_one {model.__name__}'):
            return self.db.execute(select(model).where(*criteria).limit(1)).scalars().first()

    def exists(self, model: type, *criteria: Any) -> bool:
        with self._guard(f'exists {model.__name__}'):
            return bool(self.db.execute(select(exists().where(*criteria))).scalar())

    def insert_one(self, obj: ModelT) -> ModelT:
        with self._guard(f'insert_one {type(obj).__name__}'):
            self.db.add(obj)
            self.db.flush()
        return obj

    def update_one(
        self,
        model: type,
        *criteria: Any,
        values: dict[str, Any] | None = None,
        increments: dict[str, int] | None = None,
    ) -> int:
        """Apply ``values`` and server-side ``increments`` to the matching row.

        Increments render as ``column = column + delta`` so the read-modify-write
        happens inside a single UPDATE statement.
        """
        changes: dict[str, Any] = dict(values or {})
        for column, delta in (increments or {}).items():
            changes[column] = getattr(model, column) + delta
        if not changes:
            return 0
        stmt = update(model).where(*criteria).values(**changes).execution_options(synchronize_session='fetch')
        with self._guard(f'update_one {model.__name__}'):
            result = self.db.execute(stmt)
        return result.rowcount or 0

    def delete_one(self, model: type, *criteria: Any) -> int:
        obj = self.find_one(model, *criteria)
        if obj is None:
            return 0
        with self._guard(f'delete_one {model.__name__}'):
            self.db.delete(obj)
            self.db.flush()
        return 1

    def commit(self) -> None:
        with self._guard('commit'):
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
