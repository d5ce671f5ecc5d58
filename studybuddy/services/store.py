"""
studybuddy/services/store.py

Owner-scoped persistence over the SQLAlchemy session. Every read and write
filters on ``user_id`` so records never leak across users.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from studybuddy.models.entities import Assignment

log = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    def find_owned(
        self,
        model: Type[T],
        owner_id: int,
        *criteria: Any,
        order_by: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        stmt = select(model).where(model.user_id == owner_id, *criteria)
        if order_by is not None:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt).unique().all())

    def find_one_owned(self, model: Type[T], owner_id: int, record_id: int) -> Optional[T]:
        return self.db.scalar(
            select(model).where(model.id == record_id, model.user_id == owner_id)
        )

    def insert(self, record: T) -> T:
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def update_owned(
        self, model: Type[T], owner_id: int, record_id: int, patch: Dict[str, Any]
    ) -> Optional[T]:
        record = self.find_one_owned(model, owner_id, record_id)
        if record is None:
            return None
        for key, value in patch.items():
            setattr(record, key, value)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def delete_owned(self, model: Type[T], owner_id: int, record_id: int) -> bool:
        record = self.find_one_owned(model, owner_id, record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        return True

    def delete_all_owned_by(self, owner_id: int, subject_id: int) -> int:
        """Delete every assignment of ``owner_id`` filed under ``subject_id``."""
        result = self.db.execute(
            delete(Assignment)
            .where(Assignment.user_id == owner_id, Assignment.subject_id == subject_id)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        log.info("[DB] cascade removed %s assignments (user=%s, subject=%s)",
                 result.rowcount, owner_id, subject_id)
        return result.rowcount or 0
