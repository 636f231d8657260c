"""
Collection-style entity store over a SQLAlchemy session.

Each write commits on its own; there are no cross-write transactions.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import Base
from app.exceptions import ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class EntityStore:
    """find / find_one / get / insert / update / delete over ORM models"""

    def __init__(self, db: Session):
        self.db = db

    def find(self, model: Type[ModelType], *criteria, order_by=None) -> List[ModelType]:
        try:
            query = self.db.query(model).filter(*criteria)
            if order_by is not None:
                if isinstance(order_by, (list, tuple)):
                    query = query.order_by(*order_by)
                else:
                    query = query.order_by(order_by)
            return query.all()
        except SQLAlchemyError as e:
            raise self._failure(f"find {model.__tablename__}", e)

    def find_one(self, model: Type[ModelType], *criteria) -> Optional[ModelType]:
        try:
            return self.db.query(model).filter(*criteria).first()
        except SQLAlchemyError as e:
            raise self._failure(f"find_one {model.__tablename__}", e)

    def get(self, model: Type[ModelType], id: str) -> Optional[ModelType]:
        if id is None:
            return None
        try:
            return self.db.get(model, id)
        except SQLAlchemyError as e:
            raise self._failure(f"get {model.__tablename__}", e)

    def insert(self, obj: ModelType) -> ModelType:
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except IntegrityError as e:
            raise self._conflict(f"insert {obj.__tablename__}", e)
        except SQLAlchemyError as e:
            raise self._failure(f"insert {obj.__tablename__}", e)

    def update(self, model: Type[ModelType], id: str, changes: Dict[str, Any]) -> ModelType:
        obj = self.get(model, id)
        if obj is None:
            raise NotFoundError(f"{model.__name__} not found", {"id": id})

        try:
            for field, value in changes.items():
                if hasattr(obj, field):
                    setattr(obj, field, value)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except IntegrityError as e:
            raise self._conflict(f"update {model.__tablename__}", e)
        except SQLAlchemyError as e:
            raise self._failure(f"update {model.__tablename__}", e)

    def delete(self, model: Type[ModelType], id: str) -> bool:
        obj = self.get(model, id)
        if obj is None:
            return False

        try:
            self.db.delete(obj)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            raise self._failure(f"delete {model.__tablename__}", e)

    def delete_where(self, model: Type[ModelType], *criteria) -> int:
        try:
            count = self.db.query(model).filter(*criteria).delete(synchronize_session=False)
            self.db.commit()
            return count
        except SQLAlchemyError as e:
            raise self._failure(f"delete_where {model.__tablename__}", e)

    def _conflict(self, action: str, error: IntegrityError) -> ConflictError:
        self.db.rollback()
        logger.warning(f"Unique constraint violated on {action}: {error.orig}")
        return ConflictError("Conflicts with an existing record", {"action": action})

    def _failure(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"Store failure on {action}: {str(error)}")
        return StoreError(f"Failed to {action}")
