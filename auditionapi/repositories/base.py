from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """Base class for all repositories; reads come back as pydantic schemas.

    Repositories only ``flush``. Committing belongs to the unit of work that
    the calling service opens, so several repositories can take part in one
    database transaction.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _get_model(self, id: Any, refresh: bool = False) -> Optional[T]:
        stmt = select(self.model_class).where(getattr(self.model_class, "id") == id)
        if refresh:
            # Rows may have been changed by UPDATE statements that bypass the identity map
            stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        return self._to_schema(self._get_model(id, refresh=True))

    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[SchemaType]:
        query = self.db.query(self.model_class).populate_existing()

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        if order_by is not None:
            query = query.order_by(order_by)

        if offset:
            query = query.offset(offset)

        if limit:
            query = query.limit(limit)

        return [self._to_schema(instance) for instance in query.all()]

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self.db.query(self.model_class)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        return query.count()

    def create(self, **kwargs) -> Optional[SchemaType]:
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        self.db.flush()
        self.db.refresh(instance)
        return self._to_schema(instance)
