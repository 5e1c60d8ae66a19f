"""
Entity store used by the soft delete controller.

``EntityStore`` is the contract the controller consumes;
``SQLAlchemyEntityStore`` implements it on top of an ORM session.
"""

from typing import Any, Optional, Protocol, Sequence, Union

from sqlalchemy import inspect, select, update
from sqlalchemy.orm import Query, Session, with_parent
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.orm.exc import StaleDataError

from .exceptions import DetachedEntityError
from .mixins import supports_soft_delete
from .models import Cardinality, EntityRef, RelationshipDescriptor
from .relationships import RelationshipRegistry, get_relationship_registry
from .scopes import VisibilityScope, scoped


class EntityStore(Protocol):
    """Persistence operations the soft delete controller relies on."""

    def relationships_of(self, entity_type: type) -> Sequence[RelationshipDescriptor]:
        ...

    def supports_soft_delete(self, entity_type: type) -> bool:
        ...

    def get_related(
        self, entity: Any, name: str, scope: Union[VisibilityScope, str]
    ) -> Any:
        ...

    def raw_write(self, entity: Any, field: str, value: Any) -> None:
        ...

    def query(self, entity_type: type, scope: Union[VisibilityScope, str]) -> Any:
        ...


class SQLAlchemyEntityStore:
    """
    ``EntityStore`` backed by a SQLAlchemy session.

    The store neither commits nor rolls back; the caller owns the
    transaction.

    Args:
        session: Session all reads and writes go through
        registry: Relationship registry; defaults to the process-wide one
    """

    def __init__(
        self, session: Session, registry: Optional[RelationshipRegistry] = None
    ):
        self.session = session
        self.registry = registry or get_relationship_registry()

    def relationships_of(self, entity_type: type) -> Sequence[RelationshipDescriptor]:
        return self.registry.relationships_of(entity_type)

    def supports_soft_delete(self, entity_type: type) -> bool:
        return supports_soft_delete(entity_type)

    def get_related(
        self, entity: Any, name: str, scope: Union[VisibilityScope, str]
    ) -> Any:
        """
        Load relationship ``name`` of ``entity`` under ``scope``.

        The lookup is a fresh SELECT constrained by the relationship's own
        join condition, so only the ``deleted_at`` criteria vary with scope.

        Returns:
            A list for to-many relationships, the instance or None for to-one
        """
        descriptor = self.registry.get(type(entity), name)
        self._ensure_persistent(entity)

        stmt = select(descriptor.target_type).where(
            with_parent(entity, getattr(type(entity), name))
        )
        result = self.session.scalars(scoped(stmt, scope))

        if descriptor.cardinality is Cardinality.MANY:
            return list(result.all())
        return result.first()

    def raw_write(self, entity: Any, field: str, value: Any) -> None:
        """
        Persist a single column with a direct UPDATE.

        No flush, mapper events or validators run. The in-memory value is
        set as committed state so the instance is not marked dirty.

        Raises:
            StaleDataError: If the row no longer exists
        """
        self._ensure_persistent(entity)
        state = inspect(entity)
        mapper = state.mapper

        criteria = [
            column == value_
            for column, value_ in zip(mapper.primary_key, state.identity)
        ]
        stmt = (
            update(mapper.class_)
            .where(*criteria)
            .values({field: value})
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            raise StaleDataError(
                f"UPDATE of {field} on {EntityRef.of(entity)} matched no rows"
            )

        set_committed_value(entity, field, value)

    def query(self, entity_type: type, scope: Union[VisibilityScope, str]) -> "Query[Any]":
        return scoped(self.session.query(entity_type), scope)

    def _ensure_persistent(self, entity: Any) -> None:
        state = inspect(entity)
        if state.key is not None:
            return
        if state.transient or state.session is not self.session:
            raise DetachedEntityError(str(EntityRef.of(entity)))
        self.session.flush()
