"""
SQLAlchemy mixin for soft delete functionality.

Inheriting ``SoftDeleteMixin`` is how a model declares the soft delete
capability; cascade eligibility is checked with ``issubclass`` against it.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import DateTime, event, inspect
from sqlalchemy.orm import (
    Mapped,
    Mapper,
    ORMExecuteState,
    Query,
    Session,
    mapped_column,
    object_session,
    with_loader_criteria,
)

from .exceptions import DetachedEntityError
from .models import EntityRef
from .relationships import get_relationship_registry
from .scopes import VisibilityScope, scope_of, scoped

if TYPE_CHECKING:
    from .models import OperationResult
    from .store import SQLAlchemyEntityStore


class SoftDeleteMixin:
    """
    Mixin to add soft delete functionality to SQLAlchemy models.

    Provides:
    - The ``deleted_at`` column; NULL means active
    - ``soft_delete()`` / ``restore()`` cascading to owned relationships
    - Scoped query helpers and a scope-aware relationship accessor

    Usage:
        class Order(Base, SoftDeleteMixin):
            __tablename__ = "orders"
            __soft_delete_cascade__ = ["line_items"]

            id = Column(Integer, primary_key=True)
            line_items = relationship("LineItem", back_populates="order")
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    # Relationship names that soft delete and restore cascade into
    __soft_delete_cascade__ = ()

    @property
    def soft_deleted(self) -> bool:
        """True when ``deleted_at`` is set."""
        return self.deleted_at is not None

    def _store(self, session: Optional[Session] = None) -> "SQLAlchemyEntityStore":
        from .store import SQLAlchemyEntityStore

        session = session or object_session(self)
        if session is None:
            raise DetachedEntityError(str(EntityRef.of(self)))
        return SQLAlchemyEntityStore(session)

    def soft_delete(self, session: Optional[Session] = None) -> "OperationResult":
        """
        Soft delete this record and everything it owns.

        Args:
            session: Session to use; defaults to the one the record belongs to

        Returns:
            Result of the operation; falsy when a hook rejected it

        Raises:
            DetachedEntityError: If no session is available
        """
        from .services import SoftDeleteController

        return SoftDeleteController(self._store(session)).soft_delete(self)

    soft_destroy = soft_delete

    def restore(self, session: Optional[Session] = None) -> "OperationResult":
        """
        Restore this record and every soft-deleted record it owns.

        Args:
            session: Session to use; defaults to the one the record belongs to

        Returns:
            Result of the operation; falsy when a hook rejected it

        Raises:
            DetachedEntityError: If no session is available
        """
        from .services import SoftDeleteController

        return SoftDeleteController(self._store(session)).restore(self)

    def related(self, name: str, session: Optional[Session] = None) -> Any:
        """
        Read relationship ``name`` respecting this record's state.

        While the record is soft-deleted the lookup runs unrestricted, so a
        deleted parent still shows its (deleted) children. Otherwise the
        default active-only scope applies.
        """
        scope = VisibilityScope.UNRESTRICTED if self.soft_deleted else VisibilityScope.ACTIVE
        return self._store(session).get_related(self, name, scope)

    @classmethod
    def query_active(cls, session: Session) -> "Query[Any]":
        """Query for active (non-deleted) records only."""
        return scoped(session.query(cls), VisibilityScope.ACTIVE)

    @classmethod
    def query_deleted(cls, session: Session) -> "Query[Any]":
        """Query for deleted records only."""
        return scoped(session.query(cls), VisibilityScope.DELETED)

    @classmethod
    def query_all(cls, session: Session) -> "Query[Any]":
        """Query for all records including deleted."""
        return scoped(session.query(cls), VisibilityScope.UNRESTRICTED)


def supports_soft_delete(entity_type: Any) -> bool:
    """Whether ``entity_type`` implements the soft delete capability."""
    return isinstance(entity_type, type) and issubclass(entity_type, SoftDeleteMixin)


@event.listens_for(SoftDeleteMixin, "mapper_configured", propagate=True)
def _register_relationships(mapper: Mapper, class_: type) -> None:
    get_relationship_registry().register_mapper(mapper)


def _active_criteria(target: Any) -> Any:
    return with_loader_criteria(
        target,
        lambda cls: cls.deleted_at.is_(None),
        include_aliases=True,
        propagate_to_loaders=False,
    )


def _deleted_criteria(target: Any) -> Any:
    return with_loader_criteria(
        target,
        lambda cls: cls.deleted_at.is_not(None),
        include_aliases=True,
        propagate_to_loaders=False,
    )


def _primary_entity(statement: Any) -> Optional[type]:
    """Mapped class of the first entity selected by ``statement``."""
    descriptions = getattr(statement, "column_descriptions", None) or ()
    for description in descriptions[:1]:
        entity = description.get("entity")
        if entity is not None:
            return inspect(entity).mapper.class_
    return None


def _owner_is_deleted(orm_execute_state: ORMExecuteState) -> bool:
    state = orm_execute_state.lazy_loaded_from
    owner = state.obj() if state is not None else None
    return isinstance(owner, SoftDeleteMixin) and owner.deleted_at is not None


def _scope_options(orm_execute_state: ORMExecuteState) -> List[Any]:
    if orm_execute_state.is_relationship_load:
        # Deleted owners see all of their related records
        if _owner_is_deleted(orm_execute_state):
            return []
        return [_active_criteria(SoftDeleteMixin)]

    scope = scope_of(orm_execute_state.execution_options)

    if scope is VisibilityScope.ACTIVE:
        return [_active_criteria(SoftDeleteMixin)]
    if scope is VisibilityScope.UNRESTRICTED:
        return []

    primary = _primary_entity(orm_execute_state.statement)
    if primary is None:
        return [_deleted_criteria(SoftDeleteMixin)]
    if not supports_soft_delete(primary):
        return [_active_criteria(SoftDeleteMixin)]

    # Only the selected entity is inverted; joined entities stay active-only
    options = [_deleted_criteria(primary)]
    for other in get_relationship_registry().registered_types():
        if not supports_soft_delete(other):
            continue
        if issubclass(other, primary) or issubclass(primary, other):
            continue
        options.append(_active_criteria(other))
    return options


def _apply_visibility_scope(orm_execute_state: ORMExecuteState) -> None:
    """Add ``deleted_at`` criteria for the scope selected on the statement."""
    if not orm_execute_state.is_select or orm_execute_state.is_column_load:
        return

    options = _scope_options(orm_execute_state)
    if options:
        orm_execute_state.statement = orm_execute_state.statement.options(*options)


def register_soft_delete_listeners(target: Any = Session) -> None:
    """
    Install default visibility scoping on ``target``.

    ``target`` may be the ``Session`` class (the default, installed on
    import), a ``sessionmaker`` or a single session. Installing twice is a
    no-op.
    """
    if not event.contains(target, "do_orm_execute", _apply_visibility_scope):
        event.listen(target, "do_orm_execute", _apply_visibility_scope)


register_soft_delete_listeners()
