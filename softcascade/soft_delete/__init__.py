"""
Soft Delete Module - cascading, recoverable deletion.

Provides the mixin, controller, hooks and visibility scoping that mark
records deleted with a ``deleted_at`` timestamp instead of removing them.
"""

from .exceptions import (
    DetachedEntityError,
    NotSoftDeletableError,
    SoftDeleteError,
    UnknownRelationshipError,
)
from .hooks import (
    HookEvent,
    HookRegistry,
    HookResult,
    after_restore,
    after_soft_delete,
    before_restore,
    before_soft_delete,
    get_hook_registry,
)
from .mixins import SoftDeleteMixin, register_soft_delete_listeners, supports_soft_delete
from .models import (
    Cardinality,
    EntityRef,
    Operation,
    OperationResult,
    RelationshipDescriptor,
)
from .relationships import RelationshipRegistry, get_relationship_registry
from .scopes import VisibilityScope, scoped
from .services import SoftDeleteController
from .store import EntityStore, SQLAlchemyEntityStore

__all__ = [
    # Mixins
    "SoftDeleteMixin",
    "supports_soft_delete",
    "register_soft_delete_listeners",
    # Services
    "SoftDeleteController",
    "EntityStore",
    "SQLAlchemyEntityStore",
    # Scopes
    "VisibilityScope",
    "scoped",
    # Relationships
    "RelationshipRegistry",
    "get_relationship_registry",
    # Hooks
    "HookEvent",
    "HookRegistry",
    "HookResult",
    "get_hook_registry",
    "before_soft_delete",
    "after_soft_delete",
    "before_restore",
    "after_restore",
    # Models
    "Cardinality",
    "EntityRef",
    "Operation",
    "OperationResult",
    "RelationshipDescriptor",
    # Exceptions
    "SoftDeleteError",
    "NotSoftDeletableError",
    "UnknownRelationshipError",
    "DetachedEntityError",
]
