"""
Service layer for soft delete operations.

``SoftDeleteController`` marks entities deleted or restores them, walking
owned relationships depth first so that every dependent completes before
its owner is written.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config import SoftDeleteConfig, get_config
from .exceptions import NotSoftDeletableError
from .hooks import HookEvent, HookRegistry, get_hook_registry
from .models import EntityRef, Operation, OperationResult, RelationshipDescriptor
from .scopes import VisibilityScope
from .store import EntityStore

logger = logging.getLogger(__name__)

DELETED_FIELD = "deleted_at"


class SoftDeleteController:
    """
    Applies soft delete and restore to an entity and its owned dependents.

    The controller performs no locking and never commits. Errors raised by
    the store or by hooks propagate unchanged; a cascade interrupted by one
    may leave part of the graph transitioned, so callers needing atomicity
    should wrap the call in a transaction and roll back on error.

    Args:
        store: Persistence collaborator
        hooks: Hook registry; defaults to the process-wide one
        config: Configuration; defaults to the global configuration
        clock: Timestamp source; defaults to ``config.now``
    """

    def __init__(
        self,
        store: EntityStore,
        hooks: Optional[HookRegistry] = None,
        config: Optional[SoftDeleteConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.hooks = hooks or get_hook_registry()
        self.config = config or get_config()
        self.clock = clock or self.config.now

    def is_soft_deleted(self, entity: Any) -> bool:
        """Whether ``entity`` is soft-deleted, i.e. has ``deleted_at`` set."""
        self._check(entity)
        return getattr(entity, DELETED_FIELD) is not None

    def soft_delete(self, entity: Any) -> OperationResult:
        """
        Soft delete ``entity`` and, first, every active entity it owns.

        Calling this on an already deleted entity rewrites its timestamp;
        dependents that are already deleted are not visited again.

        Returns:
            Operation result; ``performed`` is False if a before hook
            rejected ``entity`` itself

        Raises:
            NotSoftDeletableError: If the entity's type lacks the mixin
        """
        self._check(entity)
        result = OperationResult(operation=Operation.SOFT_DELETE, root=EntityRef.of(entity))
        result.performed = self._soft_delete(entity, result, {})

        self._log_outcome(result)
        return result

    def restore(self, entity: Any) -> OperationResult:
        """
        Restore ``entity`` and, first, every soft-deleted entity it owns.

        Dependents are looked up without the active-only filter since they
        are expected to be deleted themselves.

        Returns:
            Operation result; ``performed`` is False if a before hook
            rejected ``entity`` itself

        Raises:
            NotSoftDeletableError: If the entity's type lacks the mixin
        """
        self._check(entity)
        result = OperationResult(operation=Operation.RESTORE, root=EntityRef.of(entity))
        result.performed = self._restore(entity, result, {})

        self._log_outcome(result)
        return result

    def _soft_delete(
        self, entity: Any, result: OperationResult, visiting: Dict[int, Any]
    ) -> bool:
        if not self.hooks.run_before(HookEvent.BEFORE_SOFT_DELETE, entity):
            result.rejected.append(EntityRef.of(entity))
            return False

        # Holds a reference so the id stays unique for the whole walk
        visiting[id(entity)] = entity
        scope = (
            VisibilityScope.UNRESTRICTED
            if self.is_soft_deleted(entity)
            else VisibilityScope.ACTIVE
        )
        for descriptor in self._cascading(type(entity)):
            for item in self._related(entity, descriptor, scope):
                if id(item) in visiting or self.is_soft_deleted(item):
                    continue
                self._log_step("Soft deleting", item, entity)
                if self._soft_delete(item, result, visiting):
                    result.cascaded.append(EntityRef.of(item))

        self.store.raw_write(entity, DELETED_FIELD, self.clock())
        self.hooks.run_after(HookEvent.AFTER_SOFT_DELETE, entity)
        return True

    def _restore(
        self, entity: Any, result: OperationResult, visiting: Dict[int, Any]
    ) -> bool:
        if not self.hooks.run_before(HookEvent.BEFORE_RESTORE, entity):
            result.rejected.append(EntityRef.of(entity))
            return False

        visiting[id(entity)] = entity
        for descriptor in self._cascading(type(entity)):
            for item in self._related(entity, descriptor, VisibilityScope.UNRESTRICTED):
                if id(item) in visiting or not self.is_soft_deleted(item):
                    continue
                self._log_step("Restoring", item, entity)
                if self._restore(item, result, visiting):
                    result.cascaded.append(EntityRef.of(item))

        self.store.raw_write(entity, DELETED_FIELD, None)
        self.hooks.run_after(HookEvent.AFTER_RESTORE, entity)
        return True

    def _cascading(self, entity_type: type) -> List[RelationshipDescriptor]:
        """Owned relationships whose target type is soft-deletable."""
        if not self.config.cascade_enabled:
            return []
        return [
            descriptor
            for descriptor in self.store.relationships_of(entity_type)
            if descriptor.owned_cascade
            and self.store.supports_soft_delete(descriptor.target_type)
        ]

    def _related(
        self, entity: Any, descriptor: RelationshipDescriptor, scope: VisibilityScope
    ) -> Iterable[Any]:
        value = self.store.get_related(entity, descriptor.name, scope)
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return list(value)
        return [value]

    def _check(self, entity: Any) -> None:
        if not self.store.supports_soft_delete(type(entity)):
            raise NotSoftDeletableError(type(entity).__name__)

    def _log_step(self, action: str, item: Any, owner: Any) -> None:
        if self.config.log_cascade_steps:
            logger.debug("%s %s owned by %s", action, EntityRef.of(item), EntityRef.of(owner))

    def _log_outcome(self, result: OperationResult) -> None:
        if result.performed:
            logger.info(
                "%s %s (%d dependent(s))",
                result.operation.value,
                result.root,
                len(result.cascaded),
            )
        else:
            logger.info("%s %s not performed", result.operation.value, result.root)
