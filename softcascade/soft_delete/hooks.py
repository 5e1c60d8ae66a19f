"""
Before/after hooks around soft delete and restore.

Handlers are kept in registration order per (type, event). A handler
registered on a base class, including ``SoftDeleteMixin`` itself, also runs
for every subclass; base class handlers run first.

Example:
    >>> from softcascade.soft_delete import before_soft_delete, HookResult
    >>>
    >>> @before_soft_delete(Order)
    ... def keep_shipped_orders(order):
    ...     if order.status == "shipped":
    ...         return HookResult.ABORT
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class HookEvent(str, Enum):
    """Points at which handlers run."""

    BEFORE_SOFT_DELETE = "before_soft_delete"
    AFTER_SOFT_DELETE = "after_soft_delete"
    BEFORE_RESTORE = "before_restore"
    AFTER_RESTORE = "after_restore"


class HookResult(str, Enum):
    """Signal returned by a before handler."""

    CONTINUE = "continue"
    ABORT = "abort"


Handler = Callable[[Any], Any]


def _is_abort(value: Any) -> bool:
    return value is HookResult.ABORT or value is False


class HookRegistry:
    """Ordered handler lists per entity type and event."""

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[type, HookEvent], List[Handler]] = {}

    def register(self, entity_type: type, event: HookEvent, handler: Handler) -> Handler:
        """
        Register ``handler`` for ``event`` on ``entity_type``.

        Returns the handler so this can back a decorator.
        """
        self._handlers.setdefault((entity_type, HookEvent(event)), []).append(handler)
        return handler

    def unregister(self, entity_type: type, event: HookEvent, handler: Handler) -> None:
        handlers = self._handlers.get((entity_type, HookEvent(event)), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, entity_type: type, event: HookEvent) -> List[Handler]:
        """Handlers that apply to ``entity_type``, most generic class first."""
        event = HookEvent(event)
        handlers: List[Handler] = []
        for klass in reversed(entity_type.__mro__):
            handlers.extend(self._handlers.get((klass, event), ()))
        return handlers

    def run_before(self, event: HookEvent, entity: Any) -> bool:
        """
        Run before handlers for ``entity``.

        Returns:
            False as soon as one handler rejects, True otherwise
        """
        for handler in self.handlers_for(type(entity), event):
            if _is_abort(handler(entity)):
                logger.warning(
                    "%s on %s rejected by %s",
                    HookEvent(event).value,
                    type(entity).__name__,
                    getattr(handler, "__qualname__", repr(handler)),
                )
                return False
        return True

    def run_after(self, event: HookEvent, entity: Any) -> None:
        for handler in self.handlers_for(type(entity), event):
            handler(entity)

    def _decorator(self, entity_type: type, event: HookEvent) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            return self.register(entity_type, event, handler)

        return decorator

    def before_soft_delete(self, entity_type: type) -> Callable[[Handler], Handler]:
        return self._decorator(entity_type, HookEvent.BEFORE_SOFT_DELETE)

    def after_soft_delete(self, entity_type: type) -> Callable[[Handler], Handler]:
        return self._decorator(entity_type, HookEvent.AFTER_SOFT_DELETE)

    def before_restore(self, entity_type: type) -> Callable[[Handler], Handler]:
        return self._decorator(entity_type, HookEvent.BEFORE_RESTORE)

    def after_restore(self, entity_type: type) -> Callable[[Handler], Handler]:
        return self._decorator(entity_type, HookEvent.AFTER_RESTORE)

    def clear(self) -> None:
        self._handlers.clear()


_hook_registry: Optional[HookRegistry] = None


def get_hook_registry() -> HookRegistry:
    """Get the process-wide hook registry."""
    global _hook_registry

    if _hook_registry is None:
        _hook_registry = HookRegistry()

    return _hook_registry


def before_soft_delete(entity_type: type) -> Callable[[Handler], Handler]:
    """Register a before-soft-delete handler on the default registry."""
    return get_hook_registry().before_soft_delete(entity_type)


def after_soft_delete(entity_type: type) -> Callable[[Handler], Handler]:
    """Register an after-soft-delete handler on the default registry."""
    return get_hook_registry().after_soft_delete(entity_type)


def before_restore(entity_type: type) -> Callable[[Handler], Handler]:
    """Register a before-restore handler on the default registry."""
    return get_hook_registry().before_restore(entity_type)


def after_restore(entity_type: type) -> Callable[[Handler], Handler]:
    """Register an after-restore handler on the default registry."""
    return get_hook_registry().after_restore(entity_type)
