"""
Visibility scopes for soft-deletable queries.

A scope is chosen per query through an execution option; the session
listener installed by ``register_soft_delete_listeners`` turns it into
criteria on ``deleted_at``.
"""

from enum import Enum
from typing import Any, Mapping, Optional, TypeVar, Union

from ..config import get_config

Executable = TypeVar("Executable")


class VisibilityScope(str, Enum):
    """Which deletion states a query returns."""

    ACTIVE = "active"  # deleted_at IS NULL
    DELETED = "deleted"  # deleted_at IS NOT NULL
    UNRESTRICTED = "unrestricted"  # no filter on deleted_at


def resolve_scope(value: Union[VisibilityScope, str, None]) -> VisibilityScope:
    """Coerce an option value to a scope, falling back to the configured default."""
    if value is None:
        return VisibilityScope(get_config().default_scope)
    if isinstance(value, VisibilityScope):
        return value
    return VisibilityScope(str(value).lower())


def scope_options(scope: Union[VisibilityScope, str]) -> Mapping[str, Any]:
    """Execution options selecting ``scope``."""
    return {get_config().scope_option_name: resolve_scope(scope)}


def scoped(statement: Executable, scope: Union[VisibilityScope, str]) -> Executable:
    """
    Return ``statement`` restricted to ``scope``.

    Works for anything exposing ``execution_options()``: 2.0 style
    ``Select`` statements as well as legacy ``Query`` objects.
    """
    return statement.execution_options(**scope_options(scope))  # type: ignore[attr-defined]


def scope_of(execution_options: Mapping[str, Any]) -> VisibilityScope:
    """Read the scope carried by a set of execution options."""
    value: Optional[Any] = execution_options.get(get_config().scope_option_name)
    return resolve_scope(value)
