"""Exceptions for soft delete operations."""

from typing import Optional


class SoftDeleteError(Exception):
    """Base exception for soft delete operations."""

    def __init__(self, message: str, entity_id: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message)


class NotSoftDeletableError(SoftDeleteError):
    """Raised when an entity whose type lacks SoftDeleteMixin is handed in."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(
            f"{entity_type} does not support soft delete; "
            "inherit SoftDeleteMixin to enable it"
        )


class UnknownRelationshipError(SoftDeleteError):
    """Raised when a relationship name is not declared on the entity type."""

    def __init__(self, entity_type: str, name: str):
        self.entity_type = entity_type
        self.name = name
        super().__init__(f"{entity_type} has no relationship named '{name}'")


class DetachedEntityError(SoftDeleteError):
    """Raised when a session-bound operation is used on a detached entity."""

    def __init__(self, entity_id: str):
        super().__init__(
            f"Entity {entity_id} is not attached to a session; "
            "pass a session explicitly or add the entity to one",
            entity_id=entity_id,
        )
