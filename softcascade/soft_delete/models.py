"""
Data models for soft delete operations.

These models describe relationship metadata and the outcome of
soft delete and restore calls.
"""

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable


class Cardinality(str, Enum):
    """How many targets a relationship holds."""

    ONE = "one"
    MANY = "many"


class Operation(str, Enum):
    """Operations the controller performs."""

    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"


class RelationshipDescriptor(BaseModel):
    """Static description of one relationship of a soft-deletable type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Relationship attribute name", min_length=1)
    cardinality: Cardinality = Field(..., description="One or many targets")
    target_type: type = Field(..., description="Mapped class on the other side")
    owned_cascade: bool = Field(
        False, description="Soft delete and restore cascade into this relationship"
    )

    @property
    def target_name(self) -> str:
        return self.target_type.__name__


class EntityRef(BaseModel):
    """Type name and identity of an entity, for results and logging."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_id: str

    @classmethod
    def of(cls, entity: Any) -> "EntityRef":
        """Build a reference from a mapped instance."""
        identity = None
        try:
            identity = inspect(entity).identity
        except NoInspectionAvailable:
            pass

        if identity is None:
            entity_id = str(getattr(entity, "id", "unknown"))
        elif len(identity) == 1:
            entity_id = str(identity[0])
        else:
            entity_id = ",".join(str(part) for part in identity)

        return cls(entity_type=entity.__class__.__name__, entity_id=entity_id)

    def __str__(self) -> str:
        return f"{self.entity_type}#{self.entity_id}"


class OperationResult(BaseModel):
    """
    Outcome of a soft delete or restore call.

    ``performed`` is False when a before hook rejected the root entity; in
    that case nothing was written. ``cascaded`` lists dependents that were
    transitioned, in the order they completed. ``rejected`` lists entities
    (root or dependents) whose before hooks declined the operation.
    """

    operation: Operation
    root: EntityRef
    performed: bool = False
    cascaded: List[EntityRef] = Field(default_factory=list)
    rejected: List[EntityRef] = Field(default_factory=list)

    @property
    def total_affected(self) -> int:
        return len(self.cascaded) + (1 if self.performed else 0)

    def __bool__(self) -> bool:
        return self.performed
