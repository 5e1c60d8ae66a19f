"""
Relationship table for soft-deletable types.

Each soft-deletable class gets a fixed tuple of ``RelationshipDescriptor``
entries, built once when SQLAlchemy configures its mapper. The cascade only
ever consults this table.

A relationship is owned (cascading) when it is flagged explicitly, either

    children = relationship("Child", info={"soft_delete_cascade": True})

or through the class attribute

    __soft_delete_cascade__ = ["children"]

The hard delete ``cascade="all, delete"`` setting plays no part.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper, configure_mappers

from ..config import get_config
from .exceptions import UnknownRelationshipError
from .models import Cardinality, RelationshipDescriptor

logger = logging.getLogger(__name__)

RelationshipTable = Tuple[RelationshipDescriptor, ...]


def describe_mapper(mapper: Mapper) -> RelationshipTable:
    """Build the relationship table for one mapped class."""
    cls = mapper.class_
    info_key = get_config().cascade_info_key
    owned_names = set(getattr(cls, "__soft_delete_cascade__", None) or ())

    descriptors = []
    for rel in mapper.relationships:
        owned = bool(rel.info.get(info_key)) or rel.key in owned_names
        descriptors.append(
            RelationshipDescriptor(
                name=rel.key,
                cardinality=Cardinality.MANY if rel.uselist else Cardinality.ONE,
                target_type=rel.mapper.class_,
                owned_cascade=owned,
            )
        )
        owned_names.discard(rel.key)

    if owned_names:
        raise UnknownRelationshipError(cls.__name__, sorted(owned_names)[0])

    return tuple(descriptors)


class RelationshipRegistry:
    """Relationship tables keyed by mapped class."""

    def __init__(self) -> None:
        self._tables: Dict[type, RelationshipTable] = {}

    def register(
        self, entity_type: type, descriptors: Iterable[RelationshipDescriptor]
    ) -> None:
        table = tuple(descriptors)
        self._tables[entity_type] = table
        logger.debug(
            "Registered %d relationship(s) for %s (%d owned)",
            len(table),
            entity_type.__name__,
            sum(1 for d in table if d.owned_cascade),
        )

    def register_mapper(self, mapper: Mapper) -> None:
        self.register(mapper.class_, describe_mapper(mapper))

    def relationships_of(self, entity_type: type) -> RelationshipTable:
        """
        Return the relationship table of ``entity_type``.

        Mappers that were never configured are configured first. Unmapped
        types have no relationships.
        """
        table = self._tables.get(entity_type)
        if table is not None:
            return table

        try:
            mapper = inspect(entity_type)
        except NoInspectionAvailable:
            return ()

        if not mapper.configured:
            configure_mappers()
            table = self._tables.get(entity_type)
            if table is not None:
                return table

        self.register_mapper(mapper)
        return self._tables[entity_type]

    def get(self, entity_type: type, name: str) -> RelationshipDescriptor:
        for descriptor in self.relationships_of(entity_type):
            if descriptor.name == name:
                return descriptor
        raise UnknownRelationshipError(entity_type.__name__, name)

    def registered_types(self) -> Tuple[type, ...]:
        return tuple(self._tables)

    def clear(self) -> None:
        self._tables.clear()


_registry: Optional[RelationshipRegistry] = None


def get_relationship_registry() -> RelationshipRegistry:
    """Get the process-wide relationship registry."""
    global _registry

    if _registry is None:
        _registry = RelationshipRegistry()

    return _registry
