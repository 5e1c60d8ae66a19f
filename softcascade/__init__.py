"""
softcascade - cascading soft delete for SQLAlchemy models.

Records are marked with a ``deleted_at`` timestamp instead of being removed,
hidden from default queries, and can be restored later. Deleting or
restoring a record carries over to the records it owns.

Key Features
------------
* **Soft Delete Mixin**: ``deleted_at`` column plus ``soft_delete()`` / ``restore()``
* **Cascade**: depth-first over explicitly owned relationships, dependents first
* **Visibility Scopes**: active (default), deleted and unrestricted queries
* **Hooks**: before/after handlers that may reject an operation

Quick Start
-----------
>>> from softcascade import SoftDeleteMixin
>>>
>>> class Order(Base, SoftDeleteMixin):
...     __tablename__ = "orders"
...     __soft_delete_cascade__ = ["line_items"]
...     id = Column(Integer, primary_key=True)
...     line_items = relationship("LineItem", back_populates="order")
>>>
>>> order.soft_delete()          # order and its line items
>>> session.query(Order).all()   # deleted orders are hidden
>>> order.restore()

Transactions
------------
Nothing here commits. Wrap a cascade in your own transaction when it has
to be all-or-nothing.
"""

__version__ = "1.0.0"

from .config import SoftDeleteConfig, configure, get_config
from .soft_delete import (
    HookResult,
    SoftDeleteController,
    SoftDeleteMixin,
    SQLAlchemyEntityStore,
    VisibilityScope,
    after_restore,
    after_soft_delete,
    before_restore,
    before_soft_delete,
)

__all__ = [
    # Soft Delete
    "SoftDeleteMixin",
    "SoftDeleteController",
    "SQLAlchemyEntityStore",
    "VisibilityScope",
    # Hooks
    "HookResult",
    "before_soft_delete",
    "after_soft_delete",
    "before_restore",
    "after_restore",
    # Configuration
    "SoftDeleteConfig",
    "configure",
    "get_config",
]
