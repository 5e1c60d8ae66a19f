#!/usr/bin/env python3
"""
Soft Delete Example - softcascade

Demonstrates cascading soft delete on an order graph:
- Owned relationships cascade, plain references do not
- Deleted records disappear from default queries
- Restore brings the whole subtree back
- Hooks can veto an operation
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from softcascade import HookResult, SoftDeleteMixin, before_soft_delete

Base = declarative_base()


class Customer(Base, SoftDeleteMixin):
    """Customer; referenced by orders but never owned by them."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)


class Order(Base, SoftDeleteMixin):
    """Order that owns its line items and its invoice."""

    __tablename__ = "orders"
    __soft_delete_cascade__ = ["line_items"]

    id = Column(Integer, primary_key=True)
    reference = Column(String, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"))

    customer = relationship("Customer")
    line_items = relationship("LineItem", back_populates="order")
    invoice = relationship(
        "Invoice", uselist=False, info={"soft_delete_cascade": True}
    )


class LineItem(Base, SoftDeleteMixin):
    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"))
    sku = Column(String)

    order = relationship("Order", back_populates="line_items")


class Invoice(Base, SoftDeleteMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"))
    paid = Column(Boolean, default=False)


@before_soft_delete(Invoice)
def keep_paid_invoices(invoice: Invoice) -> HookResult:
    """Paid invoices stay visible."""
    return HookResult.ABORT if invoice.paid else HookResult.CONTINUE


def demonstrate_soft_delete() -> None:
    """Show soft delete functionality."""
    print("🗑️  Cascading Soft Delete Example\n")

    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()

    # 1. Create test data
    print("1️⃣ Creating Test Data:")

    customer = Customer(name="Acme Corp")
    order = Order(reference="PO-1001", customer=customer)
    order.line_items.extend([LineItem(sku="BOLT-10"), LineItem(sku="NUT-10")])
    order.invoice = Invoice(paid=False)
    session.add(order)
    session.commit()

    print(f"  ✓ Created order {order.reference} for {customer.name}")
    print(f"  ✓ Created {len(session.query(LineItem).all())} line items\n")

    # 2. Cascade soft delete
    print("2️⃣ Cascade Soft Delete:")

    result = order.soft_delete()
    session.commit()

    print(f"  ✓ Soft deleted {result.root}")
    for ref in result.cascaded:
        print(f"    - cascaded to {ref}")
    print(f"  Active orders: {len(session.query(Order).all())}")
    print(f"  Active line items: {len(session.query(LineItem).all())}")
    print(f"  Customer untouched: {not customer.soft_deleted}\n")

    # 3. Query soft-deleted records
    print("3️⃣ Querying Soft-Deleted Records:")

    for item in LineItem.query_deleted(session).all():
        print(f"    - {item.sku}: deleted at {item.deleted_at}")
    print(f"  Deleted order still sees its items: {len(order.related('line_items'))}\n")

    # 4. Restore
    print("4️⃣ Restoring:")

    result = order.restore()
    session.commit()

    print(f"  ✓ Restored {result.total_affected} records")
    print(f"  Active line items: {len(session.query(LineItem).all())}\n")

    # 5. Hook rejection
    print("5️⃣ Hook Rejection:")

    order.invoice.paid = True
    session.commit()

    result = order.soft_delete()
    session.commit()

    print(f"  Order deleted: {order.soft_deleted}")
    print(f"  Rejected dependents: {', '.join(str(ref) for ref in result.rejected)}")
    print(f"  Paid invoice still active: {not order.invoice.soft_deleted}")

    session.close()
    print("\n✅ Example completed!")


if __name__ == "__main__":
    demonstrate_soft_delete()
