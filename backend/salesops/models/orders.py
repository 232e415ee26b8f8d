from __future__ import annotations

from ..extensions import db
from salesops.time_utils import to_utc_z, utcnow
from salesops.services.unit_service import normalize_to_kg, order_kg

RECORD_KIND_ORDER = "order"
RECORD_KIND_VISIT = "visit"
RECORD_KINDS = (RECORD_KIND_ORDER, RECORD_KIND_VISIT)


class Order(db.Model):
    """
    Transaction record: either a commercial order or a field visit.

    record_kind discriminates the two. Visits carry a capture location and
    image but never commercial totals (all monetary fields are zero).

    created_by_user_id is intentionally not a foreign key: users can be
    hard-deleted upstream and their records must survive with a dangling
    (or null) creator reference.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_number", name="uq_orders_order_number"),
        db.Index("ix_orders_kind_date", "record_kind", "record_date"),
        db.Index("ix_orders_created_by", "created_by_user_id"),
        db.Index("ix_orders_customer", "customer_id"),
        db.Index("ix_orders_warehouse", "warehouse_id"),
        db.Index("ix_orders_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    record_kind = db.Column(db.String(16), nullable=False, default=RECORD_KIND_ORDER)

    # Human-readable number (e.g. "ORD20260110001", "VST20260110001")
    order_number = db.Column(db.String(64), nullable=False)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)

    # Totals (always zero for visits)
    subtotal = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    discount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    discount_percentage = db.Column(db.Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    paid_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    # Lifecycle
    status = db.Column(db.String(32), nullable=False, default="pending")
    delivery_status = db.Column(db.String(32), nullable=True)
    payment_status = db.Column(db.String(16), nullable=True)  # pending, partial, paid, overdue
    payment_terms = db.Column(db.String(16), nullable=True)  # Cash, Credit, Advance

    record_date = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Attribution (see class docstring)
    created_by_user_id = db.Column(db.Integer, nullable=True)

    # Visit capture
    capture_latitude = db.Column(db.Float, nullable=True)
    capture_longitude = db.Column(db.Float, nullable=True)
    capture_address = db.Column(db.String(255), nullable=True)
    captured_image_url = db.Column(db.String(512), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    warehouse = db.relationship("Warehouse", backref=db.backref("orders", lazy=True))
    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def is_visit(self) -> bool:
        return self.record_kind == RECORD_KIND_VISIT

    @property
    def outstanding_amount(self) -> float:
        return round((self.total_amount or 0) - (self.paid_amount or 0), 2)

    @property
    def total_kg(self) -> float:
        return order_kg(self.items)

    def recalculate_totals(self) -> None:
        """
        Derive subtotal and total from line items.

        total = subtotal - discount + tax. A discount percentage, when set,
        takes precedence over the flat discount. Visits are always zero.
        """
        if self.is_visit:
            self.subtotal = 0
            self.discount = 0
            self.tax_amount = 0
            self.total_amount = 0
            self.paid_amount = 0
            return

        for item in self.items:
            if item.total_amount is None:
                item.total_amount = round((item.quantity or 0) * (item.rate_per_unit or 0), 2)

        subtotal = sum(item.total_amount or 0 for item in self.items)
        if self.discount_percentage:
            self.discount = round(subtotal * self.discount_percentage / 100, 2)
        self.subtotal = round(subtotal, 2)
        self.total_amount = round(subtotal - (self.discount or 0) + (self.tax_amount or 0), 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "record_kind": self.record_kind,
            "order_number": self.order_number,
            "customer_id": self.customer_id,
            "warehouse_id": self.warehouse_id,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
            "paid_amount": self.paid_amount,
            "outstanding_amount": self.outstanding_amount,
            "status": self.status,
            "delivery_status": self.delivery_status,
            "payment_status": self.payment_status,
            "record_date": to_utc_z(self.record_date),
            "created_by_user_id": self.created_by_user_id,
            "notes": self.notes,
        }


class OrderItem(db.Model):
    """Line item on an order. Quantity is expressed in `unit`."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    grade = db.Column(db.String(64), nullable=True)  # wheat flour grade

    quantity = db.Column(db.Float, nullable=False, default=0)
    unit = db.Column(db.String(16), nullable=False, default="KG")
    rate_per_unit = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=True)

    packaging = db.Column(db.String(64), nullable=True, default="Standard")  # e.g. "25kg Bags", "Loose"

    @property
    def kg(self) -> float:
        return normalize_to_kg(self.quantity, self.unit, self.packaging)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_name": self.product_name,
            "grade": self.grade,
            "quantity": self.quantity,
            "unit": self.unit,
            "rate_per_unit": self.rate_per_unit,
            "total_amount": self.total_amount,
            "packaging": self.packaging,
            "kg": self.kg,
        }
