from __future__ import annotations

from ..extensions import db
from salesops.time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer (retailer, distributor or wholesaler) that places orders.

    SCOPE: assigned_warehouse_id places the customer under one warehouse for
    customer-level reports, independent of the warehouse recorded on each
    individual order.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("customer_code", name="uq_customers_code"),
        db.Index("ix_customers_business_name", "business_name"),
        db.Index("ix_customers_assigned_warehouse", "assigned_warehouse_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_code = db.Column(db.String(32), nullable=True)  # e.g. "CUST0001"

    business_name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    customer_type = db.Column(db.String(32), nullable=False, default="Retailer")

    street = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    state = db.Column(db.String(120), nullable=True)
    pincode = db.Column(db.String(16), nullable=True)

    credit_limit = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    outstanding_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    assigned_warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    assigned_warehouse = db.relationship("Warehouse", backref=db.backref("customers", lazy=True))

    def address_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_code": self.customer_code,
            "business_name": self.business_name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "customer_type": self.customer_type,
            "address": self.address_dict(),
            "credit_limit": self.credit_limit,
            "outstanding_amount": self.outstanding_amount,
            "is_active": self.is_active,
            "assigned_warehouse_id": self.assigned_warehouse_id,
            "created_at": to_utc_z(self.created_at),
        }
