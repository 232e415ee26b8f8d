from __future__ import annotations

from ..extensions import db
from salesops.time_utils import to_utc_z


warehouse_managers = db.Table(
    "warehouse_managers",
    db.Column("warehouse_id", db.Integer, db.ForeignKey("warehouses.id"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
)


class Warehouse(db.Model):
    """
    Physical stock/dispatch location (a "godown").

    Orders record the warehouse they were dispatched from; principals are
    scoped to warehouses through primary_warehouse_id and
    UserWarehouseAccess rows.
    """
    __tablename__ = "warehouses"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_warehouses_name"),
        db.UniqueConstraint("code", name="uq_warehouses_code"),
        db.Index("ix_warehouses_location_active", "city", "state", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(32), nullable=True, index=True)

    city = db.Column(db.String(120), nullable=False)
    state = db.Column(db.String(120), nullable=False)
    area = db.Column(db.String(64), nullable=True)  # e.g. East/West within a city

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    managers = db.relationship(
        "User",
        secondary=warehouse_managers,
        lazy="selectin",
        backref=db.backref("managed_warehouses", lazy=True),
    )

    def __repr__(self) -> str:
        return f"<Warehouse id={self.id} name={self.name!r}>"

    def location_dict(self) -> dict:
        return {"city": self.city, "state": self.state, "area": self.area}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "location": self.location_dict(),
            "manager_ids": [manager.id for manager in self.managers],
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
