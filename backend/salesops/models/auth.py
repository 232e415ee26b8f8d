from __future__ import annotations

from ..extensions import db
from salesops.time_utils import to_utc_z


class Role(db.Model):
    """Named role (e.g. "Sales Executive", "Manager") held by principals."""
    __tablename__ = "roles"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_roles_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class User(db.Model):
    """
    Principal: an executive, manager or administrator.

    Orders and visits reference their creator by user id. Users may be
    hard-deleted upstream, so that reference is allowed to dangle.

    SCOPE: primary_warehouse_id plus UserWarehouseAccess rows form the set of
    warehouses whose data the user may see in reports. A user with neither
    sees everything.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("employee_id", name="uq_users_employee_id"),
        db.Index("ix_users_role_id", "role_id"),
        db.Index("ix_users_department", "department"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.String(32), nullable=True)  # e.g. "EMP0001"
    first_name = db.Column(db.String(128), nullable=False)
    last_name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False)
    department = db.Column(db.String(32), nullable=False)  # Sales, Management, Warehouse, ...
    position = db.Column(db.String(64), nullable=True)

    primary_warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    role = db.relationship("Role", backref=db.backref("users", lazy=True))
    primary_warehouse = db.relationship("Warehouse", foreign_keys=[primary_warehouse_id])

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.full_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "department": self.department,
            "position": self.position,
            "role": self.role.name if self.role else None,
            "primary_warehouse_id": self.primary_warehouse_id,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class UserWarehouseAccess(db.Model):
    """
    Additional warehouses a user may see beyond their primary warehouse.
    """
    __tablename__ = "user_warehouse_access"
    __table_args__ = (
        db.UniqueConstraint("user_id", "warehouse_id", name="uq_user_warehouse_access"),
        db.Index("ix_user_warehouse_access_user", "user_id"),
        db.Index("ix_user_warehouse_access_warehouse", "warehouse_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False)
    granted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("warehouse_access", lazy=True))
    warehouse = db.relationship("Warehouse")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "warehouse_id": self.warehouse_id,
            "granted_at": to_utc_z(self.granted_at),
        }
