# Overview: Row shapes for grouped executive reports; real executives and orphan placeholders.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import case, func

from ..models import Order, User
from salesops.time_utils import days_since, to_utc_z

GROUP_TYPE_EXECUTIVE = "executive"
GROUP_TYPE_ORPHAN = "orphan"

ORPHAN_NULL_CREATOR = "null_creator"
ORPHAN_DANGLING_CREATOR = "dangling_creator"

ORPHAN_LABELS = {
    ORPHAN_NULL_CREATOR: ("deleted-user", "Deleted User"),
    ORPHAN_DANGLING_CREATOR: ("orphaned-orders", "Deleted User (Orphaned)"),
}

NOT_AVAILABLE = "N/A"


def _status_count(status: str):
    return func.sum(case((Order.status == status, 1), else_=0))


def executive_metric_columns() -> tuple:
    """Aggregate columns shared by executive groups and orphan scans."""
    return (
        func.count(Order.id).label("total_orders"),
        func.coalesce(func.sum(Order.total_amount), 0).label("total_revenue"),
        func.coalesce(func.sum(Order.paid_amount), 0).label("total_paid_amount"),
        _status_count("pending").label("pending_orders"),
        _status_count("approved").label("approved_orders"),
        _status_count("delivered").label("delivered_orders"),
        _status_count("completed").label("completed_orders"),
        func.count(func.distinct(Order.customer_id)).label("unique_customers_count"),
        func.max(Order.record_date).label("last_activity_date"),
    )


def average(total: float, count: int) -> float:
    """total / count rounded to cents; 0 when there is nothing to divide by."""
    if not count:
        return 0
    return round(total / count, 2)


@dataclass
class GroupMetrics:
    total_orders: int = 0
    total_revenue: float = 0.0
    total_paid_amount: float = 0.0
    pending_orders: int = 0
    approved_orders: int = 0
    delivered_orders: int = 0
    completed_orders: int = 0
    unique_customers_count: int = 0
    last_activity_date: datetime | None = None

    @classmethod
    def from_row(cls, row) -> "GroupMetrics":
        return cls(
            total_orders=int(row.total_orders or 0),
            total_revenue=round(float(row.total_revenue or 0), 2),
            total_paid_amount=round(float(row.total_paid_amount or 0), 2),
            pending_orders=int(row.pending_orders or 0),
            approved_orders=int(row.approved_orders or 0),
            delivered_orders=int(row.delivered_orders or 0),
            completed_orders=int(row.completed_orders or 0),
            unique_customers_count=int(row.unique_customers_count or 0),
            last_activity_date=row.last_activity_date,
        )

    @property
    def total_outstanding(self) -> float:
        return round(self.total_revenue - self.total_paid_amount, 2)

    @property
    def avg_order_value(self) -> float:
        return average(self.total_revenue, self.total_orders)

    def to_dict(self, as_of: datetime) -> dict:
        return {
            "total_orders": self.total_orders,
            "total_revenue": self.total_revenue,
            "total_paid_amount": self.total_paid_amount,
            "total_outstanding": self.total_outstanding,
            "avg_order_value": self.avg_order_value,
            "pending_orders": self.pending_orders,
            "approved_orders": self.approved_orders,
            "delivered_orders": self.delivered_orders,
            "completed_orders": self.completed_orders,
            "unique_customers_count": self.unique_customers_count,
            "last_activity_date": to_utc_z(self.last_activity_date),
            "days_since_last_activity": days_since(self.last_activity_date, as_of),
        }


@dataclass
class ExecutiveGroup:
    """Records created by a principal that still exists."""
    user: User
    metrics: GroupMetrics = field(default_factory=GroupMetrics)
    group_type: str = GROUP_TYPE_EXECUTIVE

    def to_dict(self, as_of: datetime) -> dict:
        user = self.user
        return {
            "id": user.id,
            "group_type": self.group_type,
            "executive_name": user.full_name,
            "employee_id": user.employee_id,
            "email": user.email,
            "phone": user.phone,
            "department": user.department,
            "position": user.position,
            "role_name": user.role.name if user.role else None,
            **self.metrics.to_dict(as_of),
        }


@dataclass
class OrphanGroup:
    """
    Placeholder group for records whose creator is gone.

    kind is ORPHAN_NULL_CREATOR (creator reference is null) or
    ORPHAN_DANGLING_CREATOR (reference points at a deleted user).
    """
    kind: str
    metrics: GroupMetrics = field(default_factory=GroupMetrics)
    group_type: str = GROUP_TYPE_ORPHAN

    @property
    def sentinel_id(self) -> str:
        return ORPHAN_LABELS[self.kind][0]

    @property
    def label(self) -> str:
        return ORPHAN_LABELS[self.kind][1]

    def to_dict(self, as_of: datetime) -> dict:
        return {
            "id": self.sentinel_id,
            "group_type": self.group_type,
            "orphan_kind": self.kind,
            "executive_name": self.label,
            "employee_id": NOT_AVAILABLE,
            "email": NOT_AVAILABLE,
            "phone": NOT_AVAILABLE,
            "department": NOT_AVAILABLE,
            "position": NOT_AVAILABLE,
            "role_name": "Deleted User",
            **self.metrics.to_dict(as_of),
        }
