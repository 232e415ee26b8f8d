# Overview: Date-wise and month-wise executive breakdowns consumed by spreadsheet exports.

"""
Breakdowns split the executive report's qualifying records by period. They
apply the same scope, status rule, role and department filters and the
same orphan rules as executive_report(), so per-period totals add up to the
list report's totals for the same filters.
"""

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Order, User
from .report_filters import ACTIVITY_INACTIVE, ReportFilters, record_conditions
from .report_groups import (
    NOT_AVAILABLE,
    ORPHAN_DANGLING_CREATOR,
    ORPHAN_LABELS,
    ORPHAN_NULL_CREATOR,
)
from .reporting_service import candidate_principals, report_failures

PERIOD_DAY = "day"
PERIOD_MONTH = "month"

PERIOD_FORMATS = {
    PERIOD_DAY: "%Y-%m-%d",
    PERIOD_MONTH: "%Y-%m",
}


def _period_rows(filters: ReportFilters, fmt: str, *extra_conditions, outer_join_users: bool = False):
    period = func.strftime(fmt, Order.record_date).label("period")
    query = db.session.query(
        period,
        Order.created_by_user_id.label("creator_id"),
        func.count(Order.id).label("order_count"),
        func.coalesce(func.sum(Order.total_amount), 0).label("total_revenue"),
    ).select_from(Order)
    if outer_join_users:
        query = query.outerjoin(User, User.id == Order.created_by_user_id)
    return (
        query.filter(*record_conditions(filters), *extra_conditions)
        .group_by("period", Order.created_by_user_id)
        .all()
    )


def _orphan_entries(filters: ReportFilters, fmt: str) -> list[dict]:
    """Per-period orphan buckets; dangling creators fold into one label per period."""
    scans = (
        (ORPHAN_NULL_CREATOR, _period_rows(filters, fmt, Order.created_by_user_id.is_(None))),
        (
            ORPHAN_DANGLING_CREATOR,
            _period_rows(
                filters,
                fmt,
                Order.created_by_user_id.isnot(None),
                User.id.is_(None),
                outer_join_users=True,
            ),
        ),
    )

    entries: dict[tuple, dict] = {}
    for kind, rows in scans:
        sentinel_id, label = ORPHAN_LABELS[kind]
        for row in rows:
            entry = entries.setdefault(
                (row.period, sentinel_id),
                {
                    "period": row.period,
                    "executive_id": sentinel_id,
                    "executive_name": label,
                    "employee_id": NOT_AVAILABLE,
                    "department": NOT_AVAILABLE,
                    "position": NOT_AVAILABLE,
                    "role_name": NOT_AVAILABLE,
                    "order_count": 0,
                    "total_revenue": 0.0,
                },
            )
            entry["order_count"] += int(row.order_count)
            entry["total_revenue"] = round(entry["total_revenue"] + float(row.total_revenue or 0), 2)
    return list(entries.values())


def executive_breakdown(filters: ReportFilters, period: str = PERIOD_DAY) -> list[dict]:
    """Order count and revenue per (period, executive), sorted by period then name."""
    fmt = PERIOD_FORMATS[period]

    if filters.scope.denied or filters.activity == ACTIVITY_INACTIVE:
        return []

    with report_failures(f"{period}-wise breakdown"):
        principals = {user.id: user for user in candidate_principals(filters)}
        entries = []
        if principals:
            for row in _period_rows(filters, fmt, Order.created_by_user_id.in_(list(principals))):
                user = principals[row.creator_id]
                entries.append(
                    {
                        "period": row.period,
                        "executive_id": user.id,
                        "executive_name": user.full_name,
                        "employee_id": user.employee_id,
                        "department": user.department,
                        "position": user.position,
                        "role_name": user.role.name if user.role else NOT_AVAILABLE,
                        "order_count": int(row.order_count),
                        "total_revenue": round(float(row.total_revenue or 0), 2),
                    }
                )

        if filters.principal_id is None:
            entries.extend(_orphan_entries(filters, fmt))

    entries.sort(key=lambda entry: (entry["period"], entry["executive_name"] or ""))
    return entries


def date_wise_breakdown(filters: ReportFilters) -> list[dict]:
    return executive_breakdown(filters, PERIOD_DAY)


def month_wise_breakdown(filters: ReportFilters) -> list[dict]:
    return executive_breakdown(filters, PERIOD_MONTH)
