# Overview: Service-layer operations for list reports; groups records by executive, warehouse or customer.

"""
List reports

Every report takes a ReportFilters built by build_report_filters(), so the
access scope is always resolved before any query runs. A DENIED scope
short-circuits to a zeroed report.

Pipeline per report:
1. aggregate every qualifying group
2. compute the summary over all groups
3. sort, then slice one page (when the report paginates)

Scoping basis:
- executive report: the order's warehouse, and only principals assigned to
  a warehouse in scope are listed
- warehouse report: the order's warehouse
- customer reports: the customer's assigned warehouse
"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import case, func, or_

from ..extensions import db
from ..models import Customer, Order, OrderItem, Role, User, UserWarehouseAccess, Warehouse
from ..validation import ValidationError
from salesops.time_utils import days_since, to_utc_z, utcnow
from .orphan_service import find_orphan_groups
from .pagination_service import paginate, pagination_info, sort_rows
from .report_filters import (
    ACTIVITY_ACTIVE,
    ACTIVITY_INACTIVE,
    ReportFilters,
    record_conditions,
    scope_conditions,
    void_condition,
)
from .report_groups import ExecutiveGroup, GroupMetrics, average, executive_metric_columns
from .unit_service import normalize_to_kg


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


class ReportNotFoundError(ReportError):
    """The entity a detail report was asked for does not exist (or is out of scope)."""
    pass


@contextmanager
def report_failures(report_name: str):
    """Wrap unexpected failures with the name of the report being generated."""
    try:
        yield
    except (ReportError, ValidationError):
        raise
    except Exception as exc:
        raise ReportError(f"Failed to generate {report_name}: {exc}") from exc


ACTIVE_CUSTOMER_DAYS = 30
DEFAULT_INACTIVE_DAYS = 7

EXECUTIVE_SORT_KEYS = (
    "total_revenue",
    "total_orders",
    "total_paid_amount",
    "total_outstanding",
    "avg_order_value",
    "unique_customers_count",
    "last_activity_date",
    "days_since_last_activity",
    "executive_name",
    "employee_id",
)

WAREHOUSE_SORT_KEYS = (
    "total_revenue",
    "total_orders",
    "total_paid",
    "total_outstanding",
    "avg_order_value",
    "warehouse_name",
)

CUSTOMER_SORT_KEYS = (
    "total_spent",
    "total_orders",
    "valid_order_count",
    "total_paid",
    "total_outstanding",
    "avg_order_value",
    "total_kg",
    "first_order_date",
    "last_order_date",
    "days_since_last_order",
    "business_name",
    "outstanding_amount",
)


def _sort_key(filters: ReportFilters, allowed: tuple[str, ...]) -> str:
    sort_by = filters.sort_by or allowed[0]
    if sort_by not in allowed:
        raise ValidationError(f"sort_by must be one of: {', '.join(allowed)}")
    return sort_by


def _money(value) -> float:
    return round(float(value or 0), 2)


def _page(rows: list, filters: ReportFilters, *, always: bool = False) -> tuple[list, dict | None]:
    if not (always or filters.paginated):
        return rows, None
    return paginate(rows, filters.page_number, filters.page_size)


def _empty_page(filters: ReportFilters, *, always: bool = False) -> dict | None:
    if not (always or filters.paginated):
        return None
    return pagination_info(0, filters.page_number, filters.page_size)


def _list_response(summary: dict, rows: list, filters: ReportFilters, pagination: dict | None) -> dict:
    response = {
        "summary": summary,
        "reports": rows,
        "date_range": filters.date_range_dict(),
    }
    if pagination is not None:
        response["pagination"] = pagination
    return response


# ---------------------------------------------------------------------------
# Executive report
# ---------------------------------------------------------------------------

def candidate_principals(filters: ReportFilters) -> list[User]:
    """
    Principals eligible for the executive report: role set, department,
    optional single principal, and (for a restricted scope) assignment to
    one of the scoped warehouses.
    """
    query = db.session.query(User).join(Role, Role.id == User.role_id)

    if filters.principal_id is not None:
        query = query.filter(User.id == filters.principal_id)
    if filters.department:
        query = query.filter(User.department == filters.department)
    if filters.role_ids:
        query = query.filter(User.role_id.in_(filters.role_ids))
    else:
        query = query.filter(Role.name.in_(filters.role_names))

    if filters.scope.warehouse_ids is not None:
        warehouse_ids = filters.scope.sorted_ids()
        access_user_ids = db.session.query(UserWarehouseAccess.user_id).filter(
            UserWarehouseAccess.warehouse_id.in_(warehouse_ids)
        )
        query = query.filter(
            or_(
                User.primary_warehouse_id.in_(warehouse_ids),
                User.id.in_(access_user_ids),
            )
        )

    return query.order_by(User.id.asc()).all()


def executive_groups(filters: ReportFilters) -> list[ExecutiveGroup]:
    principals = candidate_principals(filters)
    if not principals:
        return []

    rows = (
        db.session.query(Order.created_by_user_id.label("user_id"), *executive_metric_columns())
        .filter(
            *record_conditions(filters),
            Order.created_by_user_id.in_([user.id for user in principals]),
        )
        .group_by(Order.created_by_user_id)
        .all()
    )
    metrics_by_user = {row.user_id: GroupMetrics.from_row(row) for row in rows}

    return [
        ExecutiveGroup(user=user, metrics=metrics_by_user.get(user.id, GroupMetrics()))
        for user in principals
    ]


def _apply_activity(groups: list, activity: str | None) -> list:
    if activity == ACTIVITY_ACTIVE:
        return [group for group in groups if group.metrics.total_orders > 0]
    if activity == ACTIVITY_INACTIVE:
        return [group for group in groups if group.metrics.total_orders == 0]
    return groups


def executive_summary(rows: list[dict]) -> dict:
    return {
        "total_executives": len(rows),
        "total_orders_all": sum(row["total_orders"] for row in rows),
        "total_revenue_all": round(sum(row["total_revenue"] for row in rows), 2),
        "total_outstanding_all": round(sum(row["total_outstanding"] for row in rows), 2),
        "avg_order_value_all": average(sum(row["avg_order_value"] for row in rows), len(rows)),
    }


def executive_report(filters: ReportFilters, *, as_of: datetime | None = None) -> dict:
    """
    Per-executive performance, with orphan groups appended after the sorted
    executive rows. The summary covers every row, orphans included, so the
    per-group revenues always add up to total_revenue_all.
    """
    as_of = as_of or utcnow()
    sort_by = _sort_key(filters, EXECUTIVE_SORT_KEYS)

    if filters.scope.denied:
        return _list_response(executive_summary([]), [], filters, _empty_page(filters))

    with report_failures("executive report"):
        groups = _apply_activity(executive_groups(filters), filters.activity)
        orphans = [] if filters.activity == ACTIVITY_INACTIVE else find_orphan_groups(filters)

        executive_rows = sort_rows(
            [group.to_dict(as_of) for group in groups],
            sort_by,
            descending=filters.descending,
        )
        rows = executive_rows + [orphan.to_dict(as_of) for orphan in orphans]

        summary = executive_summary(rows)
        page_rows, pagination = _page(rows, filters)

    return _list_response(summary, page_rows, filters, pagination)


# ---------------------------------------------------------------------------
# Warehouse report
# ---------------------------------------------------------------------------

def _warehouse_row(warehouse: Warehouse | None, row) -> dict:
    total_revenue = _money(row.total_revenue)
    total_paid = _money(row.total_paid)
    total_orders = int(row.total_orders or 0)
    return {
        "id": warehouse.id if warehouse else None,
        "warehouse_name": warehouse.name if warehouse else None,
        "code": warehouse.code if warehouse else None,
        "location": warehouse.location_dict() if warehouse else None,
        "managers": [
            {"id": manager.id, "name": manager.full_name, "email": manager.email}
            for manager in (warehouse.managers if warehouse else [])
        ],
        "total_orders": total_orders,
        "total_revenue": total_revenue,
        "total_paid": total_paid,
        "total_outstanding": round(total_revenue - total_paid, 2),
        "avg_order_value": average(total_revenue, total_orders),
    }


def warehouse_summary(rows: list[dict]) -> dict:
    return {
        "total_warehouses": len(rows),
        "total_orders_all": sum(row["total_orders"] for row in rows),
        "total_revenue_all": round(sum(row["total_revenue"] for row in rows), 2),
        "total_outstanding_all": round(sum(row["total_outstanding"] for row in rows), 2),
        "avg_order_value_all": average(sum(row["avg_order_value"] for row in rows), len(rows)),
    }


def warehouse_report(filters: ReportFilters) -> dict:
    """Revenue per warehouse. Orders without a warehouse form one unnamed group."""
    sort_by = _sort_key(filters, WAREHOUSE_SORT_KEYS)

    if filters.scope.denied:
        return _list_response(warehouse_summary([]), [], filters, _empty_page(filters))

    with report_failures("warehouse report"):
        query = db.session.query(
            Order.warehouse_id.label("warehouse_id"),
            func.count(Order.id).label("total_orders"),
            func.coalesce(func.sum(Order.total_amount), 0).label("total_revenue"),
            func.coalesce(func.sum(Order.paid_amount), 0).label("total_paid"),
        ).filter(*record_conditions(filters))

        if filters.principal_id is not None:
            query = query.filter(Order.created_by_user_id == filters.principal_id)
        if filters.customer_id is not None:
            query = query.filter(Order.customer_id == filters.customer_id)

        aggregates = query.group_by(Order.warehouse_id).all()

        warehouse_ids = [row.warehouse_id for row in aggregates if row.warehouse_id is not None]
        warehouses = {}
        if warehouse_ids:
            warehouses = {
                warehouse.id: warehouse
                for warehouse in db.session.query(Warehouse).filter(Warehouse.id.in_(warehouse_ids)).all()
            }

        rows = sort_rows(
            [_warehouse_row(warehouses.get(row.warehouse_id), row) for row in aggregates],
            sort_by,
            descending=filters.descending,
        )
        summary = warehouse_summary(rows)
        page_rows, pagination = _page(rows, filters)

    return _list_response(summary, page_rows, filters, pagination)


# ---------------------------------------------------------------------------
# Customer report
# ---------------------------------------------------------------------------

def _void_zeroed(column):
    return func.coalesce(func.sum(case((void_condition(), 0), else_=column)), 0)


def _customer_conditions(filters: ReportFilters) -> list:
    """Record clauses for customer reports; scope is on the customer's assigned warehouse."""
    conditions = record_conditions(filters, exclude_delivery=False, apply_scope=False)
    conditions.extend(scope_conditions(filters.scope, Customer.assigned_warehouse_id))
    if filters.customer_id is not None:
        conditions.append(Order.customer_id == filters.customer_id)
    if filters.principal_id is not None:
        conditions.append(Order.created_by_user_id == filters.principal_id)
    return conditions


def customer_kg_totals(filters: ReportFilters, customer_ids: list[int] | None = None) -> dict[int, float]:
    """Normalized kilograms per customer; every line item is converted before summing."""
    query = (
        db.session.query(Order.customer_id, OrderItem.quantity, OrderItem.unit, OrderItem.packaging)
        .select_from(OrderItem)
        .join(Order, Order.id == OrderItem.order_id)
        .join(Customer, Customer.id == Order.customer_id)
        .filter(*_customer_conditions(filters), ~void_condition())
    )
    if customer_ids is not None:
        query = query.filter(Order.customer_id.in_(customer_ids))

    totals: dict[int, float] = defaultdict(float)
    for customer_id, quantity, unit, packaging in query.all():
        totals[customer_id] += normalize_to_kg(quantity, unit, packaging)
    return {customer_id: round(kg, 2) for customer_id, kg in totals.items()}


def _customer_row(customer: Customer, row, kg: float, as_of: datetime) -> dict:
    total_spent = _money(row.total_spent)
    total_paid = _money(row.total_paid)
    valid_order_count = int(row.valid_order_count or 0)
    return {
        "id": customer.id,
        "customer_code": customer.customer_code,
        "business_name": customer.business_name,
        "contact_person": customer.contact_person,
        "phone": customer.phone,
        "email": customer.email,
        "customer_type": customer.customer_type,
        "city": customer.city,
        "state": customer.state,
        "is_active": bool(customer.is_active),
        "credit_limit": _money(customer.credit_limit),
        "outstanding_amount": _money(customer.outstanding_amount),
        "total_orders": int(row.total_orders or 0),
        "valid_order_count": valid_order_count,
        "total_spent": total_spent,
        "total_paid": total_paid,
        "total_outstanding": round(total_spent - total_paid, 2),
        "avg_order_value": average(total_spent, valid_order_count),
        "first_order_date": to_utc_z(row.first_order_date),
        "last_order_date": to_utc_z(row.last_order_date),
        "days_since_last_order": days_since(row.last_order_date, as_of),
        "pending_orders": int(row.pending_orders or 0),
        "completed_orders": int(row.completed_orders or 0),
        "total_kg": kg,
        "lifetime_value": total_spent,
    }


def customer_summary(rows: list[dict], inactive_days: int | None = None) -> dict:
    positive_averages = [row["avg_order_value"] for row in rows if row["avg_order_value"] > 0]
    inactive = 0
    if inactive_days is not None:
        inactive = sum(
            1 for row in rows
            if row["days_since_last_order"] is not None and row["days_since_last_order"] >= inactive_days
        )
    return {
        "total_customers": len(rows),
        "active_customers": sum(
            1 for row in rows
            if row["days_since_last_order"] is not None and row["days_since_last_order"] <= ACTIVE_CUSTOMER_DAYS
        ),
        "inactive_customers": inactive,
        "total_revenue_all": round(sum(row["total_spent"] for row in rows), 2),
        "total_outstanding_all": round(sum(row["total_outstanding"] for row in rows), 2),
        "avg_customer_value": average(sum(positive_averages), len(positive_averages)),
        "total_kg": round(sum(row["total_kg"] for row in rows), 2),
    }


def customer_report(filters: ReportFilters, *, as_of: datetime | None = None) -> dict:
    """
    Purchase history per customer, always paginated.

    Cancelled or returned orders are counted in total_orders but contribute
    nothing to money or kg totals. When inactive_days is set the returned
    rows are narrowed to customers idle for at least that many days; the
    summary still covers every customer.
    """
    as_of = as_of or utcnow()
    sort_by = _sort_key(filters, CUSTOMER_SORT_KEYS)

    if filters.scope.denied:
        return _list_response(customer_summary([]), [], filters, _empty_page(filters, always=True))

    with report_failures("customer report"):
        aggregates = (
            db.session.query(
                Order.customer_id.label("customer_id"),
                func.count(Order.id).label("total_orders"),
                func.sum(case((void_condition(), 0), else_=1)).label("valid_order_count"),
                _void_zeroed(Order.total_amount).label("total_spent"),
                _void_zeroed(Order.paid_amount).label("total_paid"),
                func.min(Order.record_date).label("first_order_date"),
                func.max(Order.record_date).label("last_order_date"),
                func.sum(case((Order.status == "pending", 1), else_=0)).label("pending_orders"),
                func.sum(case((Order.status == "completed", 1), else_=0)).label("completed_orders"),
            )
            .join(Customer, Customer.id == Order.customer_id)
            .filter(*_customer_conditions(filters))
            .group_by(Order.customer_id)
            .all()
        )

        customer_ids = [row.customer_id for row in aggregates]
        customers = {}
        if customer_ids:
            customers = {
                customer.id: customer
                for customer in db.session.query(Customer).filter(Customer.id.in_(customer_ids)).all()
            }
        kg_totals = customer_kg_totals(filters)

        rows = [
            _customer_row(customers[row.customer_id], row, kg_totals.get(row.customer_id, 0), as_of)
            for row in aggregates
        ]
        summary = customer_summary(rows, filters.inactive_days)

        if filters.inactive_days is not None:
            rows = [
                row for row in rows
                if row["days_since_last_order"] is not None
                and row["days_since_last_order"] >= filters.inactive_days
            ]

        rows = sort_rows(rows, sort_by, descending=filters.descending)
        page_rows, pagination = _page(rows, filters, always=True)

    return _list_response(summary, page_rows, filters, pagination)


# ---------------------------------------------------------------------------
# Inactive customers
# ---------------------------------------------------------------------------

def _latest_orders(filters: ReportFilters, last_dates: dict[int, datetime]) -> dict[int, Order]:
    """Most recent qualifying order per customer (highest id wins on equal dates)."""
    if not last_dates:
        return {}
    candidates = (
        db.session.query(Order)
        .filter(
            *record_conditions(filters, apply_scope=False),
            Order.customer_id.in_(list(last_dates)),
            Order.record_date.in_(sorted(set(last_dates.values()))),
        )
        .order_by(Order.id.asc())
        .all()
    )
    latest = {}
    for order in candidates:
        if order.record_date == last_dates.get(order.customer_id):
            latest[order.customer_id] = order
    return latest


def inactive_customers_report(
    filters: ReportFilters,
    *,
    days: int = DEFAULT_INACTIVE_DAYS,
    as_of: datetime | None = None,
) -> dict:
    """
    Active customers whose last qualifying order is more than `days` days
    before as_of. Customers that never ordered are not listed. Sorted by
    days since last order, longest idle first.
    """
    as_of = as_of or utcnow()

    if filters.scope.denied:
        return {
            "count": 0,
            "days": days,
            "customers": [],
            "pagination": pagination_info(0, filters.page_number, filters.page_size),
        }

    with report_failures("inactive customers report"):
        cutoff = as_of - timedelta(days=days)

        conditions = record_conditions(filters, apply_scope=False)
        conditions.extend(scope_conditions(filters.scope, Customer.assigned_warehouse_id))
        conditions.append(Customer.is_active.is_(True))
        if filters.customer_id is not None:
            conditions.append(Customer.id == filters.customer_id)

        aggregates = (
            db.session.query(
                Customer,
                func.max(Order.record_date).label("last_order_date"),
                func.count(Order.id).label("total_orders"),
                func.coalesce(func.sum(Order.total_amount), 0).label("total_amount"),
                func.coalesce(func.sum(Order.paid_amount), 0).label("total_paid"),
            )
            .join(Order, Order.customer_id == Customer.id)
            .filter(*conditions)
            .group_by(Customer.id)
            .having(func.max(Order.record_date) < cutoff)
            .all()
        )

        rows = []
        for customer, last_order_date, total_orders, total_amount, total_paid in aggregates:
            total_amount = _money(total_amount)
            total_paid = _money(total_paid)
            rows.append(
                {
                    "id": customer.id,
                    "customer_code": customer.customer_code,
                    "business_name": customer.business_name,
                    "contact_person": customer.contact_person,
                    "phone": customer.phone,
                    "city": customer.city,
                    "state": customer.state,
                    "assigned_warehouse_id": customer.assigned_warehouse_id,
                    "last_order_date": last_order_date,
                    "days_since_last_order": days_since(last_order_date, as_of),
                    "total_orders": int(total_orders or 0),
                    "total_amount": total_amount,
                    "total_paid": total_paid,
                    "outstanding": round(total_amount - total_paid, 2),
                }
            )

        rows = sort_rows(rows, "days_since_last_order", descending=True)
        page_rows, pagination = paginate(rows, filters.page_number, filters.page_size)

        latest = _latest_orders(filters, {row["id"]: row["last_order_date"] for row in page_rows})
        for row in page_rows:
            order = latest.get(row["id"])
            row["last_order_number"] = order.order_number if order else None
            row["last_order_amount"] = _money(order.total_amount) if order else 0
            row["last_order_date"] = to_utc_z(row["last_order_date"])

    return {
        "count": len(rows),
        "days": days,
        "customers": page_rows,
        "pagination": pagination,
    }
