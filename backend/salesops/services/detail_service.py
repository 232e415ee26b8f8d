# Overview: Detail reports; full history for one executive or one customer.

from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy import case, false, func

from ..extensions import db
from ..models import Customer, Order, RECORD_KIND_VISIT, User
from salesops.time_utils import days_since, start_of_day, to_utc_z, utcnow
from .report_filters import ReportFilters, date_conditions, scope_conditions, status_conditions
from .report_groups import (
    ORPHAN_DANGLING_CREATOR,
    ORPHAN_LABELS,
    ORPHAN_NULL_CREATOR,
    average,
)
from .reporting_service import ReportNotFoundError, report_failures

TREND_MONTHS = 12
TOP_CUSTOMERS_LIMIT = 50
TOP_EXECUTIVES_LIMIT = 10
TOP_PRODUCTS_LIMIT = 10
RECENT_RECORDS_LIMIT = 100

COMPLETED_VISIT_STATUSES = ("completed", "delivered")
UNGRADED = "Ungraded"


def _money(value) -> float:
    return round(float(value or 0), 2)


def _month_expr():
    return func.strftime("%Y-%m", Order.record_date)


def _order_metrics(conditions: list, counting_conditions: list | None = None) -> dict:
    row = db.session.query(
        func.count(Order.id).label("metric_orders"),
        func.coalesce(func.sum(Order.total_amount), 0).label("total_revenue"),
        func.coalesce(func.sum(Order.paid_amount), 0).label("total_paid"),
        func.max(Order.total_amount).label("max_order_value"),
        func.min(Order.total_amount).label("min_order_value"),
    ).filter(*conditions).one()

    total_revenue = _money(row.total_revenue)
    total_paid = _money(row.total_paid)
    metric_orders = int(row.metric_orders or 0)

    total_orders = metric_orders
    if counting_conditions is not None:
        total_orders = db.session.query(func.count(Order.id)).filter(*counting_conditions).scalar() or 0

    return {
        "total_orders": int(total_orders),
        "total_revenue": total_revenue,
        "total_paid": total_paid,
        "total_outstanding": round(total_revenue - total_paid, 2),
        "avg_order_value": average(total_revenue, metric_orders),
        "max_order_value": _money(row.max_order_value),
        "min_order_value": _money(row.min_order_value),
    }


def _visit_metrics(conditions: list, as_of: datetime) -> dict:
    row = db.session.query(
        func.count(func.distinct(Order.customer_id)).label("unique_locations"),
        func.sum(case((Order.status.in_(COMPLETED_VISIT_STATUSES), 1), else_=0)).label("completed_visits"),
        func.min(Order.record_date).label("first_visit"),
        func.max(Order.record_date).label("last_visit"),
    ).filter(*conditions).one()

    today = start_of_day(as_of)
    visits_today = db.session.query(func.count(Order.id)).filter(
        *conditions,
        Order.record_date >= today,
        Order.record_date < today + timedelta(days=1),
    ).scalar() or 0

    unique_locations = int(row.unique_locations or 0)
    span_days = 1
    if row.first_visit and row.last_visit:
        span_seconds = (row.last_visit - row.first_visit).total_seconds()
        span_days = max(1, math.ceil(span_seconds / 86400))

    return {
        "unique_locations": unique_locations,
        "completed_visits": int(row.completed_visits or 0),
        "total_visits_today": int(visits_today),
        "avg_locations_per_day": round(unique_locations / span_days, 2) if unique_locations else 0,
    }


def _monthly_trend(count_conditions: list, revenue_conditions: list) -> list[dict]:
    """Latest months first. Orders counted over count_conditions, revenue over revenue_conditions."""
    month = _month_expr().label("month")
    counts = (
        db.session.query(month, func.count(Order.id).label("orders"))
        .filter(*count_conditions)
        .group_by("month")
        .order_by(month.desc())
        .limit(TREND_MONTHS)
        .all()
    )
    revenue = dict(
        db.session.query(month, func.coalesce(func.sum(Order.total_amount), 0))
        .filter(*revenue_conditions)
        .group_by("month")
        .all()
    )
    return [
        {"month": row.month, "orders": int(row.orders), "revenue": _money(revenue.get(row.month))}
        for row in counts
    ]


def _record_dict(order: Order, **extra) -> dict:
    return {
        "id": order.id,
        "record_kind": order.record_kind,
        "order_number": order.order_number,
        "status": order.status,
        "delivery_status": order.delivery_status,
        "record_date": to_utc_z(order.record_date),
        "total_amount": _money(order.total_amount),
        "paid_amount": _money(order.paid_amount),
        "notes": order.notes,
        "captured_image_url": order.captured_image_url,
        "atta_kg": order.total_kg,
        **extra,
    }


def _recent_records(conditions: list) -> list[Order]:
    return (
        db.session.query(Order)
        .filter(*conditions)
        .order_by(Order.record_date.desc(), Order.id.desc())
        .limit(RECENT_RECORDS_LIMIT)
        .all()
    )


# ---------------------------------------------------------------------------
# Executive detail
# ---------------------------------------------------------------------------

def _atta_breakdown(orders: list[Order]) -> tuple[dict, list[dict]]:
    """Normalized kg summary and per-grade breakdown over orders with line items."""
    total_kg = 0.0
    total_amount = 0.0
    grades: dict[str, dict] = defaultdict(lambda: {"total_kg": 0.0, "total_amount": 0.0, "item_count": 0})

    for order in orders:
        if not order.items:
            continue
        total_kg += order.total_kg
        total_amount += order.total_amount or 0
        for item in order.items:
            bucket = grades[item.grade or UNGRADED]
            bucket["total_kg"] += item.kg
            bucket["total_amount"] += item.total_amount or 0
            bucket["item_count"] += 1

    total_kg = round(total_kg, 2)
    total_amount = round(total_amount, 2)
    summary = {
        "total_kg": total_kg,
        "total_amount": total_amount,
        "avg_price_per_kg": round(total_amount / total_kg, 2) if total_kg > 0 else 0,
    }
    breakdown = [
        {
            "grade": grade,
            "total_kg": round(bucket["total_kg"], 2),
            "total_amount": round(bucket["total_amount"], 2),
            "item_count": bucket["item_count"],
        }
        for grade, bucket in grades.items()
    ]
    breakdown.sort(key=lambda entry: (-entry["total_kg"], entry["grade"]))
    return summary, breakdown


def _top_customers(conditions: list) -> list[dict]:
    spent = func.coalesce(func.sum(Order.total_amount), 0).label("total_spent")
    rows = (
        db.session.query(
            Customer.id,
            Customer.customer_code,
            Customer.business_name,
            func.count(Order.id).label("total_orders"),
            spent,
        )
        .select_from(Order)
        .join(Customer, Customer.id == Order.customer_id)
        .filter(*conditions)
        .group_by(Customer.id, Customer.customer_code, Customer.business_name)
        .order_by(spent.desc(), Customer.id.asc())
        .limit(TOP_CUSTOMERS_LIMIT)
        .all()
    )
    return [
        {
            "customer_id": row.id,
            "customer_code": row.customer_code,
            "business_name": row.business_name,
            "total_orders": int(row.total_orders),
            "total_spent": _money(row.total_spent),
        }
        for row in rows
    ]


def executive_detail(user_id: int, filters: ReportFilters, *, as_of: datetime | None = None) -> dict:
    """
    Performance detail for one executive.

    Three record sets are used:
    - listing (every record, cancelled included): recent records, top customers
    - counting (everything except rejected): total_orders, monthly order counts
    - metrics (status rule applied): money, kg and visit metrics
    """
    as_of = as_of or utcnow()

    with report_failures("executive performance detail"):
        user = db.session.get(User, user_id)
        if user is None:
            raise ReportNotFoundError("Executive not found")

        listing = [
            Order.created_by_user_id == user.id,
            Order.record_kind == filters.record_kind,
            *date_conditions(filters.date_range),
            *scope_conditions(filters.scope, Order.warehouse_id),
        ]
        counting = listing + [Order.status != "rejected"]
        metric = listing + status_conditions(filters.status_rule)

        metrics = _order_metrics(metric, counting)
        if filters.record_kind == RECORD_KIND_VISIT:
            metrics.update(_visit_metrics(metric, as_of))

        atta_summary, grade_breakdown = _atta_breakdown(db.session.query(Order).filter(*metric).all())

        recent_records = [
            _record_dict(
                order,
                customer={"id": order.customer_id, "business_name": order.customer.business_name if order.customer else None},
            )
            for order in _recent_records(listing)
        ]

        return {
            "entity": {
                "id": user.id,
                "name": user.full_name,
                "employee_id": user.employee_id,
                "email": user.email,
                "phone": user.phone,
                "department": user.department,
                "position": user.position,
                "role": user.role.name if user.role else None,
            },
            "metrics": metrics,
            "monthly_trend": _monthly_trend(counting, metric),
            "top_counterparties": _top_customers(listing),
            "recent_records": recent_records,
            "atta_summary": atta_summary,
            "grade_breakdown": grade_breakdown,
            "date_range": filters.date_range_dict(),
        }


# ---------------------------------------------------------------------------
# Customer detail
# ---------------------------------------------------------------------------

def _creator_labels(creator_ids: set[int | None]) -> dict[int | None, dict]:
    """Display info per creator id; null and dangling ids get the orphan labels."""
    known_ids = [creator_id for creator_id in creator_ids if creator_id is not None]
    users = {}
    if known_ids:
        users = {user.id: user for user in db.session.query(User).filter(User.id.in_(known_ids)).all()}

    labels = {}
    for creator_id in creator_ids:
        user = users.get(creator_id)
        if user is not None:
            labels[creator_id] = {"id": user.id, "name": user.full_name, "employee_id": user.employee_id}
            continue
        kind = ORPHAN_NULL_CREATOR if creator_id is None else ORPHAN_DANGLING_CREATOR
        sentinel_id, label = ORPHAN_LABELS[kind]
        labels[creator_id] = {"id": sentinel_id, "name": label, "employee_id": None}
    return labels


def _top_executives(conditions: list) -> list[dict]:
    spent = func.coalesce(func.sum(Order.total_amount), 0).label("total_spent")
    rows = (
        db.session.query(
            Order.created_by_user_id.label("creator_id"),
            func.count(Order.id).label("total_orders"),
            spent,
        )
        .filter(*conditions)
        .group_by(Order.created_by_user_id)
        .all()
    )
    labels = _creator_labels({row.creator_id for row in rows})

    # Several dangling ids fold into one orphan entry
    merged: dict = {}
    for row in rows:
        label = labels[row.creator_id]
        entry = merged.setdefault(label["id"], {"executive": label, "total_orders": 0, "total_spent": 0.0})
        entry["total_orders"] += int(row.total_orders)
        entry["total_spent"] = round(entry["total_spent"] + _money(row.total_spent), 2)

    ranked = sorted(merged.values(), key=lambda entry: -entry["total_spent"])
    return ranked[:TOP_EXECUTIVES_LIMIT]


def _product_insights(orders: list[Order]) -> list[dict]:
    products: dict[tuple, dict] = {}
    for order in orders:
        for item in order.items:
            key = (item.product_name, item.grade)
            entry = products.setdefault(
                key,
                {
                    "product_name": item.product_name,
                    "grade": item.grade,
                    "total_quantity": 0.0,
                    "total_kg": 0.0,
                    "total_amount": 0.0,
                    "order_ids": set(),
                },
            )
            entry["total_quantity"] += item.quantity or 0
            entry["total_kg"] += item.kg
            entry["total_amount"] += item.total_amount or 0
            entry["order_ids"].add(order.id)

    insights = [
        {
            "product_name": entry["product_name"],
            "grade": entry["grade"],
            "total_quantity": round(entry["total_quantity"], 2),
            "total_kg": round(entry["total_kg"], 2),
            "total_amount": round(entry["total_amount"], 2),
            "order_count": len(entry["order_ids"]),
        }
        for entry in products.values()
    ]
    insights.sort(key=lambda entry: -entry["total_amount"])
    return insights[:TOP_PRODUCTS_LIMIT]


def customer_detail(customer_id: int, filters: ReportFilters, *, as_of: datetime | None = None) -> dict:
    """
    Purchase detail for one customer.

    Customers outside the requester's warehouse scope are reported as not
    found so their existence is not revealed. A DENIED scope (explicit
    warehouse outside the requester's set) yields zeroed metrics and empty
    lists instead.
    """
    as_of = as_of or utcnow()

    with report_failures("customer purchase detail"):
        customer = db.session.get(Customer, customer_id)
        if customer is None:
            raise ReportNotFoundError("Customer not found")
        if not filters.scope.denied and not filters.scope.allows(customer.assigned_warehouse_id):
            raise ReportNotFoundError("Customer not found")

        conditions = [
            Order.customer_id == customer.id,
            Order.record_kind == filters.record_kind,
            *status_conditions(filters.status_rule),
            *date_conditions(filters.date_range),
        ]
        # An explicit warehouse outside the requester's scope reports nothing
        if filters.scope.denied:
            conditions.append(false())

        recent = _recent_records(conditions)
        creators = _creator_labels({order.created_by_user_id for order in recent})
        last_record_date = recent[0].record_date if recent else None

        metrics = _order_metrics(conditions)
        metrics["total_spent"] = metrics.pop("total_revenue")

        trend = _monthly_trend(conditions, conditions)
        for entry in trend:
            entry["spent"] = entry.pop("revenue")

        return {
            "entity": customer.to_dict(),
            "metrics": metrics,
            "days_since_last_order": days_since(last_record_date, as_of, floor=True),
            "monthly_trend": trend,
            "top_counterparties": _top_executives(conditions),
            "product_insights": _product_insights(db.session.query(Order).filter(*conditions).all()),
            "recent_records": [
                _record_dict(order, created_by=creators[order.created_by_user_id]) for order in recent
            ],
            "date_range": filters.date_range_dict(),
        }
