# Overview: Orphan reconciliation; folds records of deleted creators into placeholder groups.

"""
Records keep their creator reference after the creator is hard-deleted, or
arrive with no creator at all. Leaving them out of the executive report
would understate organization-wide totals, so they are gathered into at
most two placeholder groups:

- null_creator: created_by_user_id IS NULL
- dangling_creator: created_by_user_id points at no existing user
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Order, User
from .report_filters import ReportFilters, record_conditions
from .report_groups import (
    ORPHAN_DANGLING_CREATOR,
    ORPHAN_NULL_CREATOR,
    GroupMetrics,
    OrphanGroup,
    executive_metric_columns,
)


def _orphan_group(kind: str, query) -> OrphanGroup | None:
    row = query.one()
    metrics = GroupMetrics.from_row(row)
    if metrics.total_orders == 0:
        return None
    current_app.logger.debug(
        "Orphan group %s: %d records, revenue %.2f",
        kind,
        metrics.total_orders,
        metrics.total_revenue,
    )
    return OrphanGroup(kind=kind, metrics=metrics)


def null_creator_group(filters: ReportFilters) -> OrphanGroup | None:
    query = db.session.query(*executive_metric_columns()).filter(
        *record_conditions(filters),
        Order.created_by_user_id.is_(None),
    )
    return _orphan_group(ORPHAN_NULL_CREATOR, query)


def dangling_creator_group(filters: ReportFilters) -> OrphanGroup | None:
    query = (
        db.session.query(*executive_metric_columns())
        .select_from(Order)
        .outerjoin(User, User.id == Order.created_by_user_id)
        .filter(
            *record_conditions(filters),
            Order.created_by_user_id.isnot(None),
            User.id.is_(None),
        )
    )
    return _orphan_group(ORPHAN_DANGLING_CREATOR, query)


def find_orphan_groups(filters: ReportFilters) -> list[OrphanGroup]:
    """
    Orphan groups for the filtered period, in a fixed order.

    Empty when the report is scoped to a single principal: such a report
    must never surface someone else's records.
    """
    if filters.principal_id is not None:
        return []
    groups = [null_creator_group(filters), dangling_creator_group(filters)]
    return [group for group in groups if group is not None]
