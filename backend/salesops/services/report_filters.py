# Overview: Report filter builder; validates report parameters once and turns them into query clauses.

"""
Report Filters

build_report_filters() is the single validation boundary for report input.
It returns an immutable ReportFilters descriptor that every report consumes;
nothing downstream re-checks raw parameters.

Access scope is resolved here, so every report that takes a ReportFilters
has already been through resolve_scope().

STATUS PRECEDENCE:
- No explicit status/delivery_status: DefaultStatusExclusion drops
  cancelled/rejected orders (and cancelled deliveries) from the inputs.
- Explicit status and/or delivery_status: ExplicitStatusFilter replaces the
  default exclusion entirely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from sqlalchemy import func, or_

from ..models import Order, User, RECORD_KIND_ORDER, RECORD_KINDS
from ..validation import (
    ValidationError,
    parse_choice,
    parse_date,
    parse_id,
    parse_id_list,
    parse_int,
    parse_optional_text,
)
from salesops.time_utils import end_of_day, start_of_day, to_utc_z
from .warehouse_access_service import AccessScope, UNRESTRICTED, resolve_scope


DEFAULT_ROLE_NAMES = ("Sales Executive", "Manager")

EXCLUDED_STATUSES = ("cancelled", "rejected")
EXCLUDED_DELIVERY_STATUSES = ("cancelled",)

# Orders in these states are still counted but contribute no money or kg
VOID_DELIVERY_STATUSES = ("cancelled", "returned")

ACTIVITY_ACTIVE = "active"
ACTIVITY_INACTIVE = "inactive"

SORT_ASC = "asc"
SORT_DESC = "desc"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class DateRange:
    """Inclusive range: start at 00:00:00.000, end at 23:59:59.999."""
    start: datetime | None = None
    end: datetime | None = None

    def to_dict(self) -> dict:
        return {"start_date": to_utc_z(self.start), "end_date": to_utc_z(self.end)}


@dataclass(frozen=True)
class DefaultStatusExclusion:
    excluded_statuses: tuple[str, ...] = EXCLUDED_STATUSES
    excluded_delivery_statuses: tuple[str, ...] = EXCLUDED_DELIVERY_STATUSES


@dataclass(frozen=True)
class ExplicitStatusFilter:
    status: str | None = None
    delivery_status: str | None = None


StatusRule = Union[DefaultStatusExclusion, ExplicitStatusFilter]


@dataclass(frozen=True)
class ReportFilters:
    """
    Normalized report parameters.

    Defaults: record_kind "order", role_names DEFAULT_ROLE_NAMES when no
    role ids are given, sort_order "desc", status_rule
    DefaultStatusExclusion, scope unrestricted. page/limit stay None when
    the caller did not ask for a page.
    """
    scope: AccessScope = UNRESTRICTED
    date_range: DateRange | None = None
    principal_id: int | None = None
    customer_id: int | None = None
    department: str | None = None
    role_ids: tuple[int, ...] = ()
    role_names: tuple[str, ...] = DEFAULT_ROLE_NAMES
    warehouse_id: int | None = None
    record_kind: str = RECORD_KIND_ORDER
    activity: str | None = None
    status_rule: StatusRule = field(default_factory=DefaultStatusExclusion)
    inactive_days: int | None = None
    sort_by: str | None = None
    sort_order: str = SORT_DESC
    page: int | None = None
    limit: int | None = None

    @property
    def paginated(self) -> bool:
        return self.page is not None or self.limit is not None

    @property
    def page_number(self) -> int:
        return self.page or 1

    @property
    def page_size(self) -> int:
        return self.limit or DEFAULT_PAGE_SIZE

    @property
    def descending(self) -> bool:
        return self.sort_order == SORT_DESC

    def date_range_dict(self) -> dict | None:
        return self.date_range.to_dict() if self.date_range else None


def clamp_page(value: Any) -> int | None:
    page = parse_int(value, "page")
    if page is None:
        return None
    return max(1, page)


def clamp_limit(value: Any) -> int | None:
    limit = parse_int(value, "limit")
    if limit is None:
        return None
    return max(1, min(MAX_PAGE_SIZE, limit))


def _build_date_range(start_date: Any, end_date: Any) -> DateRange | None:
    start_day = parse_date(start_date, "start_date")
    end_day = parse_date(end_date, "end_date")
    if start_day is None and end_day is None:
        return None
    if start_day and end_day and end_day < start_day:
        raise ValidationError("end_date must not be before start_date")
    return DateRange(
        start=start_of_day(start_day) if start_day else None,
        end=end_of_day(end_day) if end_day else None,
    )


def _build_status_rule(status: Any, delivery_status: Any) -> StatusRule:
    status = parse_optional_text(status)
    delivery_status = parse_optional_text(delivery_status)
    if status is None and delivery_status is None:
        return DefaultStatusExclusion()
    return ExplicitStatusFilter(
        status=status.lower() if status else None,
        delivery_status=delivery_status.lower() if delivery_status else None,
    )


def build_report_filters(
    requesting_user: User | None = None,
    *,
    start_date: Any = None,
    end_date: Any = None,
    principal_id: Any = None,
    customer_id: Any = None,
    department: Any = None,
    role_ids: Any = None,
    warehouse_id: Any = None,
    record_kind: Any = None,
    activity: Any = None,
    status: Any = None,
    delivery_status: Any = None,
    inactive_days: Any = None,
    sort_by: Any = None,
    sort_order: Any = None,
    page: Any = None,
    limit: Any = None,
) -> ReportFilters:
    """
    Validate raw report parameters and resolve the requester's scope.

    Raises ValidationError for malformed input. Never raises for access
    problems: an out-of-scope warehouse yields a DENIED scope instead.
    """
    parsed_warehouse_id = parse_id(warehouse_id, "warehouse_id")
    parsed_role_ids = parse_id_list(role_ids, "role_ids")

    activity_value = parse_choice(activity, "activity", (ACTIVITY_ACTIVE, ACTIVITY_INACTIVE, "all"))
    if activity_value == "all":
        activity_value = None

    return ReportFilters(
        scope=resolve_scope(requesting_user, parsed_warehouse_id),
        date_range=_build_date_range(start_date, end_date),
        principal_id=parse_id(principal_id, "principal_id"),
        customer_id=parse_id(customer_id, "customer_id"),
        department=parse_optional_text(department),
        role_ids=parsed_role_ids,
        role_names=() if parsed_role_ids else DEFAULT_ROLE_NAMES,
        warehouse_id=parsed_warehouse_id,
        record_kind=parse_choice(record_kind, "record_kind", RECORD_KINDS, default=RECORD_KIND_ORDER),
        activity=activity_value,
        status_rule=_build_status_rule(status, delivery_status),
        inactive_days=parse_int(inactive_days, "inactive_days", minimum=0),
        sort_by=parse_optional_text(sort_by),
        sort_order=parse_choice(sort_order, "sort_order", (SORT_ASC, SORT_DESC), default=SORT_DESC),
        page=clamp_page(page),
        limit=clamp_limit(limit),
    )


# ---------------------------------------------------------------------------
# Query clauses
# ---------------------------------------------------------------------------

def status_conditions(rule: StatusRule, *, exclude_delivery: bool = True) -> list:
    if isinstance(rule, ExplicitStatusFilter):
        conditions = []
        if rule.status:
            conditions.append(Order.status == rule.status)
        if rule.delivery_status:
            conditions.append(Order.delivery_status == rule.delivery_status)
        return conditions

    conditions = [Order.status.notin_(rule.excluded_statuses)]
    if exclude_delivery:
        conditions.append(
            or_(
                Order.delivery_status.is_(None),
                Order.delivery_status.notin_(rule.excluded_delivery_statuses),
            )
        )
    return conditions


def date_conditions(date_range: DateRange | None) -> list:
    if date_range is None:
        return []
    conditions = []
    if date_range.start:
        conditions.append(Order.record_date >= date_range.start)
    if date_range.end:
        conditions.append(Order.record_date <= date_range.end)
    return conditions


def scope_conditions(scope: AccessScope, column) -> list:
    if scope.warehouse_ids is None:
        return []
    return [column.in_(scope.sorted_ids())]


def record_conditions(filters: ReportFilters, *, exclude_delivery: bool = True, apply_scope: bool = True) -> list:
    """Kind, status rule, date range and (order-warehouse) scope clauses."""
    conditions = [Order.record_kind == filters.record_kind]
    conditions.extend(status_conditions(filters.status_rule, exclude_delivery=exclude_delivery))
    conditions.extend(date_conditions(filters.date_range))
    if apply_scope:
        conditions.extend(scope_conditions(filters.scope, Order.warehouse_id))
    return conditions


def void_condition():
    """Orders counted for visibility but excluded from money and kg totals."""
    return or_(
        Order.status.in_(EXCLUDED_STATUSES),
        func.coalesce(Order.delivery_status, "").in_(VOID_DELIVERY_STATUSES),
    )
