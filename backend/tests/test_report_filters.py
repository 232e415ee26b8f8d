# Overview: Pytest coverage for report parameter validation and filter defaults.

from datetime import date, datetime

import pytest

from salesops.services.report_filters import (
    DEFAULT_ROLE_NAMES,
    DefaultStatusExclusion,
    ExplicitStatusFilter,
    build_report_filters,
)
from salesops.validation import ValidationError


class TestDefaults:
    def test_empty_input(self, db_session):
        filters = build_report_filters()

        assert filters.scope.is_unrestricted
        assert filters.date_range is None
        assert filters.record_kind == "order"
        assert filters.role_names == DEFAULT_ROLE_NAMES
        assert filters.role_ids == ()
        assert filters.sort_order == "desc"
        assert isinstance(filters.status_rule, DefaultStatusExclusion)
        assert not filters.paginated
        assert filters.page_number == 1
        assert filters.page_size == 10

    def test_role_ids_replace_default_role_names(self, db_session):
        filters = build_report_filters(role_ids="3,5,3")

        assert filters.role_ids == (3, 5)
        assert filters.role_names == ()

    def test_activity_all_means_no_filter(self, db_session):
        assert build_report_filters(activity="all").activity is None
        assert build_report_filters(activity="Inactive").activity == "inactive"


class TestDateRange:
    def test_bounds_cover_whole_days(self, db_session):
        filters = build_report_filters(start_date="2026-01-05", end_date="2026-01-10T08:30:00")

        assert filters.date_range.start == datetime(2026, 1, 5, 0, 0, 0)
        assert filters.date_range.end == datetime(2026, 1, 10, 23, 59, 59, 999000)

    def test_accepts_date_objects(self, db_session):
        filters = build_report_filters(start_date=date(2026, 2, 1))

        assert filters.date_range.start == datetime(2026, 2, 1)
        assert filters.date_range.end is None

    def test_end_before_start_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            build_report_filters(start_date="2026-02-10", end_date="2026-02-01")

    def test_bad_date_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            build_report_filters(start_date="not-a-date")


class TestStatusPrecedence:
    def test_explicit_status_replaces_default_exclusion(self, db_session):
        filters = build_report_filters(status="Cancelled")

        assert filters.status_rule == ExplicitStatusFilter(status="cancelled", delivery_status=None)

    def test_delivery_status_alone_is_explicit(self, db_session):
        filters = build_report_filters(delivery_status="returned")

        assert isinstance(filters.status_rule, ExplicitStatusFilter)
        assert filters.status_rule.delivery_status == "returned"


class TestValidation:
    @pytest.mark.parametrize("field, value", [
        ("principal_id", "abc"),
        ("principal_id", "1.5"),
        ("principal_id", "-3"),
        ("warehouse_id", True),
        ("customer_id", 0),
        ("role_ids", "1,x"),
        ("record_kind", "invoice"),
        ("activity", "sleeping"),
        ("sort_order", "up"),
        ("page", "two"),
        ("page", "--5"),
        ("principal_id", "\u00b2"),
        ("customer_id", "\u0663"),
        ("inactive_days", "-1"),
    ])
    def test_malformed_input(self, db_session, field, value):
        with pytest.raises(ValidationError):
            build_report_filters(**{field: value})

    def test_page_and_limit_are_clamped(self, db_session):
        filters = build_report_filters(page="0", limit="500")

        assert filters.page == 1
        assert filters.limit == 100
        assert filters.paginated

        assert build_report_filters(limit=0).limit == 1

    def test_blank_values_are_ignored(self, db_session):
        filters = build_report_filters(principal_id="", department="  ", page="")

        assert filters.principal_id is None
        assert filters.department is None
        assert filters.page is None


class TestScope:
    def test_out_of_scope_warehouse_is_denied_not_raised(self, make_warehouse, make_user):
        w1, w2 = make_warehouse(), make_warehouse()
        user = make_user("Ravi", access=[w1])

        filters = build_report_filters(user, warehouse_id=str(w2.id))

        assert filters.scope.denied
        assert filters.warehouse_id == w2.id
