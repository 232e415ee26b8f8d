# Overview: Pytest coverage for date-wise and month-wise executive breakdowns.

from salesops.services import breakdown_service, reporting_service
from salesops.services.report_filters import build_report_filters


def _filters(requester=None, **params):
    return build_report_filters(requester, **params)


def _keys(entries):
    return [(entry["period"], entry["executive_name"], entry["total_revenue"]) for entry in entries]


class TestBreakdowns:
    def test_date_wise(self, make_user, make_customer, make_order, ago):
        ravi = make_user("Ravi")
        customer = make_customer()
        make_order(customer, created_by=ravi, total=100, record_date=ago(1))
        make_order(customer, created_by=ravi, total=50, record_date=ago(1))
        make_order(customer, created_by=ravi, total=30, record_date=ago(2))
        make_order(customer, created_by=ravi, total=999, status="cancelled", record_date=ago(2))
        make_order(customer, created_by=None, total=20, record_date=ago(1))

        entries = breakdown_service.date_wise_breakdown(_filters())

        assert _keys(entries) == [
            ("2026-06-28", "Ravi Kumar", 30),
            ("2026-06-29", "Deleted User", 20),
            ("2026-06-29", "Ravi Kumar", 150),
        ]
        ravi_day = entries[2]
        assert ravi_day["executive_id"] == ravi.id
        assert ravi_day["order_count"] == 2
        assert ravi_day["role_name"] == "Sales Executive"
        assert entries[1]["executive_id"] == "deleted-user"
        assert entries[1]["employee_id"] == "N/A"

    def test_month_wise_reconciles_with_executive_report(self, make_user, make_customer, make_order, as_of, ago):
        ravi, asha = make_user("Ravi"), make_user("Asha")
        customer = make_customer()
        make_order(customer, created_by=ravi, total=100, record_date=ago(1))
        make_order(customer, created_by=ravi, total=200, record_date=ago(40))
        make_order(customer, created_by=asha, total=70, record_date=ago(3))
        make_order(customer, created_by=None, total=11, record_date=ago(50))
        make_order(customer, created_by=424242, total=9, record_date=ago(50))

        filters = _filters()
        entries = breakdown_service.month_wise_breakdown(filters)
        report = reporting_service.executive_report(filters, as_of=as_of)

        assert _keys(entries) == [
            ("2026-05", "Deleted User", 11),
            ("2026-05", "Deleted User (Orphaned)", 9),
            ("2026-05", "Ravi Kumar", 200),
            ("2026-06", "Asha Kumar", 70),
            ("2026-06", "Ravi Kumar", 100),
        ]
        assert sum(entry["total_revenue"] for entry in entries) == report["summary"]["total_revenue_all"]
        assert sum(entry["order_count"] for entry in entries) == report["summary"]["total_orders_all"]

    def test_single_principal_has_no_orphans(self, make_user, make_customer, make_order, ago):
        ravi = make_user("Ravi")
        customer = make_customer()
        make_order(customer, created_by=ravi, total=100)
        make_order(customer, created_by=None, total=20)

        entries = breakdown_service.date_wise_breakdown(_filters(principal_id=ravi.id))

        assert [entry["executive_id"] for entry in entries] == [ravi.id]

    def test_empty_when_denied_or_inactive(self, make_warehouse, make_user, make_customer, make_order):
        w1, w2 = make_warehouse(), make_warehouse()
        requester = make_user("Lead", role="Manager", access=[w1])
        ravi = make_user("Ravi", primary_warehouse=w2)
        make_order(make_customer(), created_by=ravi, warehouse=w2)

        assert breakdown_service.date_wise_breakdown(_filters(requester, warehouse_id=w2.id)) == []
        assert breakdown_service.date_wise_breakdown(_filters(activity="inactive")) == []

    def test_scope_applies_to_order_warehouse(self, make_warehouse, make_user, make_customer, make_order):
        w1, w2 = make_warehouse(), make_warehouse()
        requester = make_user("Lead", role="Manager", access=[w1])
        ravi = make_user("Ravi", access=[w1, w2])
        customer = make_customer()
        make_order(customer, created_by=ravi, warehouse=w1, total=10)
        make_order(customer, created_by=ravi, warehouse=w2, total=500)
        make_order(customer, created_by=None, warehouse=w2, total=5)

        entries = breakdown_service.month_wise_breakdown(_filters(requester))

        assert [(entry["executive_name"], entry["total_revenue"]) for entry in entries] == [("Ravi Kumar", 10)]
