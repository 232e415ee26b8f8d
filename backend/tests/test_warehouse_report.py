# Overview: Pytest coverage for the per-warehouse revenue report.

from salesops.services import reporting_service
from salesops.services.report_filters import build_report_filters


def _report(requester=None, **params):
    return reporting_service.warehouse_report(build_report_filters(requester, **params))


class TestWarehouseReport:
    def test_groups_by_order_warehouse(self, make_warehouse, make_user, make_customer, make_order):
        manager = make_user("Meena", role="Manager")
        east = make_warehouse("Delhi (East)", area="East", managers=[manager])
        west = make_warehouse("Delhi (West)", area="West")
        customer = make_customer(warehouse=west)
        make_order(customer, warehouse=east, total=100, paid=100)
        make_order(customer, warehouse=east, total=300, paid=50)
        make_order(customer, warehouse=west, total=50)
        make_order(customer, warehouse=west, total=80, status="cancelled")

        report = _report()
        rows = {row["warehouse_name"]: row for row in report["reports"]}

        assert [row["warehouse_name"] for row in report["reports"]] == ["Delhi (East)", "Delhi (West)"]
        assert rows["Delhi (East)"]["total_orders"] == 2
        assert rows["Delhi (East)"]["total_revenue"] == 400
        assert rows["Delhi (East)"]["total_paid"] == 150
        assert rows["Delhi (East)"]["total_outstanding"] == 250
        assert rows["Delhi (East)"]["avg_order_value"] == 200
        assert rows["Delhi (East)"]["location"] == {"city": "Delhi", "state": "Delhi", "area": "East"}
        assert rows["Delhi (East)"]["managers"] == [
            {"id": manager.id, "name": "Meena Kumar", "email": manager.email}
        ]
        assert rows["Delhi (West)"]["total_revenue"] == 50

        assert report["summary"] == {
            "total_warehouses": 2,
            "total_orders_all": 3,
            "total_revenue_all": 450,
            "total_outstanding_all": 300,
            "avg_order_value_all": 125,
        }

    def test_orders_without_warehouse_form_one_unnamed_group(self, make_warehouse, make_customer, make_order):
        w1 = make_warehouse()
        customer = make_customer()
        make_order(customer, warehouse=w1, total=10)
        make_order(customer, total=20)
        make_order(customer, total=30)

        rows = _report()["reports"]
        unnamed = [row for row in rows if row["id"] is None]

        assert len(unnamed) == 1
        assert unnamed[0]["warehouse_name"] is None
        assert unnamed[0]["total_revenue"] == 50

    def test_restricted_scope_only_sees_own_warehouses(self, make_warehouse, make_user, make_customer, make_order):
        w1, w2 = make_warehouse(), make_warehouse()
        requester = make_user("Lead", role="Manager", access=[w1])
        customer = make_customer()
        make_order(customer, warehouse=w1, total=10)
        make_order(customer, warehouse=w2, total=20)
        make_order(customer, total=40)

        report = _report(requester)

        assert [row["id"] for row in report["reports"]] == [w1.id]
        assert report["summary"]["total_revenue_all"] == 10

    def test_denied_warehouse_is_zeroed(self, make_warehouse, make_user, make_customer, make_order):
        w1, w2 = make_warehouse(), make_warehouse()
        requester = make_user("Lead", role="Manager", access=[w1])
        make_order(make_customer(), warehouse=w2, total=20)

        report = _report(requester, warehouse_id=w2.id, page=1)

        assert report["reports"] == []
        assert report["summary"]["total_warehouses"] == 0
        assert report["summary"]["total_revenue_all"] == 0
        assert report["pagination"]["total_records"] == 0

    def test_sorting_by_name(self, make_warehouse, make_customer, make_order):
        customer = make_customer()
        for name in ("Jammu", "Ambala", "Ludhiana"):
            make_order(customer, warehouse=make_warehouse(name), total=10)

        rows = _report(sort_by="warehouse_name", sort_order="asc")["reports"]

        assert [row["warehouse_name"] for row in rows] == ["Ambala", "Jammu", "Ludhiana"]
