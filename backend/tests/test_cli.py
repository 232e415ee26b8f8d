# Overview: Pytest coverage for the warehouses and reports CLI groups.

import json

import pytest

from salesops.models import Warehouse
from salesops.services.warehouse_service import DEFAULT_WAREHOUSES


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


class TestWarehouseCommands:
    def test_seed_is_idempotent(self, runner, db_session):
        first = runner.invoke(args=['warehouses', 'seed'])
        second = runner.invoke(args=['warehouses', 'seed'])

        assert first.exit_code == 0
        assert 'PASS Created warehouse: Delhi (East) (DEL-E)' in first.stdout
        assert second.exit_code == 0
        assert 'already present' in second.stdout
        assert db_session.query(Warehouse).count() == len(DEFAULT_WAREHOUSES) == 7

    def test_seed_keeps_existing_rows(self, runner, db_session):
        custom = Warehouse(name="Jammu Depot", code="JAM", city="Jammu", state="Jammu & Kashmir")
        db_session.add(custom)
        db_session.commit()

        runner.invoke(args=['warehouses', 'seed'])

        jammu = db_session.query(Warehouse).filter_by(code="JAM").all()
        assert [warehouse.name for warehouse in jammu] == ["Jammu Depot"]
        assert db_session.query(Warehouse).count() == 7

    def test_list(self, runner, make_warehouse):
        make_warehouse("Ludhiana", city="Ludhiana", state="Punjab")

        result = runner.invoke(args=['warehouses', 'list'])

        assert result.exit_code == 0
        assert 'Ludhiana' in result.stdout
        assert 'Punjab' in result.stdout

    def test_list_empty(self, runner, db_session):
        result = runner.invoke(args=['warehouses', 'list'])

        assert 'No warehouses found.' in result.stdout


class TestReportCommands:
    def test_executives_json(self, runner, make_user, make_customer, make_order):
        ravi = make_user("Ravi")
        make_order(make_customer(), created_by=ravi, total=120)
        make_order(make_customer(), created_by=None, total=30)

        result = runner.invoke(args=['reports', 'executives'])
        report = json.loads(result.stdout)

        assert result.exit_code == 0
        assert report['summary']['total_revenue_all'] == 150
        assert [row['executive_name'] for row in report['reports']] == ['Ravi Kumar', 'Deleted User']

    def test_customers_with_options(self, runner, make_customer, make_order):
        for total in (10, 20, 30):
            make_order(make_customer(), total=total)

        result = runner.invoke(args=['reports', 'customers', '--sort-by', 'total_spent', '--sort-order', 'asc', '--limit', '2'])
        report = json.loads(result.stdout)

        assert result.exit_code == 0
        assert [row['total_spent'] for row in report['reports']] == [10, 20]
        assert report['pagination']['total_pages'] == 2

    def test_inactive_customers_days(self, runner, make_customer, make_order, ago):
        make_order(make_customer(), record_date=ago(3650))

        result = runner.invoke(args=['reports', 'inactive-customers', '--days', '30'])
        report = json.loads(result.stdout)

        assert result.exit_code == 0
        assert report['days'] == 30
        assert report['count'] == 1

    def test_invalid_options_fail(self, runner, db_session):
        bad_sort = runner.invoke(args=['reports', 'warehouses', '--sort-by', 'colour'])
        bad_kind = runner.invoke(args=['reports', 'executives', '--record-kind', 'invoice'])
        bad_days = runner.invoke(args=['reports', 'inactive-customers', '--days', '0'])

        assert bad_sort.exit_code != 0
        assert bad_kind.exit_code != 0
        assert bad_days.exit_code != 0
