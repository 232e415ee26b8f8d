# Overview: Pytest coverage for warehouse access scoping.

"""
Warehouse Scope Tests

SECURITY TESTS: a principal only ever reports on its own warehouses, and an
explicit warehouse outside that set yields a DENIED scope (never an error).
"""

from salesops.services.warehouse_access_service import (
    DENIED,
    UNRESTRICTED,
    get_accessible_warehouse_ids,
    resolve_scope,
)


class TestAccessibleWarehouses:
    def test_primary_and_access_rows_are_combined(self, make_warehouse, make_user):
        w1, w2, w3 = make_warehouse(), make_warehouse(), make_warehouse()
        user = make_user("Ravi", primary_warehouse=w1, access=[w2])

        assert get_accessible_warehouse_ids(user) == {w1.id, w2.id}
        assert w3.id not in get_accessible_warehouse_ids(user)

    def test_primary_can_be_left_out(self, make_warehouse, make_user):
        w1, w2 = make_warehouse(), make_warehouse()
        user = make_user("Ravi", primary_warehouse=w1, access=[w2])

        assert get_accessible_warehouse_ids(user, include_primary=False) == {w2.id}


class TestResolveScope:
    def test_system_caller_is_unrestricted(self, db_session):
        scope = resolve_scope(None)
        assert scope is UNRESTRICTED
        assert scope.is_unrestricted

    def test_principal_without_warehouses_is_unrestricted(self, make_user):
        user = make_user("Admin", role="Admin")
        assert resolve_scope(user).is_unrestricted

    def test_restricted_principal_sees_own_warehouses(self, make_warehouse, make_user):
        w1, w2, w3 = make_warehouse(), make_warehouse(), make_warehouse()
        user = make_user("Ravi", primary_warehouse=w1, access=[w2])

        scope = resolve_scope(user)

        assert scope.warehouse_ids == frozenset({w1.id, w2.id})
        assert scope.allows(w1.id)
        assert not scope.allows(w3.id)
        assert not scope.allows(None)

    def test_explicit_warehouse_inside_scope_narrows(self, make_warehouse, make_user):
        w1, w2 = make_warehouse(), make_warehouse()
        user = make_user("Ravi", access=[w1, w2])

        scope = resolve_scope(user, w2.id)

        assert scope.warehouse_ids == frozenset({w2.id})
        assert not scope.denied

    def test_explicit_warehouse_outside_scope_is_denied(self, make_warehouse, make_user):
        w1, w2 = make_warehouse(), make_warehouse()
        user = make_user("Ravi", access=[w1])

        scope = resolve_scope(user, w2.id)

        assert scope is DENIED
        assert not scope.allows(w1.id)

    def test_unrestricted_principal_can_pick_any_warehouse(self, make_warehouse, make_user):
        w1 = make_warehouse()
        user = make_user("Admin", role="Admin")

        scope = resolve_scope(user, w1.id)

        assert scope.warehouse_ids == frozenset({w1.id})
