# Overview: Warehouse access scoping; decides which warehouses a principal may report on.

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..models import User, UserWarehouseAccess


@dataclass(frozen=True)
class AccessScope:
    """
    Result of resolving a principal's reporting scope.

    warehouse_ids is None when the scope is unrestricted. denied is set when
    an explicit warehouse filter falls outside the principal's warehouses;
    reports must then return a zeroed, empty result rather than an error.
    """
    warehouse_ids: frozenset[int] | None = None
    denied: bool = False

    @property
    def is_unrestricted(self) -> bool:
        return self.warehouse_ids is None and not self.denied

    def allows(self, warehouse_id: int | None) -> bool:
        if self.denied:
            return False
        if self.warehouse_ids is None:
            return True
        return warehouse_id is not None and warehouse_id in self.warehouse_ids

    def sorted_ids(self) -> list[int]:
        return sorted(self.warehouse_ids or ())


UNRESTRICTED = AccessScope()
DENIED = AccessScope(warehouse_ids=frozenset(), denied=True)


def get_accessible_warehouse_ids(user: User, *, include_primary: bool = True) -> set[int]:
    """
    Get warehouse IDs the user may see.

    include_primary includes User.primary_warehouse_id as implicit scope.
    """
    rows = db.session.query(UserWarehouseAccess.warehouse_id).filter_by(user_id=user.id).all()
    warehouse_ids = {row[0] for row in rows}

    if include_primary and user.primary_warehouse_id is not None:
        warehouse_ids.add(user.primary_warehouse_id)

    return warehouse_ids


def resolve_scope(principal: User | None, explicit_warehouse_id: int | None = None) -> AccessScope:
    """
    Compute the warehouse scope for a report request.

    - No principal (CLI/system callers) or a principal with no warehouse
      assignment at all: unrestricted.
    - Otherwise: primary warehouse plus accessible warehouses.
    - An explicit warehouse must be inside that set (when restricted), else
      the scope is DENIED. When allowed it narrows to that one warehouse.
    """
    allowed = get_accessible_warehouse_ids(principal) if principal is not None else set()

    if explicit_warehouse_id is None:
        return AccessScope(warehouse_ids=frozenset(allowed)) if allowed else UNRESTRICTED

    if allowed and explicit_warehouse_id not in allowed:
        return DENIED

    return AccessScope(warehouse_ids=frozenset({explicit_warehouse_id}))

