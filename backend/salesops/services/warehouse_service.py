# Overview: Warehouse bootstrap; seeds the default warehouse list.

from __future__ import annotations

from ..extensions import db
from ..models import Warehouse

DEFAULT_WAREHOUSES = (
    {"name": "Delhi (East)", "code": "DEL-E", "city": "Delhi", "state": "Delhi", "area": "East"},
    {"name": "Delhi (West)", "code": "DEL-W", "city": "Delhi", "state": "Delhi", "area": "West"},
    {"name": "Jalandhar", "code": "JAL", "city": "Jalandhar", "state": "Punjab"},
    {"name": "Ludhiana", "code": "LDH", "city": "Ludhiana", "state": "Punjab"},
    {"name": "Fatehgarh Sahib", "code": "FGS", "city": "Fatehgarh Sahib", "state": "Punjab"},
    {"name": "Jammu", "code": "JAM", "city": "Jammu", "state": "Jammu & Kashmir"},
    {"name": "Ambala", "code": "AMB", "city": "Ambala", "state": "Haryana"},
)


def seed_default_warehouses() -> list[Warehouse]:
    """
    Insert any default warehouse whose code is missing. Existing rows are
    left untouched, so running this twice is a no-op.

    Returns the warehouses created by this call.
    """
    existing_codes = {code for (code,) in db.session.query(Warehouse.code).all()}

    created = []
    for defaults in DEFAULT_WAREHOUSES:
        if defaults["code"] in existing_codes:
            continue
        warehouse = Warehouse(is_active=True, **defaults)
        db.session.add(warehouse)
        created.append(warehouse)

    db.session.commit()
    return created
