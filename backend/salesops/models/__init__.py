from .warehouses import Warehouse, warehouse_managers
from .auth import User, Role, UserWarehouseAccess
from .customers import Customer
from .orders import Order, OrderItem, RECORD_KIND_ORDER, RECORD_KIND_VISIT, RECORD_KINDS

__all__ = [
    'Warehouse', 'warehouse_managers',
    'User', 'Role', 'UserWarehouseAccess',
    'Customer',
    'Order', 'OrderItem', 'RECORD_KIND_ORDER', 'RECORD_KIND_VISIT', 'RECORD_KINDS',
]
