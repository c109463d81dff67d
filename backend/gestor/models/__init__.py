from .base import Record
from .store import StoreEntry
from .inventory import Product, InventoryLogEntry, MovementType, MeasurementUnit
from .sales import Sale, SaleLine, Quotation, PaymentMethod, WALK_IN_CUSTOMER_NAME, lines_total
from .auth import Employee, SessionToken
from .catalog import Supplier, Customer, Expense
from .settings import BusinessConfig, WEEK_DAYS

__all__ = [
    'Record', 'StoreEntry',
    'Product', 'InventoryLogEntry', 'MovementType', 'MeasurementUnit',
    'Sale', 'SaleLine', 'Quotation', 'PaymentMethod', 'WALK_IN_CUSTOMER_NAME', 'lines_total',
    'Employee', 'SessionToken',
    'Supplier', 'Customer', 'Expense',
    'BusinessConfig', 'WEEK_DAYS',
]
