from .auth import User, SessionToken
from .customers import Customer
from .inventory import Product, InventoryMovement
from .sales import Sale, SaleItem
from .finance import FinancialMovement
from .documents import DocumentSequence
from .audit import AuditLog

__all__ = [
    'User', 'SessionToken',
    'Customer',
    'Product', 'InventoryMovement',
    'Sale', 'SaleItem',
    'FinancialMovement',
    'DocumentSequence',
    'AuditLog',
]
