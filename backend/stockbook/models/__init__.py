from .storage import StorageEntry
from .auth import User, UserRole, UserPermissions, SessionRecord
from .inventory import Product, Category, Brand
from .sales import Invoice, InvoiceItem, InvoiceStatus
from .documents import PurchaseOrder, PurchaseOrderLine, POStatus, SalesReturn, ReturnStatus

__all__ = [
    'StorageEntry',
    'User', 'UserRole', 'UserPermissions', 'SessionRecord',
    'Product', 'Category', 'Brand',
    'Invoice', 'InvoiceItem', 'InvoiceStatus',
    'PurchaseOrder', 'PurchaseOrderLine', 'POStatus', 'SalesReturn', 'ReturnStatus',
]
