from .tenancy import Franchise, Unit, DocumentSequence
from .inventory import Product, InventoryRecord
from .ledger import RevenueEntry, RevenueLineItem, ExpenseEntry
from .royalties import Royalty

__all__ = [
    'Franchise', 'Unit', 'DocumentSequence',
    'Product', 'InventoryRecord',
    'RevenueEntry', 'RevenueLineItem', 'ExpenseEntry',
    'Royalty',
]
