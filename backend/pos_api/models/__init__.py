from .catalog import Category, Product
from .transactions import Transaction, TransactionDetail

__all__ = [
    'Category', 'Product',
    'Transaction', 'TransactionDetail',
]
