"""Models package - exports all SQLAlchemy models."""
from gradestock.models.sizes import SIZES, STANDARD_SIZES, PLUS_SIZES, GridType, sizes_for_grid
from gradestock.models.product import Product
from gradestock.models.stock_transaction import StockTransaction, TransactionType
from gradestock.models.customer import Customer

__all__ = [
    'SIZES', 'STANDARD_SIZES', 'PLUS_SIZES', 'GridType', 'sizes_for_grid',
    'Product', 'StockTransaction', 'TransactionType', 'Customer',
]
