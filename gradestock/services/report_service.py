"""
Report service: stock value, outgoing volume and stock alerts.

Money is computed with Decimal and returned both as a number and as a
formatted string (R$ 1.234,56).
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import RemoteReadError
from gradestock.models import Product, StockTransaction, TransactionType
from gradestock.services.cache_service import get_cache
from gradestock.utils.formatters import money_br

LOW_STOCK_ITEMS_LIMIT = 10
OUT_OF_STOCK_ITEMS_LIMIT = 20


def _price(product: Any) -> Decimal:
    return Decimal(str(product.price)) if product.price is not None else Decimal('0')


def _item(product: Any) -> Dict[str, Any]:
    return {
        'id': product.id,
        'reference': product.reference,
        'name': product.name,
        'color': product.color,
        'total_stock': int(product.total_stock or 0),
    }


def build_report(products: Iterable[Any], out_quantities: Dict[str, int],
                 low_stock_threshold: int = 5) -> Dict[str, Any]:
    """
    Compute report figures.

    Args:
        products: Product rows.
        out_quantities: Total OUT quantity per product id over the whole
            history. Ids of deleted products contribute nothing.
        low_stock_threshold: Totals strictly between 0 and this are "low".
    """
    products = list(products)
    prices = {p.id: _price(p) for p in products}

    total_stock_value = sum((int(p.total_stock or 0) * prices[p.id] for p in products), Decimal('0'))
    sales_volume = sum(
        (qty * prices[pid] for pid, qty in out_quantities.items() if pid in prices),
        Decimal('0'),
    )
    low_stock = [p for p in products if 0 < int(p.total_stock or 0) < low_stock_threshold]
    out_of_stock = [p for p in products if int(p.total_stock or 0) == 0]

    return {
        'total_stock_value': float(total_stock_value),
        'total_stock_value_display': money_br(total_stock_value),
        'sales_volume': float(sales_volume),
        'sales_volume_display': money_br(sales_volume),
        'total_items': sum(int(p.total_stock or 0) for p in products),
        'out_of_stock_count': len(out_of_stock),
        'low_stock_items': [_item(p) for p in low_stock[:LOW_STOCK_ITEMS_LIMIT]],
        'out_of_stock_items': [_item(p) for p in out_of_stock[:OUT_OF_STOCK_ITEMS_LIMIT]],
    }


def out_quantities_by_product(session) -> Dict[str, int]:
    """Sum of OUT quantities per product id."""
    rows = session.query(
        StockTransaction.product_id,
        func.coalesce(func.sum(StockTransaction.quantity), 0)
    ).filter(
        StockTransaction.type == TransactionType.OUT
    ).group_by(StockTransaction.product_id).all()
    return {product_id: int(total) for product_id, total in rows}


def get_report_data(session) -> Dict[str, Any]:
    """Report figures, cached until the next stock write."""
    config = current_app.config

    def load() -> Dict[str, Any]:
        try:
            products: List[Product] = session.query(Product).order_by(Product.name, Product.reference, Product.id).all()
            out_quantities = out_quantities_by_product(session)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error loading report data: {e}")
            raise RemoteReadError() from e
        return build_report(products, out_quantities, config.get('LOW_STOCK_THRESHOLD', 5))

    return get_cache().memoize('reports', 'summary', load, ttl=config.get('CACHE_DASHBOARD_TTL'))
