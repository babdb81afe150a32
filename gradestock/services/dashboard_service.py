"""
Dashboard service.
Aggregates stock totals, size distribution and top colors for the dashboard view.
"""

from typing import Any, Dict, Iterable, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import RemoteReadError
from gradestock.models import Product
from gradestock.models.sizes import size_sort_key
from gradestock.services.cache_service import get_cache

TOP_COLORS_LIMIT = 5


def summarize_products(products: Iterable[Any], low_stock_threshold: int = 5,
                       unit_value_estimate: int = 50) -> Dict[str, Any]:
    """
    Compute dashboard figures from product rows.

    Returns:
        dict with keys:
            - total_items: sum of every product total
            - total_products: number of product records
            - low_stock_count: products with total below the threshold
            - total_value_estimate: total_items x unit_value_estimate
            - size_distribution: [{"size", "quantity"}], canonical size order
            - top_colors: [{"color", "quantity"}], five largest by stock
    """
    products = list(products)
    total_items = sum(int(p.total_stock or 0) for p in products)

    sizes: Dict[str, int] = {}
    colors: Dict[str, int] = {}
    for p in products:
        for size, qty in (p.stocks or {}).items():
            sizes[size] = sizes.get(size, 0) + int(qty)
        if p.color:
            colors[p.color] = colors.get(p.color, 0) + int(p.total_stock or 0)

    # sorted() is stable, so ties keep first-appearance order
    top_colors = sorted(colors.items(), key=lambda item: item[1], reverse=True)[:TOP_COLORS_LIMIT]

    return {
        'total_items': total_items,
        'total_products': len(products),
        'low_stock_count': sum(1 for p in products if int(p.total_stock or 0) < low_stock_threshold),
        'total_value_estimate': total_items * unit_value_estimate,
        'size_distribution': [
            {'size': size, 'quantity': sizes[size]}
            for size in sorted(sizes, key=size_sort_key)
        ],
        'top_colors': [{'color': color, 'quantity': qty} for color, qty in top_colors],
    }


def get_dashboard_data(session) -> Dict[str, Any]:
    """Dashboard figures for the current stock, cached until the next stock write."""
    config = current_app.config

    def load() -> Dict[str, Any]:
        try:
            products: List[Product] = session.query(Product).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error loading dashboard data: {e}")
            raise RemoteReadError() from e
        return summarize_products(
            products,
            low_stock_threshold=config.get('LOW_STOCK_THRESHOLD', 5),
            unit_value_estimate=config.get('DASHBOARD_UNIT_VALUE_ESTIMATE', 50),
        )

    return get_cache().memoize('dashboard', 'summary', load, ttl=config.get('CACHE_DASHBOARD_TTL'))
