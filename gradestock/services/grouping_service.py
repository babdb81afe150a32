"""
Catalog grouping: products grouped by image, then by color.

Read-only view over product rows. No session and no Flask, so the same
functions serve the public catalog, the admin inventory and the tests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from gradestock.models.sizes import PLUS_SIZES, STANDARD_SIZES, size_sort_key

NO_IMAGE_KEY = 'no-image'


def grade_label(stocks: Optional[Dict[str, int]]) -> str:
    """
    Describe which size grid a stocks map uses.

    Examples:
        grade_label({}) -> "Sem Grade"
        grade_label({"P": 1, "G1": 0}) -> "Mista"
        grade_label({"G2": 3}) -> "G1 ao G3"
        grade_label({"M": 2}) -> "P ao GG"
    """
    keys = list((stocks or {}).keys())
    if not keys:
        return 'Sem Grade'
    has_plus = any(k in PLUS_SIZES for k in keys)
    has_standard = any(k in STANDARD_SIZES for k in keys)
    if has_plus and has_standard:
        return 'Mista'
    if has_plus:
        return 'G1 ao G3'
    return 'P ao GG'


def search_products(products: Iterable[Any], term: Optional[str]) -> List[Any]:
    """Case-insensitive substring match on name, reference or color."""
    products = list(products)
    needle = (term or '').strip().lower()
    if not needle:
        return products
    return [
        p for p in products
        if needle in (p.name or '').lower()
        or needle in (p.reference or '').lower()
        or needle in (p.color or '').lower()
    ]


def merge_stocks(products: Iterable[Any]) -> Dict[str, int]:
    """Sum per-size stocks across products, canonical size order."""
    merged: Dict[str, int] = {}
    for p in products:
        for size, qty in (p.stocks or {}).items():
            merged[size] = merged.get(size, 0) + int(qty)
    return {size: merged[size] for size in sorted(merged, key=size_sort_key)}


def color_key(product: Any) -> str:
    return f"{(product.color or '').strip().lower()}-{product.color_hex}"


@dataclass
class ColorGroup:
    key: str
    color: str
    color_hex: Optional[str]
    products: List[Any] = field(default_factory=list)

    @property
    def stocks(self) -> Dict[str, int]:
        return merge_stocks(self.products)

    @property
    def total(self) -> int:
        return sum(int(p.total_stock or 0) for p in self.products)

    @property
    def grade(self) -> str:
        return grade_label(self.stocks)

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'color': self.color,
            'color_hex': self.color_hex,
            'stocks': self.stocks,
            'total_stock': self.total,
            'grade': self.grade,
            'products': [p.to_dict() for p in self.products],
        }


@dataclass
class ImageGroup:
    image_url: Optional[str]
    products: List[Any] = field(default_factory=list)
    colors: List[ColorGroup] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(int(p.total_stock or 0) for p in self.products)

    @property
    def prices(self) -> List[float]:
        return [float(p.price) for p in self.products if p.price is not None]

    def to_dict(self) -> dict:
        first = self.products[0] if self.products else None
        prices = self.prices
        return {
            'image_url': self.image_url,
            'name': first.name if first else None,
            'reference': first.reference if first else None,
            'price': float(first.price) if first is not None and first.price is not None else None,
            'price_min': min(prices) if prices else None,
            'price_max': max(prices) if prices else None,
            'total_stock': self.total,
            'colors': [c.to_dict() for c in self.colors],
        }


def group_by_color(products: Iterable[Any]) -> List[ColorGroup]:
    """Group products by color name + hex, in order of first appearance."""
    groups: Dict[str, ColorGroup] = {}
    for p in products:
        key = color_key(p)
        if key not in groups:
            groups[key] = ColorGroup(key=key, color=p.color, color_hex=p.color_hex)
        groups[key].products.append(p)
    return list(groups.values())


def group_by_image(products: Iterable[Any]) -> List[ImageGroup]:
    """Group products by image url (missing image -> one shared group)."""
    groups: Dict[str, ImageGroup] = {}
    for p in products:
        key = p.image_url or NO_IMAGE_KEY
        if key not in groups:
            groups[key] = ImageGroup(image_url=p.image_url)
        groups[key].products.append(p)
    for group in groups.values():
        group.colors = group_by_color(group.products)
    return list(groups.values())


def build_catalog_view(products: Iterable[Any], term: Optional[str] = None,
                       auth=None, hide_zero_stock: bool = True) -> List[ImageGroup]:
    """
    Filter, group and hide what the viewer should not see.

    The public catalog drops image groups with no stock at all but keeps
    their empty colors. Admins see everything unless hide_zero_stock, which
    drops empty color groups and the image groups left without colors.

    Args:
        products: Product rows in display order.
        term: Search text.
        auth: AuthContext of the request; None means public.
        hide_zero_stock: Admin toggle; ignored in the public catalog.
    """
    groups = group_by_image(search_products(products, term))
    if auth is None or not auth.is_admin:
        return [g for g in groups if g.total > 0]
    if not hide_zero_stock:
        return groups

    visible = []
    for group in groups:
        group.colors = [c for c in group.colors if c.total > 0]
        if group.colors:
            visible.append(group)
    return visible
