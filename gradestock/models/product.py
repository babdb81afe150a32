"""Product model."""
from sqlalchemy import Column, String, Integer, Text, Numeric, DateTime, JSON
from sqlalchemy.sql import func
from gradestock.database import Base


class Product(Base):
    """
    Product variant: one reference + color combination with a per-size stock grid.

    `stocks` maps size label -> quantity and `total_stock` is its sum. Both are
    only changed through set_stocks() so the total never drifts.
    """

    __tablename__ = 'products'

    id = Column(String(36), primary_key=True)
    reference = Column(String(100), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    color = Column(String(100), nullable=False)
    color_hex = Column(String(16), nullable=True)
    image_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    stocks = Column(JSON, nullable=False, default=dict)
    total_stock = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, reference='{self.reference}', color='{self.color}')>"

    def set_stocks(self, stocks: dict) -> None:
        """Replace the stock grid and recompute the total."""
        # A new dict is assigned so the JSON column is flagged as dirty
        self.stocks = {size: int(qty) for size, qty in stocks.items()}
        self.total_stock = sum(self.stocks.values())

    def stock_for(self, size: str) -> int:
        """Quantity on hand for one size (0 when the size is not in the grid)."""
        return int((self.stocks or {}).get(size, 0))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'reference': self.reference,
            'name': self.name,
            'color': self.color,
            'color_hex': self.color_hex,
            'image_url': self.image_url,
            'description': self.description,
            'stocks': dict(self.stocks or {}),
            'total_stock': self.total_stock,
            'price': float(self.price) if self.price is not None else None,
        }
