"""Customer model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from gradestock.database import Base


class Customer(Base):
    """Customer (cliente)."""

    __tablename__ = 'customers'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
        }
