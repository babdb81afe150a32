"""Stock Transaction model."""
from sqlalchemy import Column, String, Integer, Enum, event
from gradestock.database import Base
import enum


class TransactionType(enum.Enum):
    """Stock transaction direction."""
    IN = "IN"
    OUT = "OUT"


class StockTransaction(Base):
    """
    Stock Transaction (movimentação de estoque).

    Append-only audit trail. product_id and customer_id carry no foreign key:
    the history outlives deleted products and customers, which is why the
    names are denormalized at write time.
    """

    __tablename__ = 'transactions'

    id = Column(String(36), primary_key=True)
    product_id = Column(String(36), nullable=False, index=True)
    product_name = Column(String(200), nullable=False)
    type = Column(Enum(TransactionType, name='transaction_type'), nullable=False)
    quantity = Column(Integer, nullable=False)
    size = Column(String(8), nullable=False)
    # ISO-8601 UTC text, produced by the application when the write is built
    date = Column(String(40), nullable=False, index=True)
    # Order inside a batch; every row of one batch shares its date
    position = Column(Integer, nullable=False, default=0)
    customer_id = Column(String(36), nullable=True)
    customer_name = Column(String(200), nullable=True)

    def __repr__(self):
        return (
            f"<StockTransaction(id={self.id}, type={self.type.value}, "
            f"size='{self.size}', quantity={self.quantity})>"
        )

    @property
    def signed_quantity(self) -> int:
        """Quantity with sign: positive for IN, negative for OUT."""
        return self.quantity if self.type == TransactionType.IN else -self.quantity

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'type': self.type.value,
            'quantity': self.quantity,
            'size': self.size,
            'date': self.date,
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
        }


@event.listens_for(StockTransaction, 'before_update')
def _refuse_update(mapper, connection, target):
    raise ValueError(
        "Movimentações são imutáveis. "
        "Para corrigir, registre uma nova movimentação no sentido inverso."
    )


@event.listens_for(StockTransaction, 'before_delete')
def _refuse_delete(mapper, connection, target):
    raise ValueError("Movimentações são imutáveis e não podem ser excluídas.")
