"""
Stock diff batching for grid edits.

Turns the quantities an operator retyped in a size grid into the smallest
set of signed stock transactions that reconciles the old grid with the new
one, plus one aggregate update (stocks map + total) per affected record.

Everything here is pure: no session, no Flask. Writing the result is the job
of stock_store.apply_stock_batch().
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Any

from gradestock.models.sizes import SIZES
from gradestock.models.stock_transaction import TransactionType
from gradestock.utils.formatters import utc_timestamp

logger = logging.getLogger(__name__)


def coerce_grid_quantity(value: Any) -> int:
    """
    Normalize a raw grid cell into a non-negative integer.

    Empty, non-numeric and negative input degrades to 0 instead of failing
    the whole batch.

    Examples:
        coerce_grid_quantity("7") -> 7
        coerce_grid_quantity("") -> 0
        coerce_grid_quantity("-3") -> 0
        coerce_grid_quantity("abc") -> 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        qty = int(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return max(qty, 0)


@dataclass(frozen=True)
class GridEdit:
    """One edited grid cell: proposed quantity for (record, size)."""
    record_id: str
    size: str
    quantity: int

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise TypeError(f"quantity must be int, got {type(self.quantity).__name__}")
        if self.quantity < 0:
            raise ValueError(f"quantity must be >= 0, got {self.quantity}")

    @classmethod
    def from_raw(cls, record_id: str, size: str, raw_value: Any) -> 'GridEdit':
        """Build an edit from an untrusted cell value. Size keys are upper-cased."""
        return cls(
            record_id=str(record_id),
            size=str(size).strip().upper(),
            quantity=coerce_grid_quantity(raw_value),
        )


@dataclass(frozen=True)
class AggregateUpdate:
    """Replacement stocks map and total for one record."""
    record_id: str
    stocks: Dict[str, int]
    total: int


@dataclass(frozen=True)
class TransactionDraft:
    """A stock transaction built in memory, not yet persisted."""
    id: str
    product_id: str
    product_name: str
    type: TransactionType
    quantity: int
    size: str
    date: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def signed_quantity(self) -> int:
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


@dataclass
class StockBatch:
    """Result of batch_stock_diff()."""
    updates: List[AggregateUpdate] = field(default_factory=list)
    transactions: List[TransactionDraft] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.updates and not self.transactions

    def transactions_for(self, record_id: str) -> List[TransactionDraft]:
        return [t for t in self.transactions if t.product_id == record_id]


def _new_id() -> str:
    return str(uuid.uuid4())


def edits_from_grid(grid: Dict[str, Dict[str, Any]]) -> List[GridEdit]:
    """
    Flatten a {record_id: {size: raw_value}} grid into GridEdits.

    Raw values go through coerce_grid_quantity().
    """
    edits = []
    for record_id, cells in (grid or {}).items():
        if not isinstance(cells, dict):
            continue
        for size, raw_value in cells.items():
            edits.append(GridEdit.from_raw(record_id, size, raw_value))
    return edits


def batch_stock_diff(
    records: Iterable[Any],
    edits: Iterable[GridEdit],
    now: Optional[str] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> StockBatch:
    """
    Compute the minimal transaction set for a grid edit.

    Args:
        records: Current records (anything with id, name and stocks), in the
            order the output should follow.
        edits: GridEdit cells. Cells for unknown record ids are dropped and
            cells for sizes outside SIZES are ignored.
        now: Timestamp shared by every transaction of the batch
            (defaults to utc_timestamp()).
        id_factory: Transaction id generator (defaults to uuid4 strings).

    Returns:
        StockBatch with one AggregateUpdate per record that has at least one
        non-zero diff and one TransactionDraft per non-zero (record, size),
        ordered by record then by SIZES.
    """
    id_factory = id_factory or _new_id
    records = list(records)
    known = {r.id: r for r in records}

    proposed: Dict[str, Dict[str, int]] = {}
    for edit in edits:
        if edit.record_id not in known:
            logger.debug("stock.batch.unknown_record", extra={"record_id": edit.record_id})
            continue
        if edit.size not in SIZES:
            logger.debug("stock.batch.unknown_size", extra={"record_id": edit.record_id, "size": edit.size})
            continue
        # Later edits of the same cell win
        proposed.setdefault(edit.record_id, {})[edit.size] = edit.quantity

    batch = StockBatch()
    if not proposed:
        return batch

    timestamp = now or utc_timestamp()

    for record in records:
        cells = proposed.pop(record.id, None)
        if not cells:
            continue

        old_stocks = dict(record.stocks or {})
        new_stocks = dict(old_stocks)
        record_transactions = []

        for size in SIZES:
            if size not in cells:
                continue
            old_qty = int(old_stocks.get(size, 0))
            new_qty = cells[size]
            diff = new_qty - old_qty
            if diff == 0:
                continue

            new_stocks[size] = new_qty
            record_transactions.append(TransactionDraft(
                id=id_factory(),
                product_id=record.id,
                product_name=record.name,
                type=TransactionType.IN if diff > 0 else TransactionType.OUT,
                quantity=abs(diff),
                size=size,
                date=timestamp,
            ))

        if not record_transactions:
            continue

        batch.updates.append(AggregateUpdate(
            record_id=record.id,
            stocks=new_stocks,
            total=sum(int(q) for q in new_stocks.values()),
        ))
        batch.transactions.extend(record_transactions)

    return batch
