"""
Single stock adjustment (interactive path).

One product, one size, one direction, one quantity. Stricter than the grid
batch: the quantity must be a positive integer and an OUT may never exceed
the stock of the record actually selected.
"""

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import (
    BusinessLogicError, InsufficientStockError, InvalidQuantityError,
    NotFoundError, RemoteReadError,
)
from gradestock.models import Customer, SIZES, TransactionType
from gradestock.services import stock_store
from gradestock.services.stock_diff_service import AggregateUpdate, StockBatch, TransactionDraft
from gradestock.utils.formatters import utc_timestamp

logger = logging.getLogger(__name__)


def parse_movement_type(value: Any) -> TransactionType:
    """Accept the enum or its text value ('IN' / 'OUT', any case)."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value or '').strip().upper())
    except ValueError:
        raise BusinessLogicError(f'Tipo de movimentação inválido: {value}')


def parse_quantity(raw_quantity: Any) -> int:
    """
    Parse a quantity typed by the operator.

    Raises:
        InvalidQuantityError: Not an integer or not greater than zero.
    """
    if isinstance(raw_quantity, bool):
        raise InvalidQuantityError(raw_quantity)
    if isinstance(raw_quantity, int):
        qty = raw_quantity
    else:
        try:
            qty = int(str(raw_quantity).strip())
        except (TypeError, ValueError):
            raise InvalidQuantityError(raw_quantity)
    if qty <= 0:
        raise InvalidQuantityError(raw_quantity)
    return qty


def validate_adjustment(raw_quantity: Any, movement_type: Any, current_stock: int,
                        product_name: str = '', size: str = '') -> int:
    """
    Validate a single adjustment before any write.

    Args:
        raw_quantity: Quantity as typed.
        movement_type: IN or OUT.
        current_stock: Known stock of the selected record for that size.

    Returns:
        The parsed quantity.

    Raises:
        InvalidQuantityError: Quantity is not a positive integer.
        InsufficientStockError: OUT larger than current_stock.
        BusinessLogicError: Unknown movement type.
    """
    movement = parse_movement_type(movement_type)
    qty = parse_quantity(raw_quantity)
    if movement == TransactionType.OUT and qty > current_stock:
        raise InsufficientStockError(product_name, size, qty, current_stock)
    return qty


def resolve_candidate(candidates: Sequence[Any], size: str) -> Optional[Any]:
    """
    Pick the record a (color, size) adjustment applies to.

    First candidate with a non-zero entry for `size`, else the first
    candidate, else None.
    """
    if not candidates:
        return None
    for candidate in candidates:
        if int((candidate.stocks or {}).get(size, 0)):
            return candidate
    return candidates[0]


def apply_adjustment(session, candidate_ids: Sequence[str], size: str, movement_type: Any,
                     raw_quantity: Any, selected_id: Optional[str] = None,
                     customer_id: Optional[str] = None, now: Optional[str] = None):
    """
    Validate and write one adjustment.

    Args:
        session: SQLAlchemy session
        candidate_ids: Records sharing the adjusted color, in display order.
        size: Size label.
        movement_type: IN or OUT.
        raw_quantity: Quantity as typed.
        selected_id: Record explicitly chosen by the operator (must be a candidate).
        customer_id: Optional customer, kept only for OUT.

    Returns:
        (product, transaction) after commit.
    """
    movement = parse_movement_type(movement_type)
    if size not in SIZES:
        raise BusinessLogicError(f'Tamanho inválido: {size}')

    try:
        candidates = stock_store.load_records(session, candidate_ids)
    except SQLAlchemyError as e:
        logger.error("stock.adjust.load_failed", exc_info=True)
        raise RemoteReadError() from e

    if not candidates:
        raise NotFoundError('Produto não encontrado')

    if selected_id:
        target = next((c for c in candidates if c.id == str(selected_id)), None)
        if target is None:
            raise BusinessLogicError('Produto selecionado não pertence a esta cor')
    else:
        target = resolve_candidate(candidates, size)

    current = target.stock_for(size)
    qty = validate_adjustment(raw_quantity, movement, current, target.name, size)

    customer = None
    if movement == TransactionType.OUT and customer_id:
        customer = session.get(Customer, str(customer_id))
        if customer is None:
            raise NotFoundError('Cliente não encontrado')

    new_stocks = dict(target.stocks or {})
    new_stocks[size] = current + qty if movement == TransactionType.IN else current - qty

    draft = TransactionDraft(
        id=str(uuid.uuid4()),
        product_id=target.id,
        product_name=target.name,
        type=movement,
        quantity=qty,
        size=size,
        date=now or utc_timestamp(),
        customer_id=customer.id if customer else None,
        customer_name=customer.name if customer else None,
    )
    batch = StockBatch(
        updates=[AggregateUpdate(target.id, new_stocks, sum(int(q) for q in new_stocks.values()))],
        transactions=[draft],
    )
    rows = stock_store.apply_stock_batch(session, batch)

    logger.info(
        "stock.adjust",
        extra={"product_id": target.id, "size": size, "type": movement.value, "quantity": qty},
    )
    return target, rows[0]
