"""
Stock store: reads and writes of stock aggregates and transactions.

Reads return Product rows (current stocks map and total). Writes are the two
calls a stock change is made of: one aggregate update per affected product
and one append carrying the full ordered transaction list. Nothing is kept
in memory as truth until the database acknowledges the commit.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import NotFoundError, RemoteWriteError
from gradestock.models import Product, StockTransaction
from gradestock.services.stock_diff_service import AggregateUpdate, StockBatch, TransactionDraft

logger = logging.getLogger(__name__)


def get_record(session, record_id: str) -> Optional[Product]:
    """Look up one product by id."""
    if not record_id:
        return None
    return session.get(Product, record_id)


def load_records(session, record_ids: Iterable[str]) -> List[Product]:
    """
    Load products by id, keeping the order of `record_ids`.

    Unknown ids are skipped.
    """
    ids = list(dict.fromkeys(str(rid) for rid in record_ids if rid))
    if not ids:
        return []
    found = {p.id: p for p in session.query(Product).filter(Product.id.in_(ids)).all()}
    return [found[rid] for rid in ids if rid in found]


def update_aggregate(session, update: AggregateUpdate) -> Product:
    """Replace one product's stocks map and total."""
    product = get_record(session, update.record_id)
    if product is None:
        raise NotFoundError(f'Produto {update.record_id} não encontrado')
    product.set_stocks(update.stocks)
    session.flush()
    return product


def append_transactions(session, drafts: Sequence[TransactionDraft]) -> List[StockTransaction]:
    """Persist transaction drafts in order."""
    rows = [
        StockTransaction(
            id=d.id,
            position=position,
            product_id=d.product_id,
            product_name=d.product_name,
            type=d.type,
            quantity=d.quantity,
            size=d.size,
            date=d.date,
            customer_id=d.customer_id,
            customer_name=d.customer_name,
        )
        for position, d in enumerate(drafts)
    ]
    if rows:
        session.add_all(rows)
        session.flush()
    return rows


def reconcile_after_failure(session) -> None:
    """
    Drop every pending change after a failed write.

    Rolling back expires all loaded objects, so the next access re-reads the
    authoritative rows instead of trusting half-applied in-memory state.
    """
    try:
        session.rollback()
    except SQLAlchemyError:
        logger.exception("stock.reconcile.rollback_failed")
        raise


def commit_write(session, message: str, event: str) -> None:
    """
    Commit pending catalog changes.

    Raises:
        RemoteWriteError: Commit failed; the session was rolled back.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        reconcile_after_failure(session)
        logger.error(event, exc_info=True)
        raise RemoteWriteError(message, payload={'detail': str(e)}) from e


def after_stock_commit(transactions) -> None:
    """Side effects that must only run once a stock write is acknowledged."""
    from gradestock.blueprints.metrics import record_stock_transactions
    from gradestock.services.cache_service import invalidate_stock_views

    record_stock_transactions(transactions)
    invalidate_stock_views()


def apply_stock_batch(session, batch: StockBatch) -> List[StockTransaction]:
    """
    Write a StockBatch: every aggregate update, then one append, then commit.

    The first failing call aborts the rest of the batch.

    Raises:
        RemoteWriteError: If any write or the commit fails (session rolled back).
    """
    if batch.is_empty:
        return []

    try:
        for update in batch.updates:
            update_aggregate(session, update)
        rows = append_transactions(session, batch.transactions)
        session.commit()
    except (SQLAlchemyError, NotFoundError) as e:
        reconcile_after_failure(session)
        logger.error(
            "stock.batch.failed",
            extra={"updates": len(batch.updates), "transactions": len(batch.transactions)},
            exc_info=True,
        )
        raise RemoteWriteError(
            'Erro na atualização em lote. Recarregue o estoque e confira os valores.',
            payload={'detail': str(e)}
        ) from e

    after_stock_commit(batch.transactions)
    logger.info(
        "stock.batch.applied",
        extra={"updates": len(batch.updates), "transactions": len(batch.transactions)},
    )
    return rows
