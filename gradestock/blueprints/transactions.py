"""Transactions history blueprint."""
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from gradestock.database import get_session
from gradestock.exceptions import RemoteReadError
from gradestock.middleware import require_admin
from gradestock.models import StockTransaction
from gradestock.utils.formatters import datetime_br

transactions_bp = Blueprint('transactions', __name__, url_prefix='/transactions')

MAX_LIMIT = 1000


@transactions_bp.route('', methods=['GET'])
@require_admin
def list_transactions():
    """Latest transactions, newest first."""
    default_limit = current_app.config.get('TRANSACTIONS_RECENT_LIMIT', 100)
    limit = request.args.get('limit', default_limit, type=int)
    limit = min(max(limit or default_limit, 1), MAX_LIMIT)

    session = get_session()
    try:
        rows = session.query(StockTransaction).order_by(
            StockTransaction.date.desc(), StockTransaction.position, StockTransaction.id
        ).limit(limit).all()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error loading transactions: {e}")
        raise RemoteReadError() from e

    return jsonify({
        'status': 'ok',
        'transactions': [{**t.to_dict(), 'date_display': datetime_br(t.date)} for t in rows],
    })
