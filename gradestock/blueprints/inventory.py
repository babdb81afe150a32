"""
Inventory blueprint (admin).
Product matrix creation, product maintenance, single adjustments and grid edits.
"""

import logging
from typing import List

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from gradestock.database import get_session
from gradestock.exceptions import BusinessLogicError, RemoteReadError
from gradestock.forms import AdjustmentForm, ColorEditForm, ProductEditForm, first_error
from gradestock.middleware import current_auth, require_admin
from gradestock.services import catalog_service, stock_store
from gradestock.services.adjustment_service import apply_adjustment
from gradestock.services.grouping_service import build_catalog_view
from gradestock.services.stock_diff_service import batch_stock_diff, edits_from_grid

logger = logging.getLogger(__name__)

inventory_bp = Blueprint('inventory', __name__, url_prefix='/inventory')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _ids_from_request(field: str) -> List[str]:
    """A list of ids from a JSON array or repeated form fields."""
    if request.is_json:
        values = _json_body().get(field) or []
        if not isinstance(values, list):
            values = [values]
    else:
        values = request.form.getlist(field)
    return [str(v).strip() for v in values if str(v).strip()]


def _flag(value: str, default: bool) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@inventory_bp.route('', methods=['GET'])
@require_admin
def list_inventory():
    """Admin view of the catalog; hides color groups without stock by default."""
    session = get_session()
    term = request.args.get('q', '').strip()
    hide_zero = _flag(request.args.get('hide_zero'), True)
    groups = build_catalog_view(
        catalog_service.list_products(session), term, auth=current_auth(), hide_zero_stock=hide_zero
    )
    return jsonify({
        'status': 'ok',
        'query': term,
        'hide_zero': hide_zero,
        'groups': [g.to_dict() for g in groups],
    })


@inventory_bp.route('/<product_id>', methods=['GET'])
@require_admin
def get_product(product_id):
    product = catalog_service.get_product(get_session(), product_id)
    return jsonify({'status': 'ok', 'product': product.to_dict()})


@inventory_bp.route('/products', methods=['POST'])
@require_admin
def create_products():
    """Create products from the colors x references matrix."""
    products = catalog_service.create_products(get_session(), _json_body())
    return jsonify({
        'status': 'ok',
        'message': f'{len(products)} produto(s) cadastrado(s)',
        'products': [p.to_dict() for p in products],
    }), 201


@inventory_bp.route('/<product_id>/edit', methods=['POST'])
@require_admin
def edit_product(product_id):
    form = ProductEditForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(first_error(form))

    product = catalog_service.update_product(
        get_session(), product_id, form.reference.data, form.name.data, form.price.data
    )
    return jsonify({'status': 'ok', 'product': product.to_dict()})


@inventory_bp.route('/colors/edit', methods=['POST'])
@require_admin
def edit_color():
    """Rename a color group (every product id sent)."""
    form = ColorEditForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(first_error(form))

    products = catalog_service.rename_color_group(
        get_session(), _ids_from_request('product_ids'), form.color.data, form.color_hex.data
    )
    return jsonify({'status': 'ok', 'products': [p.to_dict() for p in products]})


@inventory_bp.route('/variations', methods=['POST'])
@require_admin
def add_variation():
    """Add an empty variation to the image group of product_id."""
    if request.is_json:
        product_id = str(_json_body().get('product_id') or '').strip()
    else:
        product_id = request.form.get('product_id', '').strip()
    if not product_id:
        raise BusinessLogicError('Informe o produto do grupo')

    product = catalog_service.add_variation(get_session(), product_id)
    return jsonify({'status': 'ok', 'product': product.to_dict()}), 201


@inventory_bp.route('/<product_id>/delete', methods=['POST'])
@require_admin
def delete_product(product_id):
    count = catalog_service.delete_products(get_session(), [product_id])
    return jsonify({'status': 'ok', 'deleted': count})


@inventory_bp.route('/delete', methods=['POST'])
@require_admin
def delete_group():
    """Delete every product of a color group."""
    ids = _ids_from_request('product_ids')
    if not ids:
        raise BusinessLogicError('Nenhum produto selecionado')
    count = catalog_service.delete_products(get_session(), ids)
    return jsonify({'status': 'ok', 'deleted': count})


@inventory_bp.route('/adjust', methods=['POST'])
@require_admin
def adjust_stock():
    """
    Single IN/OUT of one size.

    Body: candidate_ids (records of the color), size, type, quantity,
    optional product_id (explicit choice) and customer_id (OUT only).
    """
    form = AdjustmentForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(first_error(form))

    candidate_ids = _ids_from_request('candidate_ids')
    if not candidate_ids and form.product_id.data:
        candidate_ids = [form.product_id.data]
    if not candidate_ids:
        raise BusinessLogicError('Nenhum produto selecionado')

    product, transaction = apply_adjustment(
        get_session(),
        candidate_ids,
        form.size.data.strip().upper(),
        form.type.data,
        form.quantity.data,
        selected_id=form.product_id.data or None,
        customer_id=form.customer_id.data or None,
    )
    return jsonify({
        'status': 'ok',
        'product': product.to_dict(),
        'transaction': transaction.to_dict(),
    })


@inventory_bp.route('/grid', methods=['POST'])
@require_admin
def save_grid():
    """
    Save a grid edit.

    Body: {"grid": {product_id: {size: quantity}}}. Cells are coerced to
    non-negative integers and only real changes become transactions.
    """
    grid = _json_body().get('grid')
    if not isinstance(grid, dict):
        raise BusinessLogicError('Grade inválida')

    session = get_session()
    try:
        records = stock_store.load_records(session, grid.keys())
    except SQLAlchemyError as e:
        logger.error("stock.grid.load_failed", exc_info=True)
        raise RemoteReadError() from e

    batch = batch_stock_diff(records, edits_from_grid(grid))
    stock_store.apply_stock_batch(session, batch)

    updated = {u.record_id for u in batch.updates}
    return jsonify({
        'status': 'ok',
        'message': 'Nenhuma alteração' if batch.is_empty else 'Grade atualizada',
        'products': [r.to_dict() for r in records if r.id in updated],
        'transactions': [t.to_dict() for t in batch.transactions],
    })
