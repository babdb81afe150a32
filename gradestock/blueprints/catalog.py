"""Public catalog blueprint."""
from flask import Blueprint, jsonify, request

from gradestock.database import get_session
from gradestock.services.catalog_service import list_products
from gradestock.services.grouping_service import build_catalog_view

catalog_bp = Blueprint('catalog', __name__, url_prefix='/catalog')


@catalog_bp.route('', methods=['GET'])
def catalog():
    """Products grouped by image and color. Pieces with no stock are left out."""
    session = get_session()
    term = request.args.get('q', '').strip()
    groups = build_catalog_view(list_products(session), term)
    return jsonify({
        'status': 'ok',
        'query': term,
        'groups': [g.to_dict() for g in groups],
    })
