"""
Dashboard and reports blueprint.
Stock figures are cached and invalidated on every stock write.
"""
from flask import Blueprint, jsonify

from gradestock.database import get_session
from gradestock.middleware import require_admin
from gradestock.services.dashboard_service import get_dashboard_data
from gradestock.services.report_service import get_report_data

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/dashboard')
@require_admin
def dashboard():
    return jsonify({'status': 'ok', 'dashboard': get_dashboard_data(get_session())})


@dashboard_bp.route('/reports')
@require_admin
def reports():
    return jsonify({'status': 'ok', 'report': get_report_data(get_session())})
