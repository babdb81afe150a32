"""
Authentication blueprint.
Handles admin login, logout and the session check.
"""

import logging

from flask import Blueprint, jsonify

from gradestock.exceptions import BusinessLogicError, UnauthorizedError
from gradestock.forms import LoginForm, first_error
from gradestock.middleware import current_auth, login_admin, logout_admin
from gradestock.services.auth_service import check_credentials

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in as the shop administrator."""
    form = LoginForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(first_error(form))

    username = form.username.data.strip()
    if not check_credentials(username, form.password.data):
        raise UnauthorizedError('Usuário ou senha inválidos.')

    auth = login_admin(username)
    logger.info(f"Admin login: {username}")
    return jsonify({'status': 'ok', 'auth': auth.to_dict()})


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    logout_admin()
    return jsonify({'status': 'ok', 'auth': current_auth().to_dict()})


@auth_bp.route('/session')
def session_info():
    """Current AuthContext."""
    return jsonify({'status': 'ok', 'auth': current_auth().to_dict()})
