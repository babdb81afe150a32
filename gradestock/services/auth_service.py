"""
Authentication service.

A single shop operator logs in with the credential pair from configuration.
"""
import hmac
import logging

from flask import current_app

logger = logging.getLogger(__name__)


def check_credentials(username: str, password: str) -> bool:
    """Compare a login attempt against ADMIN_USERNAME / ADMIN_PASSWORD."""
    expected_user = current_app.config.get('ADMIN_USERNAME') or ''
    expected_password = current_app.config.get('ADMIN_PASSWORD') or ''
    if not expected_user or not expected_password:
        logger.warning("Admin credentials are not configured; login disabled")
        return False

    # Both comparisons always run so timing does not reveal which one failed
    user_ok = hmac.compare_digest((username or '').encode('utf-8'), expected_user.encode('utf-8'))
    password_ok = hmac.compare_digest((password or '').encode('utf-8'), expected_password.encode('utf-8'))
    if not (user_ok and password_ok):
        logger.info(f"Failed admin login attempt for '{username}'")
        return False
    return True
