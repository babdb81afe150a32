"""Middleware for the admin session context."""
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import current_app, g, session

from gradestock.exceptions import UnauthorizedError


@dataclass(frozen=True)
class AuthContext:
    """Who is making the request. Built once per request from the signed session."""
    is_admin: bool = False
    username: Optional[str] = None

    def to_dict(self) -> dict:
        return {'is_admin': self.is_admin, 'username': self.username}


PUBLIC = AuthContext()


def load_auth_context() -> AuthContext:
    """
    Build g.auth from the session.

    Called before each request.
    """
    key = current_app.config.get('SESSION_AUTH_KEY', 'is_admin')
    if session.get(key):
        g.auth = AuthContext(is_admin=True, username=session.get('username'))
    else:
        g.auth = PUBLIC
    return g.auth


def login_admin(username: str) -> AuthContext:
    """Mark the session as admin."""
    session.clear()
    session[current_app.config.get('SESSION_AUTH_KEY', 'is_admin')] = True
    session['username'] = username
    session.permanent = True
    g.auth = AuthContext(is_admin=True, username=username)
    return g.auth


def logout_admin() -> None:
    session.clear()
    g.auth = PUBLIC


def current_auth() -> AuthContext:
    return g.get('auth') or PUBLIC


def require_admin(f):
    """
    Decorator: Require the admin session.

    Raises UnauthorizedError (rendered as 401 JSON) otherwise.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_auth().is_admin:
            raise UnauthorizedError('Faça login como administrador para continuar.')
        return f(*args, **kwargs)
    return decorated_function
