"""Authentication helpers shared across blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, cast

from flask import current_app, g, jsonify, request
from flask_login import current_user

from lpb.errors import AccountInactive, AuthenticationError, ForbiddenError, InvalidAuthToken, LPBError
from lpb.extensions import db, login_manager
from lpb.models import Role, User
from lpb.services.tokens import verify_access_token

F = TypeVar('F', bound=Callable[..., object])


def _bearer_token() -> str | None:
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme != 'Bearer' or not token.strip():
        return None
    return token.strip()


def init_auth(app) -> None:
    """Resolve ``Authorization: Bearer`` headers to users through Flask-Login."""

    @login_manager.user_loader
    def load_user(user_id: str):
        return db.session.get(User, user_id)

    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get('Authorization')
        if not header:
            return None

        token = _bearer_token()
        if token is None:
            g.auth_error = AuthenticationError('Invalid authorization format. Use: Bearer <token>')
            return None

        try:
            payload = verify_access_token(token)
        except AuthenticationError as exc:
            g.auth_error = exc
            return None

        user = db.session.get(User, payload.get('sub'))
        if user is None:
            g.auth_error = InvalidAuthToken()
            return None
        if not user.active:
            g.auth_error = AccountInactive()
            return None
        return user

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        error: LPBError = g.get('auth_error') or AuthenticationError()
        return jsonify(error.to_dict()), error.status_code


def get_current_user() -> User | None:
    """Return the authenticated user, or None for anonymous requests."""
    if current_user and current_user.is_authenticated:
        return cast(User, current_user._get_current_object())
    return None


def login_required(func: F) -> F:
    """Require a valid bearer token."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return current_app.login_manager.unauthorized()
        return func(*args, **kwargs)
    return cast(F, wrapper)


def roles_required(*required_roles: Role | str):
    """Decorator factory to require one of the given roles."""
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()

            if not current_user.has_role(*required_roles):
                raise ForbiddenError()

            return func(*args, **kwargs)
        return cast(F, wrapper)
    return decorator


__all__ = [
    'init_auth',
    'get_current_user',
    'login_required',
    'roles_required',
]
