"""Signed bearer tokens.

Access tokens are short-lived and stateless. Refresh tokens are signed as
well but are also stored, so that they can be rotated on use and revoked by
logout or deactivation.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import delete, select

from lpb.errors import InvalidAuthToken, TokenExpired
from lpb.extensions import db
from lpb.models import RefreshToken, User, as_utc, utcnow

ACCESS_SALT = 'lpb-access-token'
REFRESH_SALT = 'lpb-refresh-token'


def _serializer(salt: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=salt)


def _payload(user: User) -> dict[str, Any]:
    return {
        'sub': user.id,
        'email': user.email,
        'role': user.role.value,
        # Two tokens minted in the same second must still differ
        'jti': secrets.token_hex(8),
    }


def _load(token: str, salt: str, max_age: int) -> dict[str, Any]:
    try:
        return _serializer(salt).loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise TokenExpired() from exc
    except BadSignature as exc:
        raise InvalidAuthToken() from exc


def issue_access_token(user: User) -> str:
    return _serializer(ACCESS_SALT).dumps(_payload(user))


def verify_access_token(token: str) -> dict[str, Any]:
    return _load(token, ACCESS_SALT, current_app.config['ACCESS_TOKEN_TTL'])


def issue_tokens(user: User, commit: bool = True) -> dict[str, str]:
    """Mint an access/refresh pair and store the refresh token."""
    refresh = _serializer(REFRESH_SALT).dumps(_payload(user))
    ttl = current_app.config['REFRESH_TOKEN_TTL']
    db.session.add(RefreshToken(
        token=refresh,
        user_id=user.id,
        expires_at=utcnow() + timedelta(seconds=ttl),
    ))
    if commit:
        db.session.commit()
    return {
        'accessToken': issue_access_token(user),
        'refreshToken': refresh,
    }


def rotate_refresh_token(token: str) -> tuple[User, dict[str, str]]:
    """Exchange a stored refresh token for a fresh pair; the old one is spent."""
    _load(token, REFRESH_SALT, current_app.config['REFRESH_TOKEN_TTL'])

    stored = db.session.execute(
        select(RefreshToken).where(RefreshToken.token == token)
    ).scalar_one_or_none()
    if stored is None:
        raise InvalidAuthToken('Invalid refresh token')

    if as_utc(stored.expires_at) < utcnow():
        db.session.delete(stored)
        db.session.commit()
        raise TokenExpired('Refresh token expired')

    user = stored.user
    db.session.delete(stored)
    if not user.active:
        db.session.commit()
        raise InvalidAuthToken('Invalid refresh token')

    return user, issue_tokens(user)


def revoke_refresh_token(token: str) -> None:
    db.session.execute(delete(RefreshToken).where(RefreshToken.token == token))
    db.session.commit()


def revoke_all_refresh_tokens(user_id: str, commit: bool = True) -> None:
    db.session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    if commit:
        db.session.commit()


__all__ = [
    'issue_access_token',
    'verify_access_token',
    'issue_tokens',
    'rotate_refresh_token',
    'revoke_refresh_token',
    'revoke_all_refresh_tokens',
]
