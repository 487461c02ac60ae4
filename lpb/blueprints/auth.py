"""Authentication API: register, login, token refresh and logout."""
from __future__ import annotations

from flask import Blueprint, jsonify

from lpb.auth import get_current_user, login_required
from lpb.extensions import limiter
from lpb.schemas import LoginRequest, LogoutRequest, RefreshRequest, RegisterRequest, parse_body
from lpb.security.config import auth_rate_limit
from lpb.serializers import serialize_user
from lpb.services.auth import AuthService

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
@limiter.limit(auth_rate_limit)
def register():
    body = parse_body(RegisterRequest)
    user, tokens = AuthService.register(body.email, body.password, body.name)
    return jsonify({
        'message': 'User registered successfully',
        'user': serialize_user(user),
        'tokens': tokens,
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(auth_rate_limit)
def login():
    body = parse_body(LoginRequest)
    user, tokens = AuthService.login(body.email, body.password)
    return jsonify({
        'message': 'Login successful',
        'user': serialize_user(user),
        'tokens': tokens,
    })


@auth_bp.route('/refresh', methods=['POST'])
def refresh():
    body = parse_body(RefreshRequest)
    tokens = AuthService.refresh(body.refresh_token)
    return jsonify({'message': 'Token refreshed successfully', 'tokens': tokens})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Always succeeds; an unknown refresh token is already logged out."""
    body = parse_body(LogoutRequest)
    AuthService.logout(body.refresh_token)
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/logout-all', methods=['POST'])
@login_required
def logout_all():
    AuthService.logout_all(get_current_user())
    return jsonify({'message': 'Logged out from all devices'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    user = AuthService.get_user(get_current_user().id)
    return jsonify({'user': serialize_user(user)})
