"""User administration and invitation API."""
from __future__ import annotations

from flask import Blueprint, jsonify

from lpb.auth import get_current_user, roles_required
from lpb.extensions import limiter
from lpb.models import Role
from lpb.schemas import (
    ActiveUpdateRequest,
    InviteRequest,
    RoleUpdateRequest,
    SetupPasswordRequest,
    parse_body,
)
from lpb.security.config import auth_rate_limit
from lpb.serializers import iso, serialize_invite, serialize_user
from lpb.services.auth import InviteService, UserService
from lpb.services.email import build_setup_url

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


# ============= Invitations =============

@users_bp.route('/invite', methods=['POST'])
@roles_required(Role.ADMIN, Role.SUPER_ADMIN)
def invite_user():
    """ADMIN can invite USER only; SUPER_ADMIN can invite any role but SUPER_ADMIN."""
    body = parse_body(InviteRequest)
    invite = InviteService.invite_user(get_current_user(), body.email, body.role)
    return jsonify({
        'message': 'Invitation sent successfully',
        'invite': {
            'id': invite.id,
            'email': invite.email,
            'role': invite.role.value,
            'expiresAt': iso(invite.expires_at),
            'setupUrl': build_setup_url(invite.token),
        },
    }), 201


@users_bp.route('/invites', methods=['GET'])
@roles_required(Role.ADMIN, Role.SUPER_ADMIN)
def list_invites():
    invites = InviteService.list_pending_invites(get_current_user())
    return jsonify({'invites': [serialize_invite(i) for i in invites]})


@users_bp.route('/invites/<invite_id>', methods=['DELETE'])
@roles_required(Role.ADMIN, Role.SUPER_ADMIN)
def cancel_invite(invite_id):
    InviteService.cancel_invite(invite_id, get_current_user())
    return jsonify({'message': 'Invite cancelled successfully'})


@users_bp.route('/verify-invite/<token>', methods=['GET'])
def verify_invite(token):
    invite = InviteService.verify_invite(token)
    return jsonify({
        'valid': True,
        'email': invite.email,
        'role': invite.role.value,
    })


@users_bp.route('/setup-password', methods=['POST'])
@limiter.limit(auth_rate_limit)
def setup_password():
    body = parse_body(SetupPasswordRequest)
    user, tokens = InviteService.setup_password(body.token, body.password, body.name)
    return jsonify({
        'message': 'Account setup completed successfully',
        'user': serialize_user(user),
        'tokens': tokens,
    }), 201


# ============= Administration =============

@users_bp.route('', methods=['GET'])
@roles_required(Role.SUPER_ADMIN)
def list_users():
    return jsonify({'users': [serialize_user(u) for u in UserService.list_users()]})


@users_bp.route('/<user_id>/role', methods=['PATCH'])
@roles_required(Role.SUPER_ADMIN)
def update_role(user_id):
    body = parse_body(RoleUpdateRequest)
    user = UserService.update_user_role(get_current_user(), user_id, body.role)
    return jsonify({'message': 'Role updated successfully', 'user': serialize_user(user)})


@users_bp.route('/<user_id>/active', methods=['PATCH'])
@roles_required(Role.SUPER_ADMIN)
def set_active(user_id):
    body = parse_body(ActiveUpdateRequest)
    user = UserService.set_user_active(get_current_user(), user_id, body.is_active)
    message = 'User activated successfully' if body.is_active else 'User deactivated successfully'
    return jsonify({'message': message, 'user': serialize_user(user)})


@users_bp.route('/<user_id>', methods=['DELETE'])
@roles_required(Role.SUPER_ADMIN)
def delete_user(user_id):
    UserService.delete_user(get_current_user(), user_id)
    return jsonify({'message': 'User deleted successfully'})
