"""Template API. Reads are open; writes are SUPER_ADMIN only."""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from lpb.auth import get_current_user, roles_required
from lpb.models import Role
from lpb.schemas import TemplateCreateRequest, TemplateUpdateRequest, parse_body
from lpb.services.templates import get_template_service

templates_bp = Blueprint('templates', __name__, url_prefix='/api/templates')


@templates_bp.route('', methods=['GET'])
def list_templates():
    """Public templates, plus own private ones when a valid token is sent."""
    category = request.args.get('category') or None
    templates = get_template_service().list_templates(category, get_current_user())
    return jsonify({'success': True, 'data': templates})


@templates_bp.route('/<template_id>', methods=['GET'])
def get_template(template_id):
    template = get_template_service().get_template(template_id, get_current_user())
    return jsonify({'success': True, 'data': template})


@templates_bp.route('/<template_id>/sections', methods=['GET'])
def get_template_sections(template_id):
    sections = get_template_service().get_template_sections(template_id, get_current_user())
    return jsonify({'success': True, 'data': sections})


@templates_bp.route('', methods=['POST'])
@roles_required(Role.SUPER_ADMIN)
def create_template():
    body = parse_body(TemplateCreateRequest)
    template = get_template_service().create_template(get_current_user(), body.model_dump(exclude_unset=True))
    return jsonify({'success': True, 'data': template}), 201


@templates_bp.route('/<template_id>', methods=['PUT'])
@roles_required(Role.SUPER_ADMIN)
def update_template(template_id):
    body = parse_body(TemplateUpdateRequest)
    template = get_template_service().update_template(
        template_id,
        get_current_user(),
        body.model_dump(exclude_unset=True),
    )
    return jsonify({'success': True, 'data': template})


@templates_bp.route('/<template_id>', methods=['DELETE'])
@roles_required(Role.SUPER_ADMIN)
def delete_template(template_id):
    get_template_service().delete_template(template_id, get_current_user())
    return jsonify({'success': True, 'message': 'Template deleted'})
