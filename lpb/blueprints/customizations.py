"""Customization history API."""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from lpb.auth import get_current_user, login_required
from lpb.schemas import CustomizationUpdateRequest, parse_body
from lpb.serializers import serialize_customization, serialize_version
from lpb.services.customizations import CustomizationService

customizations_bp = Blueprint('customizations', __name__, url_prefix='/api/customizations')


@customizations_bp.route('', methods=['GET'])
@login_required
def list_customizations():
    status = request.args.get('status')
    items = CustomizationService.list_customizations(get_current_user(), status)
    return jsonify({'success': True, 'data': [serialize_customization(c) for c in items]})


@customizations_bp.route('/<customization_id>', methods=['GET'])
@login_required
def get_customization(customization_id):
    customization = CustomizationService.get_customization(customization_id, get_current_user())
    return jsonify({'success': True, 'data': serialize_customization(customization)})


@customizations_bp.route('/<customization_id>/versions', methods=['GET'])
@login_required
def version_history(customization_id):
    versions = CustomizationService.get_version_history(customization_id, get_current_user())
    return jsonify({'success': True, 'data': [serialize_version(v) for v in versions]})


@customizations_bp.route('/<customization_id>/restore/<int:version>', methods=['POST'])
@login_required
def restore_version(customization_id, version):
    customization = CustomizationService.restore_version(customization_id, version, get_current_user())
    return jsonify({'success': True, 'data': serialize_customization(customization)})


@customizations_bp.route('/<customization_id>', methods=['PUT'])
@login_required
def update_customization(customization_id):
    body = parse_body(CustomizationUpdateRequest)
    data = {}
    if body.template_name is not None:
        data['template_name'] = body.template_name
    if body.sections is not None:
        # Stored in wire shape: sectionId / sectionName / fieldChanges
        data['sections'] = [s.model_dump(by_alias=True) for s in body.sections]
    customization = CustomizationService.update_customization(customization_id, get_current_user(), data)
    return jsonify({'success': True, 'data': serialize_customization(customization)})


@customizations_bp.route('/<customization_id>', methods=['DELETE'])
@login_required
def archive_customization(customization_id):
    CustomizationService.archive(customization_id, get_current_user())
    return jsonify({'success': True, 'message': 'Customization archived'})
