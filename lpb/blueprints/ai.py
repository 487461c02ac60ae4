"""AI component-spec API."""
from __future__ import annotations

from flask import Blueprint, jsonify

from lpb.auth import get_current_user, login_required
from lpb.extensions import limiter
from lpb.schemas import ComponentSpecRequest, parse_body
from lpb.security.config import ai_rate_limit
from lpb.serializers import serialize_component_spec
from lpb.services import ai_specs

ai_bp = Blueprint('ai', __name__, url_prefix='/api/ai')


@ai_bp.route('/generate-component-spec', methods=['POST'])
@login_required
@limiter.limit(ai_rate_limit)
def generate_component_spec():
    body = parse_body(ComponentSpecRequest)
    record = ai_specs.generate_component_spec(body.model_dump(), get_current_user())
    return jsonify({'success': True, 'data': serialize_component_spec(record)})


@ai_bp.route('/specs', methods=['GET'])
@login_required
def list_specs():
    records = ai_specs.list_specs(get_current_user())
    return jsonify({'success': True, 'data': [serialize_component_spec(r) for r in records]})


@ai_bp.route('/specs/<spec_id>', methods=['GET'])
@login_required
def get_spec(spec_id):
    record = ai_specs.get_spec(spec_id, get_current_user())
    return jsonify({'success': True, 'data': serialize_component_spec(record)})
