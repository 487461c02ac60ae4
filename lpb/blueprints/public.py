"""Unauthenticated endpoints: health check and published pages."""
from __future__ import annotations

from flask import Blueprint, jsonify

from lpb.serializers import serialize_public_page
from lpb.services.pages import PageService

public_bp = Blueprint('public', __name__, url_prefix='/api')


@public_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


@public_bp.route('/public/pages/<slug>', methods=['GET'])
def published_page(slug):
    page = PageService.get_published_by_slug(slug)
    return jsonify({'success': True, 'data': serialize_public_page(page)})
