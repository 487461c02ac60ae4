"""Page and section API."""
from __future__ import annotations

from flask import Blueprint, jsonify

from lpb.auth import get_current_user, login_required, roles_required
from lpb.models import Role
from lpb.schemas import (
    CreatePageRequest,
    ReorderSectionsRequest,
    SaveSectionsRequest,
    SectionInput,
    SectionUpdateRequest,
    UpdatePageRequest,
    parse_body,
)
from lpb.serializers import serialize_page, serialize_section
from lpb.services.pages import PageService

pages_bp = Blueprint('pages', __name__, url_prefix='/api/pages')


def _ok(data, status: int = 200):
    return jsonify({'success': True, 'data': data}), status


# ============= Pages =============

@pages_bp.route('', methods=['GET'])
@login_required
def list_pages():
    """Own pages, or every page for SUPER_ADMIN, most recently updated first."""
    pages = PageService.list_pages(get_current_user())
    return _ok([serialize_page(p) for p in pages])


@pages_bp.route('/<page_id>', methods=['GET'])
@login_required
def get_page(page_id):
    return _ok(serialize_page(PageService.get_page(page_id, get_current_user())))


@pages_bp.route('', methods=['POST'])
@roles_required(Role.ADMIN, Role.SUPER_ADMIN)
def create_page():
    body = parse_body(CreatePageRequest)
    page = PageService.create_page(get_current_user(), body.model_dump(exclude_unset=True))
    return _ok(serialize_page(page), 201)


@pages_bp.route('/<page_id>', methods=['PUT'])
@login_required
def update_page(page_id):
    body = parse_body(UpdatePageRequest)
    page = PageService.update_page(page_id, get_current_user(), body.model_dump(exclude_unset=True))
    return _ok(serialize_page(page))


@pages_bp.route('/<page_id>', methods=['DELETE'])
@roles_required(Role.ADMIN, Role.SUPER_ADMIN)
def delete_page(page_id):
    PageService.delete_page(page_id, get_current_user())
    return jsonify({'success': True, 'message': 'Page deleted'})


@pages_bp.route('/<page_id>/publish', methods=['POST'])
@login_required
def publish_page(page_id):
    return _ok(serialize_page(PageService.publish(page_id, get_current_user())))


@pages_bp.route('/<page_id>/unpublish', methods=['POST'])
@login_required
def unpublish_page(page_id):
    return _ok(serialize_page(PageService.unpublish(page_id, get_current_user())))


# ============= Sections =============

@pages_bp.route('/<page_id>/sections', methods=['PUT'])
@login_required
def save_sections(page_id):
    body = parse_body(SaveSectionsRequest)
    sections = PageService.save_sections(
        page_id,
        get_current_user(),
        [s.model_dump() for s in body.sections],
    )
    return _ok([serialize_section(s) for s in sections])


@pages_bp.route('/<page_id>/sections', methods=['POST'])
@login_required
def add_section(page_id):
    body = parse_body(SectionInput)
    section = PageService.add_section(page_id, get_current_user(), body.model_dump())
    return _ok(serialize_section(section), 201)


@pages_bp.route('/<page_id>/sections/order', methods=['PUT'])
@login_required
def reorder_sections(page_id):
    body = parse_body(ReorderSectionsRequest)
    sections = PageService.reorder_sections(page_id, get_current_user(), body.section_ids)
    return _ok([serialize_section(s) for s in sections])


@pages_bp.route('/<page_id>/sections/<section_id>', methods=['PUT'])
@login_required
def update_section(page_id, section_id):
    body = parse_body(SectionUpdateRequest)
    section = PageService.update_section(
        page_id,
        section_id,
        get_current_user(),
        body.model_dump(exclude_unset=True),
    )
    return _ok(serialize_section(section))


@pages_bp.route('/<page_id>/sections/<section_id>', methods=['DELETE'])
@login_required
def delete_section(page_id, section_id):
    PageService.delete_section(page_id, section_id, get_current_user())
    return jsonify({'success': True, 'message': 'Section deleted'})
