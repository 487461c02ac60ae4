"""Model to JSON-ready dict conversion (camelCase wire keys)."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Mapping

from lpb.models import (
    ComponentSpec,
    Customization,
    CustomizationVersion,
    Page,
    Section,
    User,
    UserInvite,
    as_utc,
)


def iso(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None


def _enum_value(value: Any) -> Any:
    return getattr(value, 'value', value)


def serialize_user(user: User) -> dict[str, Any]:
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'avatar': user.avatar,
        'role': _enum_value(user.role),
        'isActive': bool(user.active),
        'needsPasswordSetup': bool(user.needs_password_setup),
        'lastLoginAt': iso(user.last_login_at),
        'createdAt': iso(user.created_at),
        'updatedAt': iso(user.updated_at),
    }


def serialize_invite(invite: UserInvite) -> dict[str, Any]:
    return {
        'id': invite.id,
        'email': invite.email,
        'role': _enum_value(invite.role),
        'expiresAt': iso(invite.expires_at),
        'acceptedAt': iso(invite.accepted_at),
        'createdAt': iso(invite.created_at),
    }


def serialize_template(template: Any) -> dict[str, Any]:
    """Serialize a stored ``Template`` row or a catalog mapping.

    Both sources go through here so callers cannot tell them apart.
    """
    if isinstance(template, Mapping):
        get = template.get
        created_at = get('createdAt')
        updated_at = get('updatedAt')
        user_id = get('userId')
        is_public = get('isPublic', True)
    else:
        get = lambda key, default=None: getattr(template, key, default)  # noqa: E731
        created_at = iso(template.created_at)
        updated_at = iso(template.updated_at)
        user_id = template.user_id
        is_public = template.is_public

    return {
        'id': get('id'),
        'name': get('name'),
        'description': get('description'),
        'thumbnail': get('thumbnail'),
        'category': get('category') or 'general',
        'isPublic': bool(is_public),
        'userId': user_id,
        'sections': copy.deepcopy(get('sections') or []),
        'createdAt': created_at,
        'updatedAt': updated_at,
    }


def serialize_section(section: Section) -> dict[str, Any]:
    return {
        'id': section.id,
        'pageId': section.page_id,
        'type': section.type,
        'name': section.name,
        'order': section.order,
        'templateSectionId': section.template_section_id,
        'fields': section.fields,
        'styles': section.styles,
        'createdAt': iso(section.created_at),
        'updatedAt': iso(section.updated_at),
    }


def ordered_sections(page: Page) -> list[Section]:
    """Render order: ascending ``order``, ties by insertion."""
    return sorted(page.sections, key=lambda s: (s.order, s.seq))


def serialize_page(page: Page, include_sections: bool = True) -> dict[str, Any]:
    data = {
        'id': page.id,
        'name': page.name,
        'slug': page.slug,
        'userId': page.user_id,
        'templateId': page.template_id,
        'status': _enum_value(page.status),
        'isPublished': bool(page.is_published),
        'publishedAt': iso(page.published_at),
        'seoTitle': page.seo_title,
        'seoDescription': page.seo_description,
        'ogImage': page.og_image,
        'createdAt': iso(page.created_at),
        'updatedAt': iso(page.updated_at),
    }
    if include_sections:
        data['sections'] = [serialize_section(s) for s in ordered_sections(page)]
    return data


def serialize_public_page(page: Page) -> dict[str, Any]:
    data = serialize_page(page)
    data.pop('userId', None)
    return data


def serialize_customization(customization: Customization) -> dict[str, Any]:
    page = customization.page
    return {
        'id': customization.id,
        'pageId': customization.page_id,
        'pageName': page.name if page is not None else None,
        'templateId': customization.template_id,
        'templateName': customization.template_name,
        'sections': copy.deepcopy(customization.sections or []),
        'status': _enum_value(customization.status),
        'version': customization.version,
        'createdAt': iso(customization.created_at),
        'updatedAt': iso(customization.updated_at),
    }


def serialize_version(entry: CustomizationVersion) -> dict[str, Any]:
    return {
        'version': entry.version,
        'timestamp': iso(entry.created_at),
        'changes': list(entry.changes or []),
    }


def serialize_component_spec(record: ComponentSpec) -> dict[str, Any]:
    data = copy.deepcopy(record.spec or {})
    data.update({
        'id': record.id,
        'source': record.source,
        'createdAt': iso(record.created_at),
    })
    return data


__all__ = [
    'iso',
    'serialize_user',
    'serialize_invite',
    'serialize_template',
    'serialize_section',
    'ordered_sections',
    'serialize_page',
    'serialize_public_page',
    'serialize_customization',
    'serialize_version',
    'serialize_component_spec',
]
