"""Customization tracking and version history."""

from __future__ import annotations

import copy
from typing import Any

from sqlalchemy import select

from lpb.errors import CustomizationArchived, NotFoundError, ValidationError, VersionNotFound
from lpb.extensions import db
from lpb.models import (
    Customization,
    CustomizationStatus,
    CustomizationVersion,
    Page,
    Role,
    User,
)
from lpb.security import Action, authorize
from lpb.serializers import ordered_sections
from lpb.services.templates import get_template_service

CUSTOMIZATION_NOT_FOUND = 'Customization not found'
_VALUE_KEYS = ('value', 'content', 'current')


def _value_of(field: Any) -> Any:
    if isinstance(field, dict):
        for key in _VALUE_KEYS:
            if key in field:
                return field[key]
    return field


def field_values(fields: Any) -> dict[str, Any]:
    """Flatten a section's fields into ``{field_id: value}``.

    Accepts a plain mapping or a list of field objects carrying an ``id``.
    """
    if isinstance(fields, dict):
        return {str(key): _value_of(value) for key, value in fields.items()}
    values: dict[str, Any] = {}
    for item in fields or []:
        if isinstance(item, dict) and 'id' in item:
            values[str(item['id'])] = _value_of(item)
    return values


def template_defaults(blueprint: dict[str, Any] | None) -> dict[str, Any]:
    if not blueprint:
        return {}
    return {
        field['id']: field.get('defaultValue')
        for field in blueprint.get('editableFields') or []
        if isinstance(field, dict) and 'id' in field
    }


def _keyed_sections(page: Page, template: dict[str, Any] | None):
    """Yield ``(section_key, section, defaults)`` in page order."""
    blueprints = (template or {}).get('sections') or []
    by_id = {b.get('id'): b for b in blueprints if isinstance(b, dict)}
    by_type: dict[str, dict[str, Any]] = {}
    for blueprint in blueprints:
        if isinstance(blueprint, dict):
            by_type.setdefault(blueprint.get('type'), blueprint)

    used: dict[str, int] = {}
    for section in ordered_sections(page):
        blueprint = by_id.get(section.template_section_id) if section.template_section_id else None
        if blueprint is None:
            blueprint = by_type.get(section.type)

        key = section.template_section_id or section.type
        used[key] = used.get(key, 0) + 1
        if used[key] > 1:
            key = f"{key}-{used[key]}"
        yield key, section, template_defaults(blueprint)


def _with_values(fields: Any, values: dict[str, Any]) -> Any:
    """Copy of ``fields`` in its own shape carrying exactly ``values``."""
    if isinstance(fields, list):
        updated = []
        seen = set()
        for item in fields:
            if isinstance(item, dict) and 'id' in item:
                field_id = str(item['id'])
                if field_id not in values:
                    continue
                seen.add(field_id)
                item = copy.deepcopy(item)
                value_key = next((k for k in _VALUE_KEYS if k in item), 'value')
                item[value_key] = copy.deepcopy(values[field_id])
            updated.append(item)
        for field_id, value in values.items():
            if field_id not in seen:
                updated.append({'id': field_id, 'value': copy.deepcopy(value)})
        return updated

    updated = {}
    for field_id, value in values.items():
        existing = (fields or {}).get(field_id) if isinstance(fields, dict) else None
        if isinstance(existing, dict) and any(k in existing for k in _VALUE_KEYS):
            existing = copy.deepcopy(existing)
            existing[next(k for k in _VALUE_KEYS if k in existing)] = copy.deepcopy(value)
            updated[field_id] = existing
        else:
            updated[field_id] = copy.deepcopy(value)
    return updated


def apply_changes(page: Page, template: dict[str, Any] | None, sections: list[dict[str, Any]]) -> None:
    """Rewrite the page's section fields so they carry ``sections``' deltas.

    Fields without a recorded change go back to their template default.
    Fields unknown to the template and without a change are dropped.
    Entries for sections the page no longer has are ignored.
    """
    wanted = {
        entry.get('sectionId'): entry.get('fieldChanges') or {}
        for entry in sections or []
        if isinstance(entry, dict)
    }
    for key, section, defaults in _keyed_sections(page, template):
        changes = wanted.get(key) or {}
        current = field_values(section.fields)

        values: dict[str, Any] = {}
        for field_id in current:
            if field_id in changes:
                values[field_id] = (changes[field_id] or {}).get('current')
            elif field_id in defaults:
                values[field_id] = defaults[field_id]
        for field_id, change in changes.items():
            if field_id not in values:
                values[field_id] = (change or {}).get('current')

        if values != current:
            section.fields = _with_values(section.fields, values)


def compute_changes(page: Page, template: dict[str, Any] | None) -> list[dict[str, Any]]:
    """Field-level deltas of every section against its template defaults."""
    result: list[dict[str, Any]] = []
    for key, section, defaults in _keyed_sections(page, template):
        field_changes = {
            field_id: {'original': defaults.get(field_id), 'current': value}
            for field_id, value in field_values(section.fields).items()
            if value != defaults.get(field_id)
        }
        if field_changes:
            result.append({
                'sectionId': key,
                'sectionName': section.name,
                'fieldChanges': field_changes,
            })
    return result


def describe_changes(old: list[dict[str, Any]], new: list[dict[str, Any]]) -> list[str]:
    """Human-readable summary of what moved between two change sets."""
    old_by_id = {s['sectionId']: s for s in old or []}
    new_by_id = {s['sectionId']: s for s in new or []}
    descriptions: list[str] = []

    for section_id, section in new_by_id.items():
        name = section.get('sectionName') or section_id
        before = (old_by_id.get(section_id) or {}).get('fieldChanges') or {}
        after = section.get('fieldChanges') or {}
        for field_id, change in after.items():
            if before.get(field_id, {}).get('current') != change.get('current') or field_id not in before:
                descriptions.append(f"Updated {name}.{field_id}")
        for field_id in before:
            if field_id not in after:
                descriptions.append(f"Reverted {name}.{field_id}")

    for section_id, section in old_by_id.items():
        if section_id not in new_by_id:
            descriptions.append(f"Reverted {section.get('sectionName') or section_id}")

    return descriptions


class CustomizationService:
    """Per-page customization records with an append-only history."""

    @staticmethod
    def _append_version(customization: Customization, changes: list[str], user: User | None) -> CustomizationVersion:
        customization.version = (customization.version or 0) + 1
        entry = CustomizationVersion(
            customization=customization,
            version=customization.version,
            changes=list(changes),
            snapshot={'sections': copy.deepcopy(customization.sections or [])},
            created_by_id=user.id if user else None,
        )
        db.session.add(entry)
        return entry

    @staticmethod
    def create_for_page(page: Page, user: User | None, template: dict[str, Any] | None = None) -> Customization:
        """Attach a version-1 customization to a new page. Caller commits."""
        if template is None:
            template = get_template_service().find_template(page.template_id)
        customization = Customization(
            page=page,
            template_id=page.template_id,
            template_name=template.get('name') if template else None,
            sections=compute_changes(page, template),
            status=CustomizationStatus.ACTIVE,
            version=0,
        )
        db.session.add(customization)
        CustomizationService._append_version(customization, ['Initial creation'], user)
        return customization

    @staticmethod
    def sync_page(page: Page, user: User | None) -> Customization | None:
        """Record a new version if the page's field deltas moved. Caller commits."""
        customization = page.customization
        if customization is None:
            return CustomizationService.create_for_page(page, user)
        if customization.status is CustomizationStatus.ARCHIVED:
            return customization

        template = get_template_service().find_template(page.template_id)
        new_sections = compute_changes(page, template)
        if new_sections == (customization.sections or []):
            return customization

        changes = describe_changes(customization.sections or [], new_sections) or ['Updated sections']
        customization.sections = new_sections
        CustomizationService._append_version(customization, changes, user)
        return customization

    @staticmethod
    def list_customizations(user: User, status: str | None = None) -> list[Customization]:
        stmt = select(Customization).join(Page, Customization.page_id == Page.id)
        if not user.has_role(Role.SUPER_ADMIN):
            stmt = stmt.where(Page.user_id == user.id)
        if status and status != 'all':
            try:
                wanted = CustomizationStatus(status)
            except ValueError:
                raise ValidationError(details={'status': ['Must be one of: active, archived, all']})
            stmt = stmt.where(Customization.status == wanted)
        stmt = stmt.order_by(Customization.updated_at.desc())
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def get_customization(customization_id: str, user: User, action: Action = Action.READ) -> Customization:
        customization = db.session.get(Customization, customization_id)
        if customization is None:
            raise NotFoundError(CUSTOMIZATION_NOT_FOUND)
        authorize(user, action, customization, not_found_message=CUSTOMIZATION_NOT_FOUND)
        return customization

    @staticmethod
    def get_version_history(customization_id: str, user: User) -> list[CustomizationVersion]:
        customization = CustomizationService.get_customization(customization_id, user)
        return sorted(customization.versions, key=lambda v: v.version)

    @staticmethod
    def _get_mutable(customization_id: str, user: User) -> Customization:
        customization = CustomizationService.get_customization(customization_id, user, Action.UPDATE)
        if customization.status is CustomizationStatus.ARCHIVED:
            raise CustomizationArchived()
        return customization

    @staticmethod
    def _apply_to_page(customization: Customization, sections: list[dict[str, Any]]) -> None:
        page = customization.page
        if page is None:
            return
        template = get_template_service().find_template(page.template_id)
        apply_changes(page, template, sections)

    @staticmethod
    def update_customization(customization_id: str, user: User, data: dict[str, Any]) -> Customization:
        customization = CustomizationService._get_mutable(customization_id, user)

        changes: list[str] = []
        if data.get('template_name') is not None:
            customization.template_name = data['template_name']
            changes.append('Updated template name')
        if data.get('sections') is not None:
            new_sections = copy.deepcopy(data['sections'])
            changes.extend(describe_changes(customization.sections or [], new_sections))
            customization.sections = new_sections
            CustomizationService._apply_to_page(customization, new_sections)

        CustomizationService._append_version(customization, changes or ['Updated customization'], user)
        db.session.commit()
        return customization

    @staticmethod
    def restore_version(customization_id: str, version: int, user: User) -> Customization:
        """Append a new version whose sections equal snapshot ``version``."""
        customization = CustomizationService._get_mutable(customization_id, user)

        target = next((v for v in customization.versions if v.version == version), None)
        if target is None:
            raise VersionNotFound()

        snapshot = (target.snapshot or {}).get('sections') or []
        customization.sections = copy.deepcopy(snapshot)
        CustomizationService._apply_to_page(customization, snapshot)
        CustomizationService._append_version(customization, [f"Restored version {version}"], user)
        db.session.commit()
        return customization

    @staticmethod
    def archive(customization_id: str, user: User) -> Customization:
        customization = CustomizationService.get_customization(customization_id, user, Action.DELETE)
        if customization.status is CustomizationStatus.ARCHIVED:
            return customization

        customization.status = CustomizationStatus.ARCHIVED
        CustomizationService._append_version(customization, ['Archived'], user)
        db.session.commit()
        return customization


__all__ = [
    'CustomizationService',
    'apply_changes',
    'compute_changes',
    'describe_changes',
    'field_values',
    'template_defaults',
]
