"""Template store with built-in catalog fallback."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from lpb.errors import NotFoundError
from lpb.extensions import db
from lpb.models import Role, Template, User
from lpb.security import Action, authorize
from lpb.serializers import serialize_template
from lpb.services.audit import log_admin_action
from lpb.services.catalog import TemplateCatalog

TEMPLATE_NOT_FOUND = 'Template not found'


class TemplateService:
    """Visibility-filtered template reads and SUPER_ADMIN writes.

    Reads never fail: when the store raises or has nothing to show, the
    catalog answers instead, serialized exactly like stored rows.
    """

    def __init__(self, catalog: TemplateCatalog):
        self.catalog = catalog

    def _fallback(self, category: str | None) -> list[dict[str, Any]]:
        return [serialize_template(t) for t in self.catalog.all(category)]

    def list_templates(self, category: str | None = None, user: User | None = None) -> list[dict[str, Any]]:
        stmt = select(Template)
        if user is not None and user.has_role(Role.SUPER_ADMIN):
            pass
        elif user is not None:
            stmt = stmt.where(or_(Template.is_public.is_(True), Template.user_id == user.id))
        else:
            stmt = stmt.where(Template.is_public.is_(True))
        if category:
            stmt = stmt.where(Template.category == category)
        stmt = stmt.order_by(Template.created_at.desc())

        try:
            rows = db.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning(f"Template store unavailable, serving built-in catalog: {e}")
            return self._fallback(category)

        if not rows:
            current_app.logger.warning("No stored templates visible, serving built-in catalog")
            return self._fallback(category)

        return [serialize_template(t) for t in rows]

    def get_template(self, template_id: str, user: User | None = None) -> dict[str, Any]:
        try:
            row = db.session.get(Template, template_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning(f"Template store unavailable, serving built-in catalog: {e}")
            row = None

        if row is None:
            fallback = self.catalog.get(template_id)
            if fallback is None:
                raise NotFoundError(TEMPLATE_NOT_FOUND)
            return serialize_template(fallback)

        authorize(user, Action.READ, row, not_found_message=TEMPLATE_NOT_FOUND)
        return serialize_template(row)

    def find_template(self, template_id: str | None) -> dict[str, Any] | None:
        """Unfiltered lookup for page internals (blueprints, defaults)."""
        if not template_id:
            return None
        try:
            row = db.session.get(Template, template_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning(f"Template store unavailable, serving built-in catalog: {e}")
            row = None
        if row is not None:
            return serialize_template(row)
        fallback = self.catalog.get(template_id)
        return serialize_template(fallback) if fallback is not None else None

    def get_template_sections(self, template_id: str, user: User | None = None) -> list[dict[str, Any]]:
        return self.get_template(template_id, user)['sections']

    def create_template(self, user: User, data: dict[str, Any]) -> dict[str, Any]:
        authorize(user, Action.CREATE, kind='template')

        template = Template(
            name=data['name'],
            description=data.get('description'),
            thumbnail=data.get('thumbnail'),
            category=data.get('category') or 'general',
            is_public=bool(data.get('is_public') or False),
            sections=data.get('sections') or [],
            user_id=user.id,
        )
        db.session.add(template)
        db.session.commit()

        log_admin_action(user, 'template_created', 'template', template.id, {'name': template.name})
        return serialize_template(template)

    def _get_row(self, template_id: str) -> Template:
        template = db.session.get(Template, template_id)
        if template is None:
            raise NotFoundError(TEMPLATE_NOT_FOUND)
        return template

    def update_template(self, template_id: str, user: User, data: dict[str, Any]) -> dict[str, Any]:
        template = self._get_row(template_id)
        authorize(user, Action.UPDATE, template, not_found_message=TEMPLATE_NOT_FOUND)

        for key in ('name', 'description', 'thumbnail', 'category', 'is_public', 'sections'):
            if key in data and data[key] is not None:
                setattr(template, key, data[key])
        db.session.commit()

        log_admin_action(user, 'template_updated', 'template', template.id, {'fields': sorted(data)})
        return serialize_template(template)

    def delete_template(self, template_id: str, user: User) -> None:
        template = self._get_row(template_id)
        authorize(user, Action.DELETE, template, not_found_message=TEMPLATE_NOT_FOUND)

        db.session.delete(template)
        db.session.commit()
        log_admin_action(user, 'template_deleted', 'template', template_id)


def init_template_service(app, catalog: TemplateCatalog | None = None) -> TemplateService:
    service = TemplateService(catalog or TemplateCatalog())
    app.extensions['template_service'] = service
    return service


def get_template_service() -> TemplateService:
    return current_app.extensions['template_service']


__all__ = ['TemplateService', 'init_template_service', 'get_template_service']
