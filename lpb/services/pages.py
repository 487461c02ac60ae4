"""Page lifecycle and section management."""

from __future__ import annotations

import copy
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from lpb.errors import DuplicateSlug, NotFoundError, ValidationError
from lpb.extensions import db
from lpb.models import Page, PageStatus, Role, Section, User, utcnow
from lpb.security import Action, authorize
from lpb.serializers import ordered_sections
from lpb.services.audit import log_admin_action
from lpb.services.customizations import CustomizationService
from lpb.services.templates import get_template_service

PAGE_NOT_FOUND = 'Page not found'
SECTION_NOT_FOUND = 'Section not found'


def _build_section(data: dict[str, Any], index: int, seq: int | None = None) -> Section:
    order = data.get('order')
    return Section(
        type=data['type'],
        name=data['name'],
        order=index if order is None else order,
        seq=index if seq is None else seq,
        template_section_id=data.get('template_section_id'),
        fields=copy.deepcopy(data.get('fields') if data.get('fields') is not None else []),
        styles=copy.deepcopy(data.get('styles')),
    )


def _section_from_blueprint(blueprint: dict[str, Any], index: int) -> Section:
    fields = [
        {
            'id': field['id'],
            'label': field.get('label'),
            'type': field.get('type'),
            'value': field.get('defaultValue'),
        }
        for field in blueprint.get('editableFields') or []
        if isinstance(field, dict) and 'id' in field
    ]
    return _build_section({
        'type': blueprint.get('type') or 'custom',
        'name': blueprint.get('name') or blueprint.get('type') or 'Section',
        'template_section_id': blueprint.get('id'),
        'fields': fields,
    }, index)


def _next_seq(page: Page) -> int:
    return max((s.seq for s in page.sections), default=-1) + 1


class PageService:
    """Service for page and section management."""

    @staticmethod
    def list_pages(user: User) -> list[Page]:
        stmt = select(Page)
        if not user.has_role(Role.SUPER_ADMIN):
            stmt = stmt.where(Page.user_id == user.id)
        stmt = stmt.order_by(Page.updated_at.desc(), Page.created_at.desc())
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def _load(page_id: str, user: User, action: Action) -> Page:
        page = db.session.get(Page, page_id)
        if page is None:
            raise NotFoundError(PAGE_NOT_FOUND)
        authorize(user, action, page, not_found_message=PAGE_NOT_FOUND)
        return page

    @staticmethod
    def get_page(page_id: str, user: User) -> Page:
        return PageService._load(page_id, user, Action.READ)

    @staticmethod
    def get_published_by_slug(slug: str) -> Page:
        stmt = (
            select(Page)
            .where(Page.slug == slug)
            .where(Page.is_published.is_(True))
            .order_by(Page.published_at.desc())
            .limit(1)
        )
        page = db.session.execute(stmt).scalar_one_or_none()
        if page is None:
            raise NotFoundError(PAGE_NOT_FOUND)
        return page

    @staticmethod
    def _ensure_slug_free(user_id: str, slug: str, exclude_id: str | None = None) -> None:
        stmt = select(Page.id).where(Page.user_id == user_id).where(Page.slug == slug)
        if exclude_id:
            stmt = stmt.where(Page.id != exclude_id)
        if db.session.execute(stmt).first() is not None:
            raise DuplicateSlug()

    @staticmethod
    def create_page(user: User, data: dict[str, Any]) -> Page:
        """Create a draft page, instantiating template sections if none are given."""
        authorize(user, Action.CREATE, kind='page')
        PageService._ensure_slug_free(user.id, data['slug'])

        template = None
        template_id = data.get('template_id')
        if template_id:
            try:
                template = get_template_service().get_template(template_id, user)
            except NotFoundError:
                raise ValidationError('Unknown template', details={'templateId': ['Template not found']})

        page = Page(
            name=data['name'],
            slug=data['slug'],
            user_id=user.id,
            template_id=template_id,
            status=PageStatus.DRAFT,
            is_published=False,
            seo_title=data.get('seo_title'),
            seo_description=data.get('seo_description'),
            og_image=data.get('og_image'),
        )
        db.session.add(page)

        sections = data.get('sections')
        if sections is not None:
            for index, section in enumerate(sections):
                page.sections.append(_build_section(section, index))
        elif template is not None:
            for index, blueprint in enumerate(template.get('sections') or []):
                page.sections.append(_section_from_blueprint(blueprint, index))

        CustomizationService.create_for_page(page, user, template)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateSlug()
        return page

    @staticmethod
    def update_page(page_id: str, user: User, data: dict[str, Any]) -> Page:
        page = PageService._load(page_id, user, Action.UPDATE)

        if data.get('slug') and data['slug'] != page.slug:
            PageService._ensure_slug_free(page.user_id, data['slug'], exclude_id=page.id)

        for key in ('name', 'slug'):
            if data.get(key) is not None:
                setattr(page, key, data[key])
        # Optional SEO fields; an explicit null clears them
        for key in ('seo_title', 'seo_description', 'og_image'):
            if key in data:
                setattr(page, key, data[key])

        status = data.get('status')
        if status is not None:
            status = PageStatus(status)
            page.status = status
            page.is_published = status is PageStatus.PUBLISHED
            if page.is_published:
                page.published_at = page.published_at or utcnow()
            else:
                page.published_at = None

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateSlug()
        return page

    @staticmethod
    def publish(page_id: str, user: User) -> Page:
        page = PageService._load(page_id, user, Action.PUBLISH)
        page.status = PageStatus.PUBLISHED
        page.is_published = True
        page.published_at = utcnow()
        db.session.commit()
        log_admin_action(user, 'page_published', 'page', page.id, {'slug': page.slug})
        return page

    @staticmethod
    def unpublish(page_id: str, user: User) -> Page:
        page = PageService._load(page_id, user, Action.PUBLISH)
        page.status = PageStatus.DRAFT
        page.is_published = False
        page.published_at = None
        db.session.commit()
        log_admin_action(user, 'page_unpublished', 'page', page.id, {'slug': page.slug})
        return page

    @staticmethod
    def delete_page(page_id: str, user: User) -> None:
        page = PageService._load(page_id, user, Action.DELETE)
        owner_id = page.user_id
        db.session.delete(page)
        db.session.commit()
        log_admin_action(user, 'page_deleted', 'page', page_id, {'ownerId': owner_id})

    # Sections

    @staticmethod
    def add_section(page_id: str, user: User, data: dict[str, Any]) -> Section:
        page = db.session.get(Page, page_id)
        if page is None:
            raise NotFoundError(PAGE_NOT_FOUND)
        authorize(user, Action.CREATE, page, kind='section', not_found_message=PAGE_NOT_FOUND)

        order = data.get('order')
        if order is None:
            order = max((s.order for s in page.sections), default=-1) + 1
        section = _build_section({**data, 'order': order}, index=order, seq=_next_seq(page))
        page.sections.append(section)

        CustomizationService.sync_page(page, user)
        db.session.commit()
        return section

    @staticmethod
    def _load_section(page_id: str, section_id: str, user: User) -> Section:
        section = db.session.get(Section, section_id)
        if section is None or section.page_id != page_id:
            raise NotFoundError(SECTION_NOT_FOUND)
        authorize(user, Action.UPDATE, section, not_found_message=SECTION_NOT_FOUND)
        return section

    @staticmethod
    def update_section(page_id: str, section_id: str, user: User, data: dict[str, Any]) -> Section:
        section = PageService._load_section(page_id, section_id, user)

        for key in ('type', 'name', 'order'):
            if data.get(key) is not None:
                setattr(section, key, data[key])
        if data.get('fields') is not None:
            section.fields = copy.deepcopy(data['fields'])
        if data.get('styles') is not None:
            section.styles = copy.deepcopy(data['styles'])

        CustomizationService.sync_page(section.page, user)
        db.session.commit()
        return section

    @staticmethod
    def delete_section(page_id: str, section_id: str, user: User) -> None:
        section = PageService._load_section(page_id, section_id, user)
        page = section.page
        page.sections.remove(section)

        CustomizationService.sync_page(page, user)
        db.session.commit()

    @staticmethod
    def save_sections(page_id: str, user: User, sections: list[dict[str, Any]]) -> list[Section]:
        """Replace every section of the page in one transaction."""
        page = PageService._load(page_id, user, Action.UPDATE)

        try:
            page.sections.clear()
            db.session.flush()
            for index, data in enumerate(sections):
                page.sections.append(_build_section(data, index))
            CustomizationService.sync_page(page, user)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        return ordered_sections(page)

    @staticmethod
    def reorder_sections(page_id: str, user: User, section_ids: list[str]) -> list[Section]:
        page = PageService._load(page_id, user, Action.UPDATE)

        by_id = {s.id: s for s in page.sections}
        unknown = [sid for sid in section_ids if sid not in by_id]
        if unknown:
            raise ValidationError(details={'sectionIds': [f"Unknown section: {sid}" for sid in unknown]})
        if len(set(section_ids)) != len(section_ids):
            raise ValidationError(details={'sectionIds': ['Duplicate section ids']})

        for index, section_id in enumerate(section_ids):
            by_id[section_id].order = index

        CustomizationService.sync_page(page, user)
        db.session.commit()
        return ordered_sections(page)


__all__ = ['PageService']
