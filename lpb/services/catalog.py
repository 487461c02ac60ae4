"""Built-in template catalog.

Seeded into the store by ``flask seed defaults`` and served directly when
the store is empty or unreachable. Treat it as read-only; callers get deep
copies.
"""

from __future__ import annotations

import copy
from typing import Any


def _field(field_id: str, label: str, default: str, field_type: str = 'text') -> dict[str, str]:
    return {'id': field_id, 'label': label, 'type': field_type, 'defaultValue': default}


DEFAULT_TEMPLATES: tuple[dict[str, Any], ...] = (
    {
        'id': 'modern-saas',
        'name': 'Modern SaaS',
        'category': 'saas',
        'description': 'Clean and modern template for SaaS products',
        'thumbnail': 'https://placehold.co/400x300/e0f2fe/0284c7?text=SaaS',
        'isPublic': True,
        'sections': [
            {
                'id': 'hero',
                'type': 'hero',
                'name': 'Hero Section',
                'editableFields': [
                    _field('headline', 'Headline', 'Build Something Amazing'),
                    _field('subheadline', 'Subheadline', 'The fastest way to launch your product'),
                    _field('cta-text', 'CTA Button Text', 'Get Started'),
                    _field('cta-link', 'CTA Button Link', '/signup', 'link'),
                    _field('bg-image', 'Background Image', 'https://placehold.co/1920x1080', 'image'),
                ],
            },
            {
                'id': 'features',
                'type': 'features',
                'name': 'Features Section',
                'editableFields': [
                    _field('title', 'Section Title', 'Powerful Features'),
                    _field('feature-1-title', 'Feature 1 Title', 'Easy to Use'),
                    _field('feature-1-desc', 'Feature 1 Description', 'Intuitive interface'),
                    _field('feature-2-title', 'Feature 2 Title', 'Customizable'),
                    _field('feature-2-desc', 'Feature 2 Description', 'Make it match your brand'),
                ],
            },
            {
                'id': 'pricing',
                'type': 'pricing',
                'name': 'Pricing Section',
                'editableFields': [
                    _field('title', 'Section Title', 'Simple Pricing'),
                    _field('plan-1-name', 'Plan 1 Name', 'Starter'),
                    _field('plan-1-price', 'Plan 1 Price', '$9/mo'),
                    _field('plan-2-name', 'Plan 2 Name', 'Pro'),
                    _field('plan-2-price', 'Plan 2 Price', '$29/mo'),
                ],
            },
        ],
    },
    {
        'id': 'creative-portfolio',
        'name': 'Creative Portfolio',
        'category': 'portfolio',
        'description': 'Showcase your work with style',
        'thumbnail': 'https://placehold.co/400x300/fce7f3/be185d?text=Portfolio',
        'isPublic': True,
        'sections': [
            {
                'id': 'hero',
                'type': 'hero',
                'name': 'Hero Section',
                'editableFields': [
                    _field('headline', 'Your Name', 'John Doe'),
                    _field('subheadline', 'Title', 'Creative Designer'),
                    _field('cta-text', 'CTA Text', 'View My Work'),
                    _field('cta-link', 'CTA Link', '#projects', 'link'),
                ],
            },
        ],
    },
    {
        'id': 'business-landing',
        'name': 'Business Landing',
        'category': 'business',
        'description': 'Professional landing page for businesses',
        'thumbnail': 'https://placehold.co/400x300/d1fae5/047857?text=Business',
        'isPublic': True,
        'sections': [
            {
                'id': 'hero',
                'type': 'hero',
                'name': 'Hero Section',
                'editableFields': [
                    _field('headline', 'Headline', 'Grow Your Business'),
                    _field('subheadline', 'Subheadline', 'We help companies scale'),
                    _field('cta-text', 'CTA Text', 'Contact Us'),
                    _field('cta-link', 'CTA Link', '/contact', 'link'),
                ],
            },
            {
                'id': 'features',
                'type': 'features',
                'name': 'Services Section',
                'editableFields': [
                    _field('title', 'Section Title', 'Our Services'),
                    _field('feature-1-title', 'Service 1', 'Consulting'),
                    _field('feature-1-desc', 'Service 1 Desc', 'Expert advice for your business'),
                    _field('feature-2-title', 'Service 2', 'Development'),
                    _field('feature-2-desc', 'Service 2 Desc', 'Custom solutions built for you'),
                ],
            },
        ],
    },
)


class TemplateCatalog:
    """Read-only view over a fixed set of template mappings."""

    def __init__(self, templates: tuple[dict[str, Any], ...] = DEFAULT_TEMPLATES):
        self._templates = tuple(copy.deepcopy(t) for t in templates)

    def all(self, category: str | None = None) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(t) for t in self._templates
            if category is None or t['category'] == category
        ]

    def get(self, template_id: str) -> dict[str, Any] | None:
        for template in self._templates:
            if template['id'] == template_id:
                return copy.deepcopy(template)
        return None

    def __iter__(self):
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._templates)


__all__ = ['DEFAULT_TEMPLATES', 'TemplateCatalog']
