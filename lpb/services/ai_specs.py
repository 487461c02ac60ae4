"""
AI-assisted component specifications using OpenAI
"""
from __future__ import annotations

import json
import re
from typing import Any

import openai
from flask import current_app
from sqlalchemy import select

from lpb.errors import NotFoundError, UpstreamUnavailable
from lpb.extensions import db
from lpb.models import ComponentSpec, Role, User

AI_SYSTEM_PROMPT = """You are a senior UI system designer and accessibility-focused frontend architect.
You do NOT write production code.
You ONLY produce structured, implementation-ready component specifications.

Context:
We are building a landing-page platform for small businesses.
Components must be:
- Headless and unstyled
- Built on Radix UI primitives
- Accessible (WCAG AA)
- Reusable and documented
- Implementable later by developers

Hard constraints (must follow):
- Do NOT output JSX, TSX, or executable code
- Do NOT reference internal business logic
- Do NOT assume styling frameworks
- Do NOT invent APIs outside provided schema
- Output must be valid JSON only

Output schema:
{
  "componentName": "string",
  "category": "section | layout | content | interaction",
  "purpose": "string",
  "radixPrimitives": ["string"],
  "props": [
    {
      "name": "string",
      "type": "string",
      "required": true,
      "description": "string"
    }
  ],
  "slots": [
    {
      "name": "string",
      "description": "string"
    }
  ],
  "states": ["default", "hover", "focus", "disabled", "mobile"],
  "responsiveBehavior": "string",
  "accessibility": {
    "ariaRoles": ["string"],
    "keyboardNavigation": "string",
    "screenReaderNotes": "string"
  },
  "contentConstraints": ["string"],
  "nonGoals": ["string"],
  "exampleUseCase": "string"
}

Response rules:
- Output JSON only
- No markdown
- No explanations
- No code
- No styling details"""

CATEGORIES = ('section', 'layout', 'content', 'interaction')


def _get_openai_client():
    """Get configured OpenAI client"""
    # Config reads OPENAI_API_KEY from the environment
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OpenAI API key not configured. Please add OPENAI_API_KEY to your .env file.")

    return openai.OpenAI(api_key=api_key)


def build_user_prompt(request: dict[str, Any]) -> str:
    return (
        "Generate a component specification for:\n\n"
        f"Component purpose: {request.get('component_purpose') or ''}\n"
        f"Target users: {request.get('target_users') or ''}\n"
        f"Content requirements: {request.get('content_requirements') or ''}\n"
        f"Responsive needs: {request.get('responsive_needs') or ''}\n"
        f"Interaction needs: {request.get('interaction_needs') or ''}"
    )


def component_name_for(purpose: str) -> str:
    """'hero banner with CTA' -> 'HeroBannerWithCTA'."""
    words = (purpose or '').split(' ')
    joined = ''.join(w[:1].upper() + w[1:] for w in words)
    return re.sub(r'[^a-zA-Z]', '', joined) or 'CustomComponent'


def mock_spec(request: dict[str, Any]) -> dict[str, Any]:
    """Deterministic spec used when the model is unavailable."""
    purpose = request.get('component_purpose') or ''
    return {
        'componentName': component_name_for(purpose),
        'category': 'section',
        'purpose': purpose,
        'radixPrimitives': ['Slot', 'Primitive'],
        'props': [
            {
                'name': 'children',
                'type': 'ReactNode',
                'required': False,
                'description': 'Content to render inside the component',
            },
            {
                'name': 'className',
                'type': 'string',
                'required': False,
                'description': 'Additional CSS classes for styling',
            },
        ],
        'slots': [
            {'name': 'header', 'description': 'Header content slot'},
            {'name': 'content', 'description': 'Main content slot'},
        ],
        'states': ['default', 'hover', 'focus', 'disabled', 'mobile'],
        'responsiveBehavior': request.get('responsive_needs') or 'Stack vertically on mobile, horizontal on desktop',
        'accessibility': {
            'ariaRoles': ['region'],
            'keyboardNavigation': 'Tab through interactive elements',
            'screenReaderNotes': 'Ensure proper heading hierarchy',
        },
        'contentConstraints': [
            'Heading should be concise (max 60 characters)',
            'Description should be readable (max 200 characters)',
        ],
        'nonGoals': [
            'Does not handle form submission',
            'Does not manage external state',
        ],
        'exampleUseCase': purpose,
    }


def request_openai_spec(request: dict[str, Any]) -> dict[str, Any]:
    """Ask the model for a spec.

    Raises:
        ValueError: no API key configured
        UpstreamUnavailable: the call failed or returned something unusable
    """
    client = _get_openai_client()

    try:
        response = client.chat.completions.create(
            model=current_app.config.get('OPENAI_MODEL', 'gpt-4o'),
            messages=[
                {"role": "system", "content": AI_SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(request)}
            ],
            response_format={"type": "json_object"},
            temperature=0.7,
        )
    except openai.OpenAIError as e:
        raise UpstreamUnavailable(f"OpenAI request failed: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise UpstreamUnavailable('Empty response from OpenAI')

    try:
        spec = json.loads(content)
    except json.JSONDecodeError as e:
        raise UpstreamUnavailable('Failed to parse AI response') from e

    if not isinstance(spec, dict) or not isinstance(spec.get('componentName'), str):
        raise UpstreamUnavailable('AI response does not match the component spec schema')
    if spec.get('category') not in CATEGORIES:
        spec['category'] = 'section'
    return spec


def generate_component_spec(request: dict[str, Any], user: User | None = None) -> ComponentSpec:
    """Generate and store a spec, degrading to the mock on any upstream problem."""
    source = 'openai'
    try:
        spec = request_openai_spec(request)
    except ValueError:
        source = 'mock'
        spec = mock_spec(request)
    except UpstreamUnavailable as e:
        current_app.logger.warning(f"AI spec generation failed, using mock spec: {e.message}")
        source = 'mock'
        spec = mock_spec(request)

    spec.pop('id', None)
    spec.pop('createdAt', None)
    record = ComponentSpec(
        component_name=spec['componentName'],
        category=spec.get('category') or 'section',
        source=source,
        spec=spec,
        created_by_id=user.id if user else None,
    )
    db.session.add(record)
    db.session.commit()
    return record


def list_specs(user: User) -> list[ComponentSpec]:
    stmt = select(ComponentSpec).order_by(ComponentSpec.created_at.desc())
    if not user.has_role(Role.SUPER_ADMIN):
        stmt = stmt.where(ComponentSpec.created_by_id == user.id)
    return list(db.session.execute(stmt).scalars().all())


def get_spec(spec_id: str, user: User) -> ComponentSpec:
    record = db.session.get(ComponentSpec, spec_id)
    if record is None or (record.created_by_id != user.id and not user.has_role(Role.SUPER_ADMIN)):
        raise NotFoundError('Spec not found')
    return record


__all__ = [
    'AI_SYSTEM_PROMPT',
    'generate_component_spec',
    'list_specs',
    'get_spec',
    'mock_spec',
    'component_name_for',
]
