"""Request body schemas.

Bodies arrive with camelCase keys; models expose snake_case attributes and
``model_dump()`` yields snake_case dicts for the services.
"""

from __future__ import annotations

from typing import Any, TypeVar

from flask import request
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool
from pydantic.alias_generators import to_camel

from lpb.models import PageStatus, Role

SLUG_PATTERN = r'^[a-z0-9-]+$'

M = TypeVar('M', bound=BaseModel)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


def parse_body(model: type[M]) -> M:
    """Validate the JSON body; pydantic errors become 400 responses."""
    return model.model_validate(request.get_json(silent=True) or {})


# Auth

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str | None = Field(None, min_length=1, max_length=255)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


# Users and invites

class InviteRequest(CamelModel):
    email: EmailStr
    role: Role = Role.USER


class SetupPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    name: str | None = Field(None, max_length=255)


class RoleUpdateRequest(CamelModel):
    role: Role


class ActiveUpdateRequest(CamelModel):
    is_active: StrictBool


# Pages and sections

class SectionInput(CamelModel):
    type: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    order: int | None = None
    template_section_id: str | None = Field(None, max_length=64)
    fields: dict[str, Any] | list[Any] = Field(default_factory=list)
    styles: dict[str, Any] | None = None


class SectionUpdateRequest(CamelModel):
    type: str | None = Field(None, min_length=1, max_length=64)
    name: str | None = Field(None, min_length=1, max_length=255)
    order: int | None = None
    fields: dict[str, Any] | list[Any] | None = None
    styles: dict[str, Any] | None = None


class CreatePageRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    template_id: str | None = Field(None, max_length=64)
    sections: list[SectionInput] | None = None
    seo_title: str | None = Field(None, max_length=255)
    seo_description: str | None = None
    og_image: str | None = Field(None, max_length=1024)


class UpdatePageRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    status: PageStatus | None = None
    seo_title: str | None = Field(None, max_length=255)
    seo_description: str | None = None
    og_image: str | None = Field(None, max_length=1024)


class SaveSectionsRequest(CamelModel):
    sections: list[SectionInput]


class ReorderSectionsRequest(CamelModel):
    section_ids: list[str]


# Templates

class TemplateCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    thumbnail: str | None = Field(None, max_length=1024)
    category: str | None = Field(None, max_length=64)
    is_public: bool | None = None
    sections: list[Any] | None = None


class TemplateUpdateRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    thumbnail: str | None = Field(None, max_length=1024)
    category: str | None = Field(None, max_length=64)
    is_public: bool | None = None
    sections: list[Any] | None = None


# Customizations

class FieldChange(BaseModel):
    original: Any = None
    current: Any = None


class CustomizedSection(CamelModel):
    section_id: str
    section_name: str | None = None
    field_changes: dict[str, FieldChange] = Field(default_factory=dict)


class CustomizationUpdateRequest(CamelModel):
    template_name: str | None = Field(None, max_length=255)
    sections: list[CustomizedSection] | None = None


# AI

class ComponentSpecRequest(CamelModel):
    component_purpose: str = Field(..., min_length=1, max_length=2000)
    target_users: str | None = Field(None, max_length=2000)
    content_requirements: str | None = Field(None, max_length=4000)
    responsive_needs: str | None = Field(None, max_length=2000)
    interaction_needs: str | None = Field(None, max_length=2000)


__all__ = [
    'SLUG_PATTERN',
    'CamelModel',
    'parse_body',
    'RegisterRequest',
    'LoginRequest',
    'RefreshRequest',
    'LogoutRequest',
    'InviteRequest',
    'SetupPasswordRequest',
    'RoleUpdateRequest',
    'ActiveUpdateRequest',
    'SectionInput',
    'SectionUpdateRequest',
    'CreatePageRequest',
    'UpdatePageRequest',
    'SaveSectionsRequest',
    'ReorderSectionsRequest',
    'TemplateCreateRequest',
    'TemplateUpdateRequest',
    'CustomizedSection',
    'CustomizationUpdateRequest',
    'ComponentSpecRequest',
]
