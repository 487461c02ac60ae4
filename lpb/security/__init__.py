"""Access-control gate shared by every resource path.

One predicate set (owner, ADMIN, SUPER_ADMIN) decides reads and writes on
templates, pages, sections and customizations. Ownership of child rows is
always resolved through the parent page, never stored twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from lpb.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    SelfModificationForbidden,
    SuperAdminAssignmentForbidden,
)
from lpb.models import Customization, Page, Role, Section, Template, User


class Action(Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"


UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
NOT_FOUND = "not_found"

_KINDS = {
    Template: "template",
    Page: "page",
    Section: "section",
    Customization: "customization",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def resource_kind(resource: Any) -> str | None:
    for model, kind in _KINDS.items():
        if isinstance(resource, model):
            return kind
    return None


def resolve_owner(resource: Any) -> str | None:
    """Return the id of the user who owns ``resource``.

    Sections and customizations are owned by whoever owns their page.
    """
    if isinstance(resource, (Section, Customization)):
        page = resource.page
        return page.user_id if page is not None else None
    return getattr(resource, 'user_id', None)


def is_public(resource: Any) -> bool:
    if isinstance(resource, Template):
        return bool(resource.is_public)
    # Published pages are served through the public slug lookup, not here.
    return False


def _is_authenticated(user: User | None) -> bool:
    return user is not None and bool(getattr(user, 'is_authenticated', False))


def decide(
    user: User | None,
    action: Action,
    resource: Any = None,
    kind: str | None = None,
) -> Decision:
    """Decide whether ``user`` may perform ``action``.

    ``resource`` is the loaded row (or, for creating a section or a
    customization, the parent page). ``kind`` names the resource type when
    there is no row yet, e.g. ``decide(user, Action.CREATE, kind="page")``.
    """
    kind = kind or resource_kind(resource)

    if not _is_authenticated(user):
        if action is Action.READ and resource is not None and is_public(resource):
            return ALLOW
        if action is Action.READ and kind == "template":
            return Decision(False, NOT_FOUND)
        return Decision(False, UNAUTHENTICATED)

    super_admin = user.has_role(Role.SUPER_ADMIN)

    if action is Action.CREATE:
        if kind == "template":
            return ALLOW if super_admin else Decision(False, FORBIDDEN)
        if kind == "page":
            return ALLOW if user.has_role(Role.ADMIN, Role.SUPER_ADMIN) else Decision(False, FORBIDDEN)
        # Child rows are created as an update of the parent page.
        return decide(user, Action.UPDATE, resource, kind="page")

    owner_id = resolve_owner(resource)
    is_owner = owner_id is not None and owner_id == user.id

    if action is Action.READ:
        if is_public(resource) or is_owner or super_admin:
            return ALLOW
        return Decision(False, NOT_FOUND)

    if action in (Action.UPDATE, Action.PUBLISH):
        if kind == "template" and not super_admin:
            return Decision(False, FORBIDDEN)
        return ALLOW if is_owner else Decision(False, NOT_FOUND)

    if action is Action.DELETE:
        if kind == "template":
            if not super_admin:
                return Decision(False, FORBIDDEN)
            return ALLOW if is_owner else Decision(False, NOT_FOUND)
        if kind == "page" and super_admin:
            return ALLOW
        return ALLOW if is_owner else Decision(False, NOT_FOUND)

    return Decision(False, FORBIDDEN)


def authorize(
    user: User | None,
    action: Action,
    resource: Any = None,
    kind: str | None = None,
    not_found_message: str | None = None,
) -> None:
    """Raise the error matching a denied decision."""
    decision = decide(user, action, resource, kind)
    if decision.allowed:
        return
    if decision.reason == UNAUTHENTICATED:
        raise AuthenticationError()
    if decision.reason == NOT_FOUND:
        label = (kind or resource_kind(resource) or 'resource').capitalize()
        raise NotFoundError(not_found_message or f"{label} not found")
    raise ForbiddenError()


def check_role_change(actor: User, target_id: str, new_role: Role) -> None:
    if new_role is Role.SUPER_ADMIN:
        raise SuperAdminAssignmentForbidden()
    if actor.id == target_id:
        raise SelfModificationForbidden('Cannot change your own role')


def check_active_change(actor: User, target_id: str) -> None:
    if actor.id == target_id:
        raise SelfModificationForbidden('Cannot change your own active status')


def check_invite_role(actor: User, role: Role) -> None:
    """ADMIN may invite USER only; SUPER_ADMIN may invite anything but SUPER_ADMIN."""
    if role is Role.SUPER_ADMIN:
        raise SuperAdminAssignmentForbidden('Cannot create another SUPER_ADMIN')
    if not actor.has_role(Role.SUPER_ADMIN) and role is not Role.USER:
        raise ForbiddenError('ADMIN can only invite users with USER role')


__all__ = [
    "Action",
    "Decision",
    "decide",
    "authorize",
    "resolve_owner",
    "is_public",
    "resource_kind",
    "check_role_change",
    "check_active_change",
    "check_invite_role",
]
