from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from flask import current_app, has_app_context
from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from lpb.extensions import db, bcrypt

JSONType = JSON().with_variant(JSONB, 'postgresql')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Role(Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class PageStatus(Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class CustomizationStatus(Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class User(TimestampedBase):
    __tablename__ = "user"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(String(512))
    role: Mapped[Role] = mapped_column(
        SqlEnum(Role, name="user_role", native_enum=False),
        nullable=False,
        default=Role.USER,
    )
    active: Mapped[bool] = mapped_column('is_active', Boolean, nullable=False, default=True)
    needs_password_setup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    pages: Mapped[list["Page"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        rounds = current_app.config.get('BCRYPT_LOG_ROUNDS', 12) if has_app_context() else 12
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds)).decode('utf-8')

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    def has_role(self, *roles: Role | str) -> bool:
        role_value = self.role.value if isinstance(self.role, Role) else str(self.role)
        allowed = {r.value if isinstance(r, Role) else str(r) for r in roles}
        return role_value in allowed

    @property
    def is_super_admin(self) -> bool:
        return self.has_role(Role.SUPER_ADMIN)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:  # Flask-Login compatibility
        return bool(self.active)

    @property
    def is_anonymous(self) -> bool:
        return False

    def get_id(self) -> str:
        return self.id


class RefreshToken(TimestampedBase):
    __tablename__ = "refresh_token"

    token: Mapped[str] = mapped_column(String(512), nullable=False, unique=True, index=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")


class UserInvite(TimestampedBase):
    """Time-bounded, single-use invitation to create an account."""
    __tablename__ = "user_invite"
    __table_args__ = (
        Index("ix_user_invite_email_accepted", "email", "accepted_at"),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    role: Mapped[Role] = mapped_column(
        SqlEnum(Role, name="user_role", native_enum=False),
        nullable=False,
        default=Role.USER,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    invited_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    invited_by: Mapped[User | None] = relationship()

    def is_expired(self, now: datetime | None = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    def is_active(self, now: datetime | None = None) -> bool:
        return self.accepted_at is None and not self.is_expired(now)


class Template(TimestampedBase):
    """Reusable set of section blueprints."""
    __tablename__ = "template"
    __table_args__ = (
        Index("ix_template_public_category", "is_public", "category"),
    )

    # Seeded system templates use readable ids such as "modern-saas".
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    thumbnail: Mapped[str | None] = mapped_column(String(1024))
    category: Mapped[str] = mapped_column(String(64), nullable=False, default='general', index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sections: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    user: Mapped[User | None] = relationship()


class Page(TimestampedBase):
    __tablename__ = "page"
    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_page_user_slug"),
        Index("ix_page_published_slug", "is_published", "slug"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # May reference a fallback catalog template that has no row.
    template_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[PageStatus] = mapped_column(
        SqlEnum(PageStatus, name="page_status", native_enum=False),
        nullable=False,
        default=PageStatus.DRAFT,
    )
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # SEO
    seo_title: Mapped[str | None] = mapped_column(String(255))
    seo_description: Mapped[str | None] = mapped_column(Text)
    og_image: Mapped[str | None] = mapped_column(String(1024))

    user: Mapped[User] = relationship(back_populates="pages")
    sections: Mapped[list["Section"]] = relationship(
        back_populates="page",
        cascade="all, delete-orphan",
        order_by=lambda: [Section.order, Section.seq],
    )
    customization: Mapped["Customization | None"] = relationship(
        back_populates="page",
        cascade="all, delete-orphan",
        uselist=False,
    )


class Section(TimestampedBase):
    __tablename__ = "section"
    __table_args__ = (
        Index("ix_section_page_order", "page_id", "order"),
    )

    page_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("page.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Insertion sequence; breaks ties between equal `order` values.
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    template_section_id: Mapped[str | None] = mapped_column(String(64))
    fields: Mapped[dict | list] = mapped_column(JSONType, nullable=False, default=dict)
    styles: Mapped[dict | None] = mapped_column(JSONType)

    page: Mapped[Page] = relationship(back_populates="sections")


class Customization(TimestampedBase):
    """Field-level deltas between a page and its template defaults."""
    __tablename__ = "customization"

    page_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("page.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    template_id: Mapped[str | None] = mapped_column(String(64))
    template_name: Mapped[str | None] = mapped_column(String(255))
    sections: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    status: Mapped[CustomizationStatus] = mapped_column(
        SqlEnum(CustomizationStatus, name="customization_status", native_enum=False),
        nullable=False,
        default=CustomizationStatus.ACTIVE,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    page: Mapped[Page] = relationship(back_populates="customization")
    versions: Mapped[list["CustomizationVersion"]] = relationship(
        back_populates="customization",
        cascade="all, delete-orphan",
        order_by="CustomizationVersion.version",
    )


class CustomizationVersion(TimestampedBase):
    """Append-only history entry with a full snapshot for restore."""
    __tablename__ = "customization_version"
    __table_args__ = (
        UniqueConstraint("customization_id", "version", name="uq_customization_version"),
    )

    customization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    changes: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    snapshot: Mapped[dict | None] = mapped_column(JSONType)
    created_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
    )

    customization: Mapped[Customization] = relationship(back_populates="versions")


class AuditLog(TimestampedBase):
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_entity", "entity_type", "entity_id"),
    )

    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(64))
    meta: Mapped[dict | None] = mapped_column(JSONType)

    user: Mapped[User | None] = relationship()


class ComponentSpec(TimestampedBase):
    """AI-generated (or mock) component specification."""
    __tablename__ = "component_spec"

    component_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default='section')
    source: Mapped[str] = mapped_column(String(16), nullable=False, default='mock')
    spec: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    created_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
    )


__all__ = [
    "JSONType",
    "utcnow",
    "as_utc",
    "TimestampedBase",
    "Role",
    "PageStatus",
    "CustomizationStatus",
    "User",
    "RefreshToken",
    "UserInvite",
    "Template",
    "Page",
    "Section",
    "Customization",
    "CustomizationVersion",
    "AuditLog",
    "ComponentSpec",
]
