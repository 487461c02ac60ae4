"""Accounts, sessions, invitations and user administration."""

from __future__ import annotations

import uuid
from datetime import timedelta

from flask import current_app
from sqlalchemy import select, update

from lpb.errors import (
    AccountInactive,
    ActiveInviteExists,
    AuthenticationError,
    DuplicateEmail,
    ForbiddenError,
    InvalidCredentials,
    InvalidInviteToken,
    InviteAlreadyAccepted,
    InviteExpired,
    NotFoundError,
    SelfModificationForbidden,
)
from lpb.extensions import db
from lpb.models import (
    AuditLog,
    ComponentSpec,
    CustomizationVersion,
    Role,
    Template,
    User,
    UserInvite,
    as_utc,
    utcnow,
)
from lpb.security import check_active_change, check_invite_role, check_role_change
from lpb.services import tokens
from lpb.services.audit import log_admin_action, log_security_event
from lpb.services.email import send_invite_email


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _find_user_by_email(email: str) -> User | None:
    return db.session.execute(
        select(User).where(User.email == normalize_email(email))
    ).scalar_one_or_none()


class AuthService:
    """Registration, login and token lifecycle."""

    @staticmethod
    def register(email: str, password: str, name: str | None = None) -> tuple[User, dict[str, str]]:
        """Self-registered accounts are ADMINs so they can build pages."""
        if _find_user_by_email(email):
            raise DuplicateEmail()

        user = User(
            email=normalize_email(email),
            name=name,
            role=Role.ADMIN,
            active=True,
            needs_password_setup=False,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.flush()

        issued = tokens.issue_tokens(user)
        log_security_event(user, 'registered')
        return user, issued

    @staticmethod
    def login(email: str, password: str) -> tuple[User, dict[str, str]]:
        user = _find_user_by_email(email)
        if user is None:
            raise InvalidCredentials()

        if not user.active:
            log_security_event(user, 'login_failed', metadata={'reason': 'inactive'})
            raise AccountInactive()

        if user.needs_password_setup or not user.password_hash:
            raise AuthenticationError('Please set up your password first using the invitation link')

        if not user.check_password(password):
            log_security_event(user, 'login_failed', metadata={'reason': 'invalid_password'})
            raise InvalidCredentials()

        user.last_login_at = utcnow()
        issued = tokens.issue_tokens(user)
        log_security_event(user, 'login_success')
        return user, issued

    @staticmethod
    def refresh(refresh_token: str) -> dict[str, str]:
        _, issued = tokens.rotate_refresh_token(refresh_token)
        return issued

    @staticmethod
    def logout(refresh_token: str | None) -> None:
        if refresh_token:
            tokens.revoke_refresh_token(refresh_token)

    @staticmethod
    def logout_all(user: User) -> None:
        tokens.revoke_all_refresh_tokens(user.id)
        log_security_event(user, 'logout_all')

    @staticmethod
    def get_user(user_id: str) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError('User not found')
        return user


class InviteService:
    """Single-use, time-bounded invitations."""

    @staticmethod
    def invite_user(inviter: User, email: str, role: Role = Role.USER) -> UserInvite:
        check_invite_role(inviter, role)
        email = normalize_email(email)

        if _find_user_by_email(email):
            raise DuplicateEmail()

        now = utcnow()
        active = db.session.execute(
            select(UserInvite)
            .where(UserInvite.email == email)
            .where(UserInvite.accepted_at.is_(None))
            .where(UserInvite.expires_at > now)
        ).scalars().first()
        if active is not None:
            raise ActiveInviteExists()

        invite = UserInvite(
            email=email,
            token=str(uuid.uuid4()),
            role=role,
            expires_at=now + timedelta(days=current_app.config.get('INVITE_TTL_DAYS', 7)),
            invited_by_id=inviter.id,
        )
        db.session.add(invite)
        db.session.commit()

        current_app.logger.info(f"Invite created for {email} by {inviter.email} ({role.value})")
        send_invite_email(invite.email, invite.token, role.value, as_utc(invite.expires_at))
        log_admin_action(inviter, 'user_invited', 'user_invite', invite.id, {'email': email, 'role': role.value})
        return invite

    @staticmethod
    def _usable_invite(token: str) -> UserInvite:
        invite = db.session.execute(
            select(UserInvite).where(UserInvite.token == token)
        ).scalar_one_or_none()
        if invite is None:
            raise InvalidInviteToken()
        if invite.accepted_at is not None:
            raise InviteAlreadyAccepted()
        if invite.is_expired():
            raise InviteExpired()
        return invite

    @staticmethod
    def verify_invite(token: str) -> UserInvite:
        return InviteService._usable_invite(token)

    @staticmethod
    def setup_password(token: str, password: str, name: str | None = None) -> tuple[User, dict[str, str]]:
        """Accept an invite: create the account and sign it in."""
        invite = InviteService._usable_invite(token)

        if _find_user_by_email(invite.email):
            raise DuplicateEmail()

        user = User(
            email=invite.email,
            name=name or invite.email.split('@')[0],
            role=invite.role,
            active=True,
            needs_password_setup=False,
        )
        user.set_password(password)
        db.session.add(user)
        invite.accepted_at = utcnow()
        db.session.flush()

        issued = tokens.issue_tokens(user)
        log_security_event(user, 'invite_accepted', metadata={'inviteId': invite.id})
        return user, issued

    @staticmethod
    def list_pending_invites(inviter: User) -> list[UserInvite]:
        stmt = (
            select(UserInvite)
            .where(UserInvite.invited_by_id == inviter.id)
            .where(UserInvite.accepted_at.is_(None))
            .where(UserInvite.expires_at > utcnow())
            .order_by(UserInvite.created_at.desc())
        )
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def cancel_invite(invite_id: str, user: User) -> None:
        invite = db.session.get(UserInvite, invite_id)
        if invite is None:
            raise NotFoundError('Invite not found')
        if invite.invited_by_id != user.id:
            raise ForbiddenError('Not authorized to cancel this invite')
        if invite.accepted_at is not None:
            raise InviteAlreadyAccepted('Cannot cancel an accepted invite')

        email = invite.email
        db.session.delete(invite)
        db.session.commit()
        log_admin_action(user, 'invite_cancelled', 'user_invite', invite_id, {'email': email})


class UserService:
    """SUPER_ADMIN user administration."""

    @staticmethod
    def list_users() -> list[User]:
        return list(db.session.execute(
            select(User).order_by(User.created_at.desc())
        ).scalars().all())

    @staticmethod
    def update_user_role(actor: User, user_id: str, role: Role) -> User:
        check_role_change(actor, user_id, role)
        target = AuthService.get_user(user_id)

        previous = target.role
        target.role = role
        db.session.commit()
        log_admin_action(actor, 'user_role_changed', 'user', target.id, {
            'from': previous.value,
            'to': role.value,
        })
        return target

    @staticmethod
    def set_user_active(actor: User, user_id: str, active: bool) -> User:
        check_active_change(actor, user_id)
        target = AuthService.get_user(user_id)

        target.active = active
        if not active:
            tokens.revoke_all_refresh_tokens(target.id, commit=False)
        db.session.commit()
        log_admin_action(actor, 'user_activated' if active else 'user_deactivated', 'user', target.id)
        return target

    @staticmethod
    def delete_user(actor: User, user_id: str) -> None:
        """Hard delete; the user's pages go with them, shared rows are detached."""
        if actor.id == user_id:
            raise SelfModificationForbidden('Cannot delete your own account')
        target = AuthService.get_user(user_id)

        db.session.execute(update(Template).where(Template.user_id == user_id).values(user_id=None))
        db.session.execute(update(UserInvite).where(UserInvite.invited_by_id == user_id).values(invited_by_id=None))
        db.session.execute(update(AuditLog).where(AuditLog.user_id == user_id).values(user_id=None))
        db.session.execute(
            update(CustomizationVersion).where(CustomizationVersion.created_by_id == user_id).values(created_by_id=None)
        )
        db.session.execute(update(ComponentSpec).where(ComponentSpec.created_by_id == user_id).values(created_by_id=None))

        email = target.email
        db.session.delete(target)
        db.session.commit()
        log_admin_action(actor, 'user_deleted', 'user', user_id, {'email': email})


__all__ = ['AuthService', 'InviteService', 'UserService', 'normalize_email']
