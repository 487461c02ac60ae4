"""Error taxonomy and JSON error handlers."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException


class LPBError(Exception):
    """Base class for errors that map onto a structured JSON response."""

    status_code = 500
    code = 'internal_error'
    default_message = 'Internal server error'

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            'success': False,
            'error': self.message,
            'code': self.code,
        }
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(LPBError):
    status_code = 400
    code = 'validation_error'
    default_message = 'Validation error'


class AuthenticationError(LPBError):
    status_code = 401
    code = 'unauthenticated'
    default_message = 'Authentication required'


class InvalidCredentials(AuthenticationError):
    default_message = 'Invalid email or password'


class TokenExpired(AuthenticationError):
    code = 'TOKEN_EXPIRED'
    default_message = 'Token expired'


class InvalidAuthToken(AuthenticationError):
    code = 'INVALID_TOKEN'
    default_message = 'Invalid token'


class ForbiddenError(LPBError):
    status_code = 403
    code = 'forbidden'
    default_message = 'Insufficient permissions'


class AccountInactive(ForbiddenError):
    default_message = 'Account is deactivated'


class SelfModificationForbidden(ForbiddenError):
    default_message = 'Cannot modify your own account'


class SuperAdminAssignmentForbidden(ForbiddenError):
    default_message = 'Cannot assign SUPER_ADMIN role'


class NotFoundError(LPBError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found'


class VersionNotFound(NotFoundError):
    default_message = 'Version not found'


class ConflictError(LPBError):
    status_code = 409
    code = 'conflict'
    default_message = 'Conflict'


class DuplicateEmail(ConflictError):
    default_message = 'User with this email already exists'


class DuplicateSlug(ConflictError):
    default_message = 'A page with this slug already exists'


class ActiveInviteExists(ConflictError):
    default_message = 'An active invite already exists for this email'


class InviteAlreadyAccepted(ConflictError):
    default_message = 'Invite has already been accepted'


class CustomizationArchived(ConflictError):
    default_message = 'Customization is archived'


class InvalidInviteToken(LPBError):
    status_code = 400
    code = 'invalid_token'
    default_message = 'Invalid invite token'


class InviteExpired(LPBError):
    status_code = 410
    code = 'expired'
    default_message = 'Invite has expired'


class UpstreamUnavailable(LPBError):
    status_code = 502
    code = 'upstream_unavailable'
    default_message = 'Upstream service unavailable'


def _pydantic_details(exc: PydanticValidationError) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for err in exc.errors():
        field = '.'.join(str(part) for part in err.get('loc', ())) or '__root__'
        details.setdefault(field, []).append(err.get('msg', 'Invalid value'))
    return details


def register_error_handlers(app) -> None:
    """Translate the error taxonomy into JSON responses."""

    @app.errorhandler(LPBError)
    def handle_lpb_error(error: LPBError):
        if error.status_code >= 500:
            current_app.logger.error(f"{error.__class__.__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(error: PydanticValidationError):
        wrapped = ValidationError(details=_pydantic_details(error))
        return jsonify(wrapped.to_dict()), wrapped.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        body = {
            'success': False,
            'error': error.description or error.name,
            'code': error.name.lower().replace(' ', '_'),
        }
        return jsonify(body), error.code

    @app.errorhandler(500)
    def internal_error(error):
        original = getattr(error, 'original_exception', None) or error
        current_app.logger.exception(f"Unhandled error: {original!r}")
        return jsonify({
            'success': False,
            'error': 'Internal server error',
            'code': 'internal_error',
        }), 500
