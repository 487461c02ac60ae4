"""Security headers and request-size middleware."""

from flask import abort, request

MAX_CONTENT_LENGTH = 1024 * 1024


def configure_security_headers(app):
    """Configure security headers."""

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        # JSON only; nothing here should ever be framed or run scripts
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    return app


def validate_input_length(app):
    """Middleware to validate request payload size."""
    @app.before_request
    def limit_request_size():
        if request.content_length and request.content_length > MAX_CONTENT_LENGTH:
            abort(413)

    return app


def auth_rate_limit():
    """Rate limit for authentication endpoints."""
    return "5 per minute"


def ai_rate_limit():
    """Rate limit for AI generation endpoints."""
    return "20 per hour"


__all__ = [
    'configure_security_headers',
    'validate_input_length',
    'auth_rate_limit',
    'ai_rate_limit',
]
