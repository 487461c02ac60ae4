"""Application factory for the Landing Page Builder API."""

from __future__ import annotations

import logging

from flask import Flask

from lpb.auth import init_auth
from lpb.blueprints.ai import ai_bp
from lpb.blueprints.auth import auth_bp
from lpb.blueprints.customizations import customizations_bp
from lpb.blueprints.pages import pages_bp
from lpb.blueprints.public import public_bp
from lpb.blueprints.templates import templates_bp
from lpb.blueprints.users import users_bp
from lpb.config import Config
from lpb.errors import register_error_handlers
from lpb.extensions import (
    db,
    migrate,
    login_manager,
    limiter,
)
from lpb.security.config import configure_security_headers, validate_input_length
from lpb.services.templates import init_template_service


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    init_auth(app)
    init_template_service(app)

    # Configure security
    configure_security_headers(app)
    validate_input_length(app)
    register_error_handlers(app)

    # Ensure models are registered for migrations
    import lpb.models  # noqa: F401

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(pages_bp)
    app.register_blueprint(templates_bp)
    app.register_blueprint(customizations_bp)
    app.register_blueprint(ai_bp)
    app.register_blueprint(public_bp)

    # Register CLI commands
    from lpb.commands import register_commands
    register_commands(app)

    return app
