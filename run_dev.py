#!/usr/bin/env python3
"""Development server runner for the Landing Page Builder API."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def setup_environment():
    """Set up the development environment."""
    project_root = Path(__file__).parent
    sys.path.insert(0, str(project_root))

    env_file = project_root / '.env'
    if env_file.exists():
        load_dotenv(env_file)
        print(f"Loaded environment from {env_file}")
    else:
        print(f"No .env file found at {env_file}, using defaults")

    os.environ.setdefault('FLASK_APP', 'lpb:create_app')
    os.environ.setdefault('FLASK_DEBUG', '1')


def initialize_database(app):
    """Create missing tables so a fresh checkout runs without migrations."""
    from lpb.extensions import db

    with app.app_context():
        db.create_all()
    print("Database tables ready")


def main():
    print("Landing Page Builder API - Development Setup")
    print("=" * 60)

    setup_environment()

    from lpb import create_app

    app = create_app()
    initialize_database(app)

    print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
    print("\nAPI available at http://localhost:5000/api")
    print("\nTo seed the SUPER_ADMIN and default templates, run:")
    print("   flask --app lpb:create_app seed defaults --admin-email admin@example.com")
    print("\nPress Ctrl+C to stop the server")
    print("=" * 60)

    try:
        app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), debug=True, use_reloader=True)
    except KeyboardInterrupt:
        print("\nDevelopment server stopped by user")


if __name__ == "__main__":
    main()
