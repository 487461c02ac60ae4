import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Provide a safe development fallback to avoid 500s when SECRET_KEY is missing.
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-me'
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///lpb.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    ACCESS_TOKEN_TTL = int(os.getenv('ACCESS_TOKEN_TTL', 15 * 60))
    REFRESH_TOKEN_TTL = int(os.getenv('REFRESH_TOKEN_TTL', 7 * 24 * 60 * 60))
    BCRYPT_LOG_ROUNDS = int(os.getenv('BCRYPT_LOG_ROUNDS', 12))

    # Invitations
    INVITE_TTL_DAYS = int(os.getenv('INVITE_TTL_DAYS', 7))
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3000')

    # Outgoing email; logged instead of sent unless enabled
    EMAIL_ENABLED = os.getenv('EMAIL_ENABLED', 'false').lower() == 'true'
    SMTP_HOST = os.getenv('SMTP_HOST')
    SMTP_PORT = int(os.getenv('SMTP_PORT', 587))
    SMTP_USER = os.getenv('SMTP_USER')
    SMTP_PASSWORD = os.getenv('SMTP_PASSWORD')
    FROM_EMAIL = os.getenv('FROM_EMAIL', 'noreply@example.com')

    # AI component specs (mock specs are returned when no key is set)
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o')

    # Rate limiting; point at redis:// in production
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'true').lower() in ('1', 'true', 'yes')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    OPENAI_API_KEY = None
    EMAIL_ENABLED = False
