"""
Testing configuration for the Community Connector backend
"""
import os
from config.settings import Config


class TestingConfig(Config):
    """Testing configuration with isolated database and safe defaults"""

    TESTING = True
    DEBUG = False

    # Use in-memory SQLite for fast tests
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///:memory:'
    )

    # Deterministic JWT secret so fixtures can sign tokens
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret'

    # Payment gateway runs in development mode; tests install a fake gateway
    STRIPE_SECRET_KEY = ''
    STRIPE_WEBHOOK_SECRET = ''

    SUBSCRIPTION_PLANS = {
        'basic': {'amount': 499, 'currency': 'INR', 'period': 'monthly', 'interval': 1},
        'premium': {'amount': 999, 'currency': 'INR', 'period': 'monthly', 'interval': 1},
    }

    # Disable rate limiting in tests
    RATELIMIT_ENABLED = False

    # Never start the background scheduler from tests
    ENABLE_SCHEDULER = False

    # Logging
    LOG_LEVEL = 'WARNING'
    SENTRY_DSN = None

    CORS_ORIGINS = ['http://localhost:3000']
