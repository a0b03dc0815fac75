"""
Configuration settings for different environments
"""
import json
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


DEFAULT_SUBSCRIPTION_PLANS = {
    'basic': {'amount': 499, 'currency': 'INR', 'period': 'monthly', 'interval': 1},
}


def _load_plans():
    """Read subscription plans from SUBSCRIPTION_PLANS (JSON) or use defaults"""
    raw = os.environ.get('SUBSCRIPTION_PLANS')
    if not raw:
        return DEFAULT_SUBSCRIPTION_PLANS
    return json.loads(raw)


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///community_connector.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT (tokens are issued by the auth service, only verified here)
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    API_PREFIX = '/api'

    # Pagination
    ITEMS_PER_PAGE = 10
    MAX_ITEMS_PER_PAGE = 100

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'

    # Stripe
    STRIPE_SECRET_KEY = os.environ.get('STRIPE_SECRET_KEY', '')
    STRIPE_WEBHOOK_SECRET = os.environ.get('STRIPE_WEBHOOK_SECRET', '')

    # Subscriptions
    SUBSCRIPTION_PLANS = _load_plans()
    SUBSCRIPTION_EXPIRY_WARNING_DAYS = int(os.environ.get('SUBSCRIPTION_EXPIRY_WARNING_DAYS', 7))

    # Background scheduler
    ENABLE_SCHEDULER = os.environ.get('ENABLE_SCHEDULER', '').lower() == 'true'
    SUBSCRIPTION_SWEEP_INTERVAL = timedelta(hours=1)

    # Logging / monitoring
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    SENTRY_DSN = os.environ.get('SENTRY_DSN')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 20,
        'max_overflow': 40,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
