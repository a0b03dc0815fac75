from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config[config_name])

    from connector.logging_config import setup_logging
    setup_logging(app.config['LOG_LEVEL'])

    if app.config.get('SENTRY_DSN'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
        )

    # Initialize extensions
    from connector.extensions import limiter
    db.init_app(app)
    limiter.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    from connector.middleware import register_request_hooks
    register_request_hooks(app)

    from connector.services.payment_gateway import StripeGateway
    app.extensions['payment_gateway'] = StripeGateway(
        secret_key=app.config['STRIPE_SECRET_KEY'],
        webhook_secret=app.config['STRIPE_WEBHOOK_SECRET'],
    )

    # Register blueprints
    from connector.routes.services import services_bp
    from connector.routes.reviews import reviews_bp
    from connector.routes.subscriptions import subscriptions_bp
    from connector.routes.webhooks import webhooks_bp
    from connector.routes.communities import communities_bp, categories_bp

    api_prefix = app.config['API_PREFIX']
    app.register_blueprint(services_bp, url_prefix=f'{api_prefix}/services')
    app.register_blueprint(reviews_bp, url_prefix=f'{api_prefix}/reviews')
    app.register_blueprint(subscriptions_bp, url_prefix=f'{api_prefix}/subscriptions')
    app.register_blueprint(webhooks_bp, url_prefix=f'{api_prefix}/webhooks')
    app.register_blueprint(communities_bp, url_prefix=f'{api_prefix}/communities')
    app.register_blueprint(categories_bp, url_prefix=f'{api_prefix}/categories')

    from connector.errors import register_error_handlers
    register_error_handlers(app)

    from connector.cli import register_cli
    register_cli(app)

    # Health check endpoint
    @app.route('/health')
    @limiter.exempt
    def health():
        return jsonify({'status': 'healthy', 'service': 'community-connector'}), 200

    if app.config.get('ENABLE_SCHEDULER'):
        from connector.scheduler import init_scheduler
        init_scheduler(app)

    return app
