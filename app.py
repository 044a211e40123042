import logging
import os

from flask import Flask, jsonify

from config import ProductionConfig, DevelopmentConfig, TestingConfig
from errors import Unauthorized, register_error_handlers
from services import load_token_user

# Import extensions to avoid circular imports
from extensions import db, login_manager, migrate

# Import models so their tables are registered before create_all()
import models  # noqa: F401


def configure_logging(app):
    """Root logging at the configured level; the app logger inherits it."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app.logger.setLevel(level)


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        # Auto-detect environment and select appropriate config
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig  # Default to production for security

    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Initialize database schema
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.critical(f"FATAL DATABASE ERROR DURING INITIALIZATION: {e}")
            raise
        app.logger.info(f"Database ready: {db.engine.url.render_as_string(hide_password=True)}")

    # Bearer token loader for Flask-Login
    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token:
            return None
        return load_token_user(token.strip())

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthorized()

    # Import and register blueprints
    from api_routes import api_blueprint
    app.register_blueprint(api_blueprint, url_prefix='/api')

    register_error_handlers(app)

    # Let the frontend call the API from the browser
    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = app.config['FRONTEND_URL']
        response.headers['Access-Control-Allow-Credentials'] = 'true'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS, PATCH'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        return response

    @app.route('/')
    def home():
        return jsonify({'message': 'Classroom API is running'})

    return app
