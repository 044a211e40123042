import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-key'

    # Prioritize the production DATABASE_URL, with SQLite as a fallback.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'classroom.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # NEVER set DEBUG=True in production
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    PORT = int(os.environ.get('PORT', 5000))

    # Origin allowed to call the API from the browser
    FRONTEND_URL = os.environ.get('FRONTEND_URL') or 'http://localhost:3000'

    # Bearer tokens expire after one hour
    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE', 3600))

    # Max file upload size (15MB)
    MAX_CONTENT_LENGTH = 15 * 1024 * 1024

    ALLOWED_UPLOAD_TYPES = {
        'application/pdf',
        'application/msword',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        'application/zip',
    }

    # Notification feed
    NOTIFICATION_WINDOW_DAYS = 7
    NOTIFICATION_PREVIEW_LENGTH = 100


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False  # Always False in production
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # In-memory database for tests
