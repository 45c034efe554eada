# config.py
from decouple import config
from datetime import timedelta


def _get_db_uri():
    uri = config('DATABASE_URL', default='sqlite:///dealer_portal.db')
    if uri.startswith('postgres://'):
        uri = uri.replace('postgres://', 'postgresql://', 1)
    if uri.startswith('postgresql://') and 'sslmode' not in uri:
        uri += ('&' if '?' in uri else '?') + 'sslmode=require'
    return uri


def _engine_options(uri):
    # Connection pool health; SQLite keeps its own pooling
    if uri.startswith('sqlite'):
        return {}
    return {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 5,
        'max_overflow': 10
    }


class Config:
    JWT_SECRET_KEY = config('JWT_SECRET_KEY')

    # Session credentials are valid for one hour; no refresh tokens are issued
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=config('JWT_ACCESS_TOKEN_MINUTES', default=60, cast=int))
    JWT_TOKEN_LOCATION = ['headers']
    JWT_ERROR_MESSAGE_KEY = 'message'

    # Let Flask-RESTful hand exceptions to the app's error handlers
    PROPAGATE_EXCEPTIONS = True

    SQLALCHEMY_DATABASE_URI = _get_db_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)

    # Screenshots arrive base64-encoded inside the JSON body
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    FRONTEND_URL = config('FRONTEND_URL', default='http://localhost:5173')

    EMAIL_USER = config('EMAIL_USER', default='')
    EMAIL_PASSWORD = config('EMAIL_PASSWORD', default='')
    EMAIL_HOST = config('EMAIL_HOST', default='smtp.gmail.com')
    EMAIL_PORT = config('EMAIL_PORT', default=587, cast=int)
    EMAIL_SENDER_NAME = config('EMAIL_SENDER_NAME', default='Titan Dealer App Support')

    ADMIN_USERNAME = config('ADMIN_USERNAME', default='admin')
    STRICT_VALIDATION = config('STRICT_VALIDATION', default=True, cast=bool)
    ENFORCE_PASSWORD_POLICY = config('ENFORCE_PASSWORD_POLICY', default=False, cast=bool)
    RESET_TOKEN_TTL_MINUTES = config('RESET_TOKEN_TTL_MINUTES', default=60, cast=int)

    DEVELOPMENT = config('FLASK_ENV', default='production') == 'development'
    PORT = config('PORT', default=5000, cast=int)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    FRONTEND_URL = 'http://portal.test'
    EMAIL_USER = 'support@portal.test'
    EMAIL_PASSWORD = 'not-a-real-password'
    STRICT_VALIDATION = True
    ENFORCE_PASSWORD_POLICY = False
    DEVELOPMENT = False
