import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # CSRF Configuration
    WTF_CSRF_ENABLED = True
    WTF_CSRF_CHECK_DEFAULT = True
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour

    # Database - Using SQLite for easy local development
    basedir = os.path.dirname(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{os.path.join(basedir, "instance", "chuks_kitchen.db")}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload Configuration
    UPLOAD_FOLDER = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'uploads')
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5MB max file size
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'webp'}

    # Mail Configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = (
        os.environ.get('MAIL_FROM_NAME', 'Chuks Kitchen'),
        os.environ.get('MAIL_FROM') or os.environ.get('MAIL_USERNAME') or 'no-reply@chukskitchen.com',
    )
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:5000')

    # One-time codes
    OTP_LENGTH = 6
    OTP_EXPIRY_MINUTES = 10
    OTP_RESEND_COOLDOWN_MINUTES = 2
    # Unverified sign-ups older than this may be registered again
    UNVERIFIED_ACCOUNT_TTL_HOURS = 24

    # Shared secret for POST /api/auth/admin/register; empty disables it
    ADMIN_REGISTRATION_SECRET = os.environ.get('ADMIN_REGISTRATION_SECRET', '')

    # Pricing (Naira)
    DELIVERY_FEE = 500
    SERVICE_FEE_RATE = 0.05
    TAX_RATE = 0.075

    # Order numbers
    ORDER_NUMBER_PREFIX = 'CK'
    ORDER_NUMBER_MAX_ATTEMPTS = 5

    # Pagination
    ORDERS_PER_PAGE = 10
    ADMIN_ORDERS_PER_PAGE = 20
    MAX_PAGE_SIZE = 100

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_JSON = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_JSON = True


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    MAIL_SUPPRESS_SEND = True
    BCRYPT_LOG_ROUNDS = 4
    ADMIN_REGISTRATION_SECRET = 'kitchen-admin-secret'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
