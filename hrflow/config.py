import os

BASE_DIR = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'instance', 'hrflow.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JSON API: forms are validated from request bodies, no CSRF token round trip
    WTF_CSRF_ENABLED = False

    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true'

    # Wall-clock timezone for working hours and attendance timestamps
    HRFLOW_TIMEZONE = os.environ.get('HRFLOW_TIMEZONE', 'UTC')

    # Seconds between location samples (live map / employee portal)
    MAP_REFRESH_INTERVAL = 15
    PORTAL_REFRESH_INTERVAL = 30

    HRFLOW_LOG_FILE = os.environ.get('HRFLOW_LOG_FILE', 'hrflow.log')
    HRFLOW_LOG_LEVEL = os.environ.get('HRFLOW_LOG_LEVEL', 'INFO')

    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'hr@hrflow.local')
    MAIL_SENDER_NAME = os.environ.get('MAIL_SENDER_NAME', 'HRFlow HR Department')
    MAIL_ASYNC = True

    # Overtime starts after this many hours on the clock
    OVERTIME_THRESHOLD_HOURS = 8


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    HRFLOW_TIMEZONE = 'UTC'
    HRFLOW_LOG_FILE = None
    SENDGRID_API_KEY = None
    MAIL_ASYNC = False
