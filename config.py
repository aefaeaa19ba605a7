import os
import mysql.connector
from mysql.connector import pooling
from dotenv import load_dotenv

load_dotenv()


def getenv_first(*names, default=None):
    """Return the first non-empty environment variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


class Config:
    SECRET_KEY = getenv_first('SECRET_KEY', 'FLASK_SECRET_KEY')
    MYSQL_HOST = getenv_first('MYSQL_HOST', 'DB_HOST', default='localhost')
    MYSQL_PORT = int(getenv_first('MYSQL_PORT', 'DB_PORT', default='3306'))
    MYSQL_USER = getenv_first('MYSQL_USER', 'DB_USER')
    MYSQL_PASSWORD = getenv_first('MYSQL_PASSWORD', 'DB_PASSWORD')
    MYSQL_DATABASE = getenv_first('MYSQL_DATABASE', 'DB_NAME', default='finflow_db')
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '5'))

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    LOG_LEVEL = os.getenv('LOG_LEVEL')

    APP_URL = getenv_first('APP_URL', 'FINFLOW_URL', default='http://localhost:5000')
    MAIL_SERVER = os.getenv('MAIL_SERVER')
    MAIL_PORT = int(os.getenv('MAIL_PORT', '587'))
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_SENDER = os.getenv('MAIL_SENDER', 'no-reply@finflow.local')
    VERIFY_TOKEN_HOURS = 24
    RESET_TOKEN_HOURS = 1

    REPORT_ROWS_PER_PAGE = 10
    RECENT_TRANSACTIONS_LIMIT = 5
    NOTIFICATION_QUEUE_SIZE = int(os.getenv('NOTIFICATION_QUEUE_SIZE', '50'))
    THEME_COOKIE = 'theme'

    @staticmethod
    def init_db(app):
        app.db_pool = mysql.connector.pooling.MySQLConnectionPool(
            pool_name="finflow_pool",
            pool_size=Config.DB_POOL_SIZE,
            host=Config.MYSQL_HOST,
            port=Config.MYSQL_PORT,
            user=Config.MYSQL_USER,
            password=Config.MYSQL_PASSWORD,
            database=Config.MYSQL_DATABASE
        )
