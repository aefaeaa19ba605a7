import secrets
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from flask import Flask, g
from flask_wtf.csrf import CSRFProtect

from auth_utils import load_request_context
from config import Config
from logging_config import configure_logging
from models import current_financial_year
from routes.auth import auth_bp, password_bp
from routes.cash import cash_bp
from routes.cheques import cheques_bp
from routes.dashboard import dashboard_bp
from routes.digital import digital_bp
from routes.notifications import notifications_bp
from routes.reports import reports_bp
from routes.search import search_bp
from routes.settings import settings_bp
from services.notifications import NotificationCenter, notification_center

csrf = CSRFProtect()

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
}


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = secrets.token_hex(32)

    configure_logging(app)
    config_class.init_db(app)
    csrf.init_app(app)
    NotificationCenter(app.config.get('NOTIFICATION_QUEUE_SIZE', 50)).init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(password_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(cheques_bp)
    app.register_blueprint(cash_bp)
    app.register_blueprint(digital_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(notifications_bp)

    app.jinja_env.filters['inr'] = format_inr
    app.jinja_env.filters['nice_date'] = format_nice_date

    @app.before_request
    def resolve_context():
        load_request_context(app.config.get('THEME_COOKIE', 'theme'))

    @app.context_processor
    def inject_context():
        pending = []
        if g.auth.is_authenticated:
            pending = notification_center().queue_for(g.auth.user_id).peek()
        return {
            'auth': g.auth,
            'theme': g.theme,
            'notifications': pending[:5],
            'notification_count': len(pending),
            'financial_year': current_financial_year(),
        }

    @app.after_request
    def set_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    app.logger.info("FinFlow started (database %s)", app.config.get('MYSQL_DATABASE'))
    return app


def format_inr(value):
    """Whole rupees with Indian digit grouping, e.g. ``₹12,34,567``."""
    try:
        amount = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        return value
    amount = amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = '-' if amount < 0 else ''
    digits = str(abs(int(amount)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ','.join(groups + [tail])
    return f"{sign}₹{digits}"


def format_nice_date(value):
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return f"{value.day} {value:%b} {value.year}"
    return value or '-'


if __name__ == '__main__':
    create_app().run()
