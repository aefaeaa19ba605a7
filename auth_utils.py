from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, redirect, request, session, url_for

THEMES = ('light', 'dark')


@dataclass(frozen=True)
class AuthContext:
    user_id: Optional[int] = None
    user_name: str = ''

    @property
    def is_authenticated(self):
        return self.user_id is not None


@dataclass(frozen=True)
class ThemeContext:
    theme: str = 'light'

    @property
    def is_dark(self):
        return self.theme == 'dark'

    def toggled(self):
        return ThemeContext('light' if self.is_dark else 'dark')


def load_request_context(cookie_name):
    """Resolve the signed-in user and theme preference for this request onto ``g``."""
    g.auth = AuthContext(session.get('user_id'), session.get('user_name', ''))
    theme = request.cookies.get(cookie_name)
    g.theme = ThemeContext(theme if theme in THEMES else 'light')


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if 'user_id' not in session:
            return redirect(url_for('auth.login'))
        return fn(*args, **kwargs)
    return wrapper


def safe_next(default):
    """Local path from the form's ``next`` field, or ``default``."""
    target = request.form.get('next', '')
    if target.startswith('/') and not target.startswith('//'):
        return target
    return default
