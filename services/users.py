import hashlib
import logging
import secrets
from datetime import datetime, timedelta

import mysql.connector
from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthError, BackendError, UnverifiedEmailError, ValidationError
from models import User

logger = logging.getLogger(__name__)

VERIFY = 'verify'
RESET = 'reset'

USER_COLUMNS = "id, full_name, email, password_hash, email_verified"


def _generate_token():
    return secrets.token_urlsafe(32)


def _hash_token(token):
    return hashlib.sha256(token.encode()).hexdigest()


def _run(action, fn):
    try:
        conn = current_app.db_pool.get_connection()
    except mysql.connector.Error as exc:
        logger.exception("No database connection to %s", action)
        raise BackendError(f"Failed to {action}", exc) from exc
    try:
        with conn.cursor(dictionary=True) as cur:
            return fn(conn, cur)
    except mysql.connector.Error as exc:
        logger.exception("Failed to %s", action)
        raise BackendError(f"Failed to {action}", exc) from exc
    finally:
        conn.close()


def get_user(user_id):
    def run(conn, cur):
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
        row = cur.fetchone()
        return User.from_row(row) if row else None
    return _run('load profile', run)


def find_user_by_email(email):
    def run(conn, cur):
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email=%s", (email.strip().lower(),))
        row = cur.fetchone()
        return User.from_row(row) if row else None
    return _run('look up account', run)


def create_user(full_name, email, password):
    email = email.strip().lower()

    def run(conn, cur):
        cur.execute("SELECT id FROM users WHERE email=%s", (email,))
        if cur.fetchone():
            raise ValidationError("Email already exists")
        cur.execute(
            "INSERT INTO users (full_name, email, password_hash) VALUES (%s, %s, %s)",
            (full_name, email, generate_password_hash(password))
        )
        conn.commit()
        return cur.lastrowid
    user_id = _run('create account', run)
    logger.info("Created user %s", user_id)
    return User(id=user_id, email=email, full_name=full_name)


def authenticate(email, password):
    user = find_user_by_email(email)
    if not user or not check_password_hash(user.password_hash, password):
        raise AuthError("Invalid credentials")
    if not user.email_verified:
        raise UnverifiedEmailError("Please verify your email before signing in")
    return user


def update_profile(user_id, full_name):
    def run(conn, cur):
        cur.execute("UPDATE users SET full_name=%s WHERE id=%s", (full_name, user_id))
        conn.commit()
    _run('update profile', run)


def set_password(user_id, password):
    def run(conn, cur):
        cur.execute("UPDATE users SET password_hash=%s WHERE id=%s", (generate_password_hash(password), user_id))
        conn.commit()
    _run('reset password', run)
    logger.info("Password changed for user %s", user_id)


def mark_verified(user_id):
    def run(conn, cur):
        cur.execute("UPDATE users SET email_verified=1 WHERE id=%s", (user_id,))
        conn.commit()
    _run('verify email', run)
    logger.info("Email verified for user %s", user_id)


def issue_token(user_id, purpose):
    """Replace any outstanding ``purpose`` token for the user and return the raw token."""
    hours = current_app.config['VERIFY_TOKEN_HOURS' if purpose == VERIFY else 'RESET_TOKEN_HOURS']
    token = _generate_token()
    expires_at = datetime.now() + timedelta(hours=hours)

    def run(conn, cur):
        cur.execute("DELETE FROM auth_tokens WHERE user_id=%s AND purpose=%s", (user_id, purpose))
        cur.execute(
            "INSERT INTO auth_tokens (user_id, purpose, token_hash, expires_at) VALUES (%s, %s, %s, %s)",
            (user_id, purpose, _hash_token(token), expires_at)
        )
        conn.commit()
    _run('issue token', run)
    return token


def consume_token(token, purpose):
    """Return the user id the token belongs to and delete it; raise ``AuthError`` if invalid."""
    if not token:
        raise AuthError("Invalid or expired link")

    def run(conn, cur):
        cur.execute(
            "SELECT id, user_id, expires_at FROM auth_tokens WHERE token_hash=%s AND purpose=%s",
            (_hash_token(token), purpose)
        )
        row = cur.fetchone()
        if not row:
            return None
        cur.execute("DELETE FROM auth_tokens WHERE id=%s", (row['id'],))
        conn.commit()
        if row['expires_at'] < datetime.now():
            return None
        return row['user_id']
    user_id = _run('check token', run)
    if user_id is None:
        raise AuthError("Invalid or expired link")
    return user_id
