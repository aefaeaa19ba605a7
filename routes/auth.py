import logging

from flask import Blueprint, flash, redirect, render_template, request, session, url_for

from errors import AuthError, BackendError, UnverifiedEmailError, ValidationError
from mailer import send_password_reset_email, send_verification_email
from services import users
from validators import validate_password, validate_signup

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')
password_bp = Blueprint('password', __name__, url_prefix='')

GENERIC_EMAIL_NOTICE = "If an account exists with this email, a link has been sent."


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'POST':
        name = request.form.get('name', '').strip()
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        try:
            validate_signup(name, email, password)
        except ValidationError as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.register'))

        try:
            user = users.create_user(name, email, password)
            token = users.issue_token(user.id, users.VERIFY)
        except ValidationError as exc:
            flash(str(exc), 'error')
            return render_template('auth/register.html', name=name, email=email), 400
        except BackendError as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.register'))

        if not send_verification_email(user, token):
            flash("We could not send the verification email. Use 'Resend' to try again.", 'error')
        else:
            flash("Account created. Check your inbox to verify your email.", 'success')
        return redirect(url_for('auth.verify', email=email))

    return render_template('auth/register.html')


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        try:
            user = users.authenticate(email, password)
        except UnverifiedEmailError as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.verify', email=email))
        except (AuthError, BackendError) as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.login'))

        session.clear()
        session['user_id'] = user.id
        session['user_name'] = user.full_name or user.email
        logger.info("User %s signed in", user.id)
        return redirect(url_for('dashboard.index'))

    return render_template('auth/login.html')


@auth_bp.route('/logout')
def logout():
    session.clear()
    return redirect(url_for('auth.login'))


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    email = request.form.get('email', '').strip().lower()
    if not email:
        flash("Please enter your email first.", 'error')
        return redirect(url_for('auth.login'))

    try:
        user = users.find_user_by_email(email)
        if user:
            send_password_reset_email(user, users.issue_token(user.id, users.RESET))
    except BackendError as exc:
        flash(str(exc), 'error')
        return redirect(url_for('auth.login'))

    flash(GENERIC_EMAIL_NOTICE, 'success')
    return redirect(url_for('auth.login'))


@auth_bp.route('/verify', methods=['GET', 'POST'])
def verify():
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        if not email:
            flash("Please enter your email", 'error')
            return redirect(url_for('auth.verify'))
        try:
            user = users.find_user_by_email(email)
            if user and not user.email_verified:
                send_verification_email(user, users.issue_token(user.id, users.VERIFY))
        except BackendError as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.verify', email=email))
        flash(GENERIC_EMAIL_NOTICE, 'success')
        return redirect(url_for('auth.verify', email=email))

    token = request.args.get('token')
    if token:
        try:
            users.mark_verified(users.consume_token(token, users.VERIFY))
        except (AuthError, BackendError) as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.verify'))
        flash("Email verified. You can now sign in.", 'success')
        return redirect(url_for('auth.login'))

    return render_template('auth/verify.html', email=request.args.get('email', ''))


@password_bp.route('/reset-password', methods=['GET', 'POST'])
def reset_password():
    token = request.values.get('token', '')
    if request.method == 'POST':
        password = request.form.get('password', '')
        confirm = request.form.get('confirm_password', '')
        try:
            validate_password(password)
            if password != confirm:
                raise ValidationError("Passwords do not match")
        except ValidationError as exc:
            flash(str(exc), 'error')
            return redirect(url_for('password.reset_password', token=token))

        try:
            users.set_password(users.consume_token(token, users.RESET), password)
        except (AuthError, BackendError) as exc:
            flash(str(exc), 'error')
            return redirect(url_for('auth.login'))
        flash("Password updated. Sign in with your new password.", 'success')
        return redirect(url_for('auth.login'))

    if not token:
        flash("Invalid or expired link", 'error')
        return redirect(url_for('auth.login'))
    return render_template('auth/reset_password.html', token=token)
