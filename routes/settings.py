from flask import Blueprint, current_app, flash, g, make_response, redirect, render_template, request, session, url_for

from auth_utils import login_required, safe_next
from errors import BackendError
from services import users
from validators import MAX_NAME_LENGTH

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')

THEME_COOKIE_MAX_AGE = 365 * 24 * 3600


@settings_bp.route('/')
@login_required
def index():
    user = None
    try:
        user = users.get_user(session['user_id'])
    except BackendError as exc:
        flash(str(exc), 'error')
    return render_template('settings.html', user=user)


@settings_bp.route('/profile', methods=['POST'])
@login_required
def update_profile():
    full_name = request.form.get('full_name', '').strip()
    if not full_name or len(full_name) > MAX_NAME_LENGTH:
        flash(f"Full name is required (at most {MAX_NAME_LENGTH} characters)", 'error')
        return redirect(url_for('settings.index'))
    try:
        users.update_profile(session['user_id'], full_name)
    except BackendError as exc:
        flash(str(exc), 'error')
        return redirect(url_for('settings.index'))
    session['user_name'] = full_name
    flash("Profile updated!", 'success')
    return redirect(url_for('settings.index'))


@settings_bp.route('/theme', methods=['POST'])
@login_required
def toggle_theme():
    theme = g.theme.toggled()
    response = make_response(redirect(safe_next(url_for('settings.index'))))
    response.set_cookie(
        current_app.config.get('THEME_COOKIE', 'theme'), theme.theme,
        max_age=THEME_COOKIE_MAX_AGE, samesite='Lax', httponly=True,
    )
    return response
