from flask import Blueprint, jsonify, redirect, session, url_for

from auth_utils import login_required, safe_next
from services.notifications import notification_center

notifications_bp = Blueprint('notifications', __name__, url_prefix='/notifications')


@notifications_bp.route('/')
@login_required
def index():
    events = notification_center().queue_for(session['user_id']).peek()
    return jsonify(count=len(events), notifications=[event.to_dict() for event in events])


@notifications_bp.route('/clear', methods=['POST'])
@login_required
def clear():
    notification_center().queue_for(session['user_id']).drain()
    return redirect(safe_next(url_for('dashboard.index')))
