from flask import Blueprint, flash, render_template, request, session

from auth_utils import login_required
from errors import BackendError
from services.search import search_transactions

search_bp = Blueprint('search', __name__, url_prefix='/search')


@search_bp.route('')
@login_required
def index():
    query = request.args.get('query', '').strip()
    category = request.args.get('category', '')
    results = []
    try:
        results = search_transactions(session['user_id'], query, category)
    except BackendError as exc:
        flash(str(exc), 'error')
    return render_template('search.html', query=query, category=category, results=results)
