from flask import Blueprint, current_app, flash, render_template, session

from auth_utils import login_required
from services.dashboard import load_dashboard

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='')


@dashboard_bp.route('/')
@login_required
def index():
    dashboard = load_dashboard(
        session['user_id'],
        recent_limit=current_app.config.get('RECENT_TRANSACTIONS_LIMIT', 5),
    )
    if dashboard.degraded:
        flash("Failed to fetch dashboard data", 'error')

    summary = dashboard.summary
    return render_template(
        "dashboard.html",
        dashboard=dashboard,
        summary=summary,
        recent=summary.recent_transactions,
        # chart series
        bank_labels=[share.name for share in dashboard.bank_distribution],
        bank_values=[float(share.value) for share in dashboard.bank_distribution],
        party_labels=[entry.name for entry in dashboard.party_totals],
        party_incoming=[float(entry.incoming) for entry in dashboard.party_totals],
        party_outgoing=[float(entry.outgoing) for entry in dashboard.party_totals],
    )
