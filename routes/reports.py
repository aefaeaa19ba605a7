import calendar
import io
from datetime import date

from flask import Blueprint, current_app, flash, redirect, render_template, request, send_file, session, url_for

from auth_utils import login_required
from errors import BackendError, ValidationError
from services.reports import ReportType, available_banks, build_report, load_report_data, parse_report_type, render_pdf
from validators import parse_date

reports_bp = Blueprint('reports', __name__, url_prefix='/reports')


def current_month_range(today=None):
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def _report_params():
    default_start, default_end = current_month_range()
    start_raw = request.args.get('start')
    end_raw = request.args.get('end')
    start = parse_date(start_raw) if start_raw else default_start
    end = parse_date(end_raw) if end_raw else default_end
    report_type = parse_report_type(request.args.get('type'))
    return start, end, report_type, request.args.get('bank', '').strip()


def _prepare_report():
    start, end, report_type, bank = _report_params()
    cash, digital, cheques = load_report_data(session['user_id'], start, end)
    banks = available_banks(digital, cheques)
    if report_type == ReportType.BANK_WISE and not bank and banks:
        bank = banks[0]
    report = build_report(
        cash, digital, cheques, start, end, report_type, bank or None,
        rows_per_page=current_app.config.get('REPORT_ROWS_PER_PAGE', 10),
    )
    return report, banks


@reports_bp.route('/')
@login_required
def index():
    report, banks, error = None, [], None
    try:
        report, banks = _prepare_report()
    except (ValidationError, BackendError) as exc:
        error = str(exc)
        flash(error, 'error')

    start, end = current_month_range()
    return render_template(
        'reports.html',
        report=report,
        banks=banks,
        error=error,
        start=report.start if report else request.args.get('start', start.isoformat()),
        end=report.end if report else request.args.get('end', end.isoformat()),
        report_type=report.report_type.value if report else request.args.get('type', 'all'),
        bank=report.bank if report else request.args.get('bank', ''),
        report_types=list(ReportType),
    )


@reports_bp.route('/download')
@login_required
def download():
    try:
        report, _ = _prepare_report()
    except (ValidationError, BackendError) as exc:
        flash(str(exc), 'error')
        return redirect(url_for('reports.index', **request.args))

    buffer = io.BytesIO()
    render_pdf(report, buffer)
    buffer.seek(0)
    current_app.logger.info("Generated %s for user %s", report.filename, session['user_id'])
    return send_file(buffer, as_attachment=True, download_name=report.filename, mimetype='application/pdf')
