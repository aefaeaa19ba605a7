import logging
from datetime import date

from flask import abort, flash, redirect, render_template, request, session, url_for

from auth_utils import login_required
from errors import BackendError, ValidationError
from models import ChequeStatus, Direction, TransferType
from validators import parse_transaction_form

logger = logging.getLogger(__name__)

DIRECTIONS = [d.value for d in Direction]


def register_transaction_views(bp, store, noun):
    """Attach list/add/edit/delete views for ``store`` to ``bp``."""

    def back_to_list():
        return redirect(url_for(f'{bp.name}.index'))

    @bp.route('/')
    @login_required
    def index():
        direction = request.args.get('direction', '')
        if direction not in DIRECTIONS:
            direction = ''
        term = request.args.get('q', '').strip()
        user_id = session['user_id']

        records, editing = [], None
        try:
            records = store.fetch(user_id, direction=direction or None)
            edit_id = request.args.get('edit', type=int)
            if edit_id:
                editing = store.get(user_id, edit_id)
        except BackendError as exc:
            flash(str(exc), 'error')

        return render_template(
            'transactions.html',
            kind=store.kind,
            noun=noun,
            endpoint=bp.name,
            records=store.filter_local(records, term),
            direction=direction,
            q=term,
            editing=editing,
            today=date.today(),
            directions=DIRECTIONS,
            statuses=[s.value for s in ChequeStatus],
            transfer_types=[t.value for t in TransferType],
        )

    @bp.route('/add', methods=['POST'])
    @login_required
    def add():
        try:
            record = parse_transaction_form(store.model, request.form)
            store.insert(session['user_id'], record)
        except (ValidationError, BackendError) as exc:
            flash(str(exc), 'error')
        else:
            flash(f"{noun} added successfully", 'success')
        return back_to_list()

    @bp.route('/edit/<int:id>', methods=['POST'])
    @login_required
    def edit(id):
        user_id = session['user_id']
        try:
            existing = store.get(user_id, id)
            if existing is None:
                abort(404, description=f"{noun} not found")
            record = parse_transaction_form(store.model, request.form, existing.financial_year)
            store.update(user_id, id, record)
        except (ValidationError, BackendError) as exc:
            flash(str(exc), 'error')
            return redirect(url_for(f'{bp.name}.index', edit=id))
        flash(f"{noun} updated successfully", 'success')
        return back_to_list()

    @bp.route('/delete/<int:id>', methods=['POST'])
    @login_required
    def delete(id):
        try:
            deleted = store.delete(session['user_id'], id)
        except BackendError as exc:
            flash(str(exc), 'error')
        else:
            if deleted:
                flash(f"{noun} deleted successfully", 'success')
            else:
                flash(f"{noun} not found", 'error')
        return back_to_list()

    return bp
