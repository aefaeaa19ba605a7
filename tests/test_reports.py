"""
Test suite for report building, PDF rendering and the reports routes.
"""

import pytest
import os
import sys
import io
from unittest.mock import MagicMock
from datetime import date, datetime
from decimal import Decimal

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from errors import ValidationError
from models import CashTransaction, Cheque, DigitalTransaction, Direction, TransactionKind
from services.reports import (
    ReportType, available_banks, build_report, format_amount, format_report_date,
    parse_report_type, render_pdf,
)

START = date(2026, 10, 1)
END = date(2026, 10, 31)


def make_mock_connection():
    """Create a mock MySQL connection with cursor context manager."""
    conn = MagicMock()
    cursor = MagicMock()
    cursor.__enter__ = MagicMock(return_value=cursor)
    cursor.__exit__ = MagicMock(return_value=False)
    conn.cursor.return_value = cursor
    return conn, cursor


def login_session(client, user_id=1, user_name='Test User'):
    """Helper to set up a logged-in session."""
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
        sess['user_name'] = user_name


def cash(amount, direction=Direction.INCOMING, description='Counter sale'):
    return CashTransaction(date=date(2026, 10, 5), party='Shop', amount=Decimal(amount),
                           direction=direction, description=description)


def cheque(amount, bank='HDFC', number='000123'):
    return Cheque(date=date(2026, 10, 6), party='Acme', amount=Decimal(amount),
                  cheque_number=number, bank_name=bank, description='Invoice')


def digital(amount, bank='SBI'):
    return DigitalTransaction(date=date(2026, 10, 7), party='Vendor', amount=Decimal(amount),
                              bank_name=bank, description='Subscription')


def digital_row(id, bank='SBI'):
    return {
        'id': id, 'user_id': 1, 'created_at': datetime(2026, 10, 7, 10, 0),
        'date': date(2026, 10, 7), 'party': 'Vendor', 'amount': Decimal('100.00'),
        'description': 'Subscription', 'direction': 'incoming', 'financial_year': '2026-2027',
        'bank_name': bank, 'transfer_type': 'NEFT', 'reference_number': '',
    }


class TestBuildReport:
    """Report sections, titles and totals."""

    def test_all_includes_every_kind(self):
        report = build_report([cash('10')], [digital('20')], [cheque('30')], START, END)
        assert [s.kind for s in report.sections] == [
            TransactionKind.CASH, TransactionKind.DIGITAL, TransactionKind.CHEQUE]
        assert report.title == 'Complete Transaction Report'

    def test_cash_only(self):
        report = build_report([cash('10')], [digital('20')], [cheque('30')], START, END, ReportType.CASH_ONLY)
        assert [s.kind for s in report.sections] == [TransactionKind.CASH]
        assert report.title == 'Cash Transactions Report'

    def test_digital_cheque(self):
        report = build_report([cash('10')], [digital('20')], [cheque('30')], START, END, 'digital-cheque')
        assert report.section(TransactionKind.CASH) is None
        assert report.title == 'Digital & Cheque Transactions Report'

    def test_bank_wise_filters_by_bank(self):
        report = build_report(
            [cash('10')], [digital('20', 'SBI'), digital('5', 'HDFC')],
            [cheque('30', 'HDFC'), cheque('1', 'ICICI')],
            START, END, ReportType.BANK_WISE, bank='HDFC',
        )
        assert report.section(TransactionKind.CASH) is None
        assert [r.amount for r in report.section(TransactionKind.DIGITAL).records] == [Decimal('5')]
        assert [r.amount for r in report.section(TransactionKind.CHEQUE).records] == [Decimal('30')]
        assert report.title == 'Bank Transactions Report - HDFC'

    def test_bank_wise_requires_bank(self):
        with pytest.raises(ValidationError):
            build_report([], [], [], START, END, ReportType.BANK_WISE)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            build_report([], [], [], END, START)

    def test_section_total_is_net(self):
        report = build_report(
            [cash('100'), cash('30', direction=Direction.OUTGOING)], [], [], START, END, ReportType.CASH_ONLY)
        assert report.section(TransactionKind.CASH).total == Decimal('70')
        assert report.grand_total == Decimal('70')

    def test_rows_are_paged_in_groups(self):
        records = [cash(str(i + 1)) for i in range(25)]
        report = build_report(records, [], [], START, END, ReportType.CASH_ONLY)
        pages = report.section(TransactionKind.CASH).pages
        assert [len(page) for page in pages] == [10, 10, 5]

    def test_custom_page_size(self):
        records = [cash(str(i + 1)) for i in range(4)]
        report = build_report(records, [], [], START, END, ReportType.CASH_ONLY, rows_per_page=3)
        assert [len(page) for page in report.section(TransactionKind.CASH).pages] == [3, 1]

    def test_row_layout(self):
        report = build_report([], [], [cheque('1234.5', number='000777')], START, END, ReportType.DIGITAL_CHEQUE)
        section = report.section(TransactionKind.CHEQUE)
        assert section.headers == ('Date', 'Description', 'Cheque #', 'Bank', 'Credit/Debit', 'Amount')
        assert section.rows == [['Oct 6, 2026', 'Invoice', '000777', 'HDFC', 'Credit', '1,234.50']]

    def test_empty_section_message(self):
        report = build_report([], [], [], START, END)
        assert report.section(TransactionKind.DIGITAL).pages == []
        assert report.section(TransactionKind.DIGITAL).empty_message == 'No digital transactions in this period.'


class TestReportNaming:
    """Filenames and labels."""

    @pytest.mark.parametrize("report_type,bank,expected", [
        (ReportType.ALL, None, 'all-transactions-2026-10-01-to-2026-10-31.pdf'),
        (ReportType.CASH_ONLY, None, 'cash-transactions-2026-10-01-to-2026-10-31.pdf'),
        (ReportType.DIGITAL_CHEQUE, None, 'digital-cheque-transactions-2026-10-01-to-2026-10-31.pdf'),
        (ReportType.BANK_WISE, 'HDFC', 'HDFC-transactions-2026-10-01-to-2026-10-31.pdf'),
    ])
    def test_filename(self, report_type, bank, expected):
        report = build_report([], [], [], START, END, report_type, bank=bank)
        assert report.filename == expected

    def test_bank_filename_is_sanitised(self):
        report = build_report([], [], [], START, END, ReportType.BANK_WISE, bank='../State Bank')
        assert '/' not in report.filename
        assert report.filename.endswith('-transactions-2026-10-01-to-2026-10-31.pdf')

    def test_period_label(self):
        report = build_report([], [], [], START, END)
        assert report.period_label == 'October 1, 2026 - October 31, 2026'

    def test_formatters(self):
        assert format_report_date(date(2026, 1, 5)) == 'Jan 5, 2026'
        assert format_amount(Decimal('1234567.8')) == '1,234,567.80'

    def test_parse_report_type(self):
        assert parse_report_type(None) == ReportType.ALL
        assert parse_report_type('bank-wise') == ReportType.BANK_WISE
        with pytest.raises(ValidationError):
            parse_report_type('weekly')

    def test_available_banks(self):
        banks = available_banks([digital('1', 'SBI'), digital('1', '')], [cheque('1', 'HDFC'), cheque('1', 'SBI')])
        assert banks == ['HDFC', 'SBI']


class TestRenderPdf:
    """PDF output."""

    def test_renders_pdf(self):
        report = build_report([cash('10')], [digital('20')], [cheque('30')], START, END,
                              generated_at=datetime(2026, 10, 16, 14, 30))
        buffer = render_pdf(report, io.BytesIO())
        assert buffer.getvalue().startswith(b'%PDF')

    def test_renders_multiple_pages_and_markup_safe_text(self):
        records = [cash(str(i + 1), description='<b>R&D</b> supplies') for i in range(23)]
        report = build_report(records, [], [], START, END, ReportType.CASH_ONLY)
        buffer = render_pdf(report, io.BytesIO())
        assert buffer.getvalue().startswith(b'%PDF')

    def test_renders_empty_report(self):
        report = build_report([], [], [], START, END)
        assert render_pdf(report, io.BytesIO()).getvalue().startswith(b'%PDF')


class TestReportRoutes:
    """Preview and download."""

    def test_reports_requires_login(self, client):
        response = client.get('/reports/')
        assert response.status_code == 302
        assert '/auth/login' in response.headers.get('Location', '')

    def test_preview(self, client_no_csrf, app_no_csrf):
        login_session(client_no_csrf)
        conn, cursor = make_mock_connection()
        cursor.fetchall.side_effect = [[], [digital_row(1)], []]  # cash, digital, cheques
        app_no_csrf.db_pool.get_connection.return_value = conn

        response = client_no_csrf.get('/reports/?start=2026-10-01&end=2026-10-31&type=all')
        assert response.status_code == 200
        assert b'Complete Transaction Report' in response.data
        assert b'Download PDF' in response.data
        _, params = cursor.execute.call_args_list[0][0]
        assert params == (1, date(2026, 10, 1), date(2026, 10, 31))

    def test_download_pdf(self, client_no_csrf, app_no_csrf):
        login_session(client_no_csrf)
        conn, cursor = make_mock_connection()
        cursor.fetchall.side_effect = [[], [digital_row(1)], []]
        app_no_csrf.db_pool.get_connection.return_value = conn

        response = client_no_csrf.get('/reports/download?start=2026-10-01&end=2026-10-31&type=all')
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')
        assert 'all-transactions-2026-10-01-to-2026-10-31.pdf' in response.headers['Content-Disposition']

    def test_bank_wise_defaults_to_first_bank(self, client_no_csrf, app_no_csrf):
        login_session(client_no_csrf)
        conn, cursor = make_mock_connection()
        cursor.fetchall.side_effect = [[], [digital_row(1, 'SBI'), digital_row(2, 'Axis')], []]
        app_no_csrf.db_pool.get_connection.return_value = conn

        response = client_no_csrf.get('/reports/?start=2026-10-01&end=2026-10-31&type=bank-wise')
        assert response.status_code == 200
        assert b'Bank Transactions Report - Axis' in response.data

    def test_bank_wise_without_banks_shows_error(self, client_no_csrf, app_no_csrf):
        login_session(client_no_csrf)
        conn, cursor = make_mock_connection()
        cursor.fetchall.side_effect = [[], [], []]
        app_no_csrf.db_pool.get_connection.return_value = conn

        response = client_no_csrf.get('/reports/?start=2026-10-01&end=2026-10-31&type=bank-wise')
        assert response.status_code == 200
        assert b'Select a bank for a bank-wise report' in response.data
        assert b'Download PDF' not in response.data

    def test_invalid_range_redirects_download(self, client_no_csrf, app_no_csrf):
        login_session(client_no_csrf)
        response = client_no_csrf.get('/reports/download?start=2026-10-31&end=2026-10-01')
        assert response.status_code == 302
        assert '/reports/' in response.headers.get('Location', '')

    def test_current_month_range(self):
        from routes.reports import current_month_range
        assert current_month_range(date(2026, 2, 10)) == (date(2026, 2, 1), date(2026, 2, 28))
