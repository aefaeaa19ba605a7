from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from werkzeug.utils import secure_filename

from errors import ValidationError
from models import TransactionKind
from services.cash import cash_store
from services.cheques import cheque_store
from services.digital import digital_store

ROWS_PER_PAGE = 10
PAGE_MARGIN = 30


class ReportType(str, Enum):
    ALL = 'all'
    CASH_ONLY = 'cash-only'
    DIGITAL_CHEQUE = 'digital-cheque'
    BANK_WISE = 'bank-wise'

    @property
    def includes_cash(self):
        return self in (ReportType.ALL, ReportType.CASH_ONLY)

    @property
    def includes_bank_kinds(self):
        return self in (ReportType.ALL, ReportType.DIGITAL_CHEQUE, ReportType.BANK_WISE)


# Column headers and fixed widths in points; each row sums to the A4 text width.
SECTION_LAYOUTS = {
    TransactionKind.CASH: (
        ('Date', 'Description', 'Credit/Debit', 'Amount'),
        (80, 255, 80, 120),
    ),
    TransactionKind.DIGITAL: (
        ('Date', 'Description', 'Bank', 'Credit/Debit', 'Amount'),
        (75, 180, 120, 70, 90),
    ),
    TransactionKind.CHEQUE: (
        ('Date', 'Description', 'Cheque #', 'Bank', 'Credit/Debit', 'Amount'),
        (70, 150, 70, 110, 60, 75),
    ),
}

SECTION_TITLES = {
    TransactionKind.CASH: 'Cash Transactions',
    TransactionKind.DIGITAL: 'Digital Transactions',
    TransactionKind.CHEQUE: 'Cheque Transactions',
}


def format_report_date(day):
    return f"{day:%b} {day.day}, {day.year}"


def format_long_date(day):
    return f"{day:%B} {day.day}, {day.year}"


def format_amount(amount):
    return f"{amount:,.2f}"


def _row_for(record):
    credit_debit = 'Credit' if record.is_incoming else 'Debit'
    amount = format_amount(abs(record.amount))
    when = format_report_date(record.date)
    if record.kind == TransactionKind.CASH:
        return [when, record.description, credit_debit, amount]
    if record.kind == TransactionKind.DIGITAL:
        return [when, record.description, record.bank_name, credit_debit, amount]
    return [when, record.description, record.cheque_number, record.bank_name, credit_debit, amount]


@dataclass
class ReportSection:
    kind: TransactionKind
    records: list
    rows_per_page: int = ROWS_PER_PAGE

    @property
    def title(self):
        return SECTION_TITLES[self.kind]

    @property
    def headers(self):
        return SECTION_LAYOUTS[self.kind][0]

    @property
    def col_widths(self):
        return SECTION_LAYOUTS[self.kind][1]

    @property
    def empty_message(self):
        return f"No {self.kind.label.lower()} transactions in this period."

    @property
    def rows(self):
        return [_row_for(record) for record in self.records]

    @property
    def pages(self):
        rows = self.rows
        return [rows[i:i + self.rows_per_page] for i in range(0, len(rows), self.rows_per_page)]

    @property
    def total(self):
        return sum((record.signed_amount for record in self.records), Decimal('0'))


@dataclass
class Report:
    report_type: ReportType
    start: date
    end: date
    sections: List[ReportSection]
    bank: Optional[str] = None
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def title(self):
        if self.report_type == ReportType.CASH_ONLY:
            return 'Cash Transactions Report'
        if self.report_type == ReportType.DIGITAL_CHEQUE:
            return 'Digital & Cheque Transactions Report'
        if self.report_type == ReportType.BANK_WISE:
            return f'Bank Transactions Report - {self.bank}'
        return 'Complete Transaction Report'

    @property
    def filename(self):
        date_range = f"{self.start.isoformat()}-to-{self.end.isoformat()}"
        if self.report_type == ReportType.CASH_ONLY:
            prefix = 'cash'
        elif self.report_type == ReportType.DIGITAL_CHEQUE:
            prefix = 'digital-cheque'
        elif self.report_type == ReportType.BANK_WISE:
            prefix = secure_filename(self.bank or '') or 'bank'
        else:
            prefix = 'all'
        return f"{prefix}-transactions-{date_range}.pdf"

    @property
    def period_label(self):
        return f"{format_long_date(self.start)} - {format_long_date(self.end)}"

    def section(self, kind):
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    @property
    def grand_total(self):
        return sum((section.total for section in self.sections), Decimal('0'))


def parse_report_type(raw):
    try:
        return ReportType(raw or ReportType.ALL.value)
    except ValueError:
        raise ValidationError("Unknown report type")


def available_banks(digital, cheques):
    """Unique non-blank bank names across digital and cheque records, sorted."""
    return sorted({record.bank_name for record in [*digital, *cheques] if record.bank_name})


def build_report(cash, digital, cheques, start, end, report_type=ReportType.ALL,
                 bank=None, rows_per_page=ROWS_PER_PAGE, generated_at=None):
    report_type = ReportType(report_type)
    if end < start:
        raise ValidationError("End date must not be before start date")
    if report_type == ReportType.BANK_WISE:
        if not bank:
            raise ValidationError("Select a bank for a bank-wise report")
        digital = [record for record in digital if record.bank_name == bank]
        cheques = [record for record in cheques if record.bank_name == bank]

    sections = []
    if report_type.includes_cash:
        sections.append(ReportSection(TransactionKind.CASH, list(cash), rows_per_page))
    if report_type.includes_bank_kinds:
        sections.append(ReportSection(TransactionKind.DIGITAL, list(digital), rows_per_page))
        sections.append(ReportSection(TransactionKind.CHEQUE, list(cheques), rows_per_page))

    return Report(
        report_type=report_type,
        start=start,
        end=end,
        sections=sections,
        bank=bank if report_type == ReportType.BANK_WISE else None,
        generated_at=generated_at or datetime.now(),
    )


def load_report_data(user_id, start, end):
    """Fetch the user's records dated within ``start``..``end`` (inclusive)."""
    cash = cash_store.fetch(user_id, start=start, end=end)
    digital = digital_store.fetch(user_id, start=start, end=end)
    cheques = cheque_store.fetch(user_id, start=start, end=end)
    return cash, digital, cheques


TABLE_STYLE = TableStyle([
    ('GRID', (0, 0), (-1, -1), 0.35, colors.grey),
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#f5f5f5")),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('FONTSIZE', (0, 0), (-1, -1), 9),
    ('ALIGN', (-1, 0), (-1, -1), 'RIGHT'),
    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ('LEFTPADDING', (0, 0), (-1, -1), 6),
    ('RIGHTPADDING', (0, 0), (-1, -1), 6),
])


def render_pdf(report, buffer):
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=report.title,
                            rightMargin=PAGE_MARGIN, leftMargin=PAGE_MARGIN,
                            topMargin=PAGE_MARGIN, bottomMargin=PAGE_MARGIN + 20)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('title', parent=styles['Title'], alignment=1, fontSize=20)
    hdr = ParagraphStyle('hdr', parent=styles['Heading2'], fontSize=14)
    cell = ParagraphStyle('cell', parent=styles['Normal'], fontSize=9, leading=11)
    normal = styles['Normal']
    italic = ParagraphStyle('italic', parent=normal, fontName='Helvetica-Oblique')

    story = [
        Paragraph(escape(report.title), title_style),
        Paragraph(f"Report Period: {report.period_label}", normal),
        Spacer(1, 10),
    ]

    summary_rows = [['Summary', 'Count', 'Net Amount']]
    for section in report.sections:
        summary_rows.append([f"Total {section.title}", str(len(section.records)), format_amount(section.total)])
    summary_rows.append(['Grand Total', '', format_amount(report.grand_total)])
    summary = Table(summary_rows, colWidths=[295, 80, 160], hAlign='LEFT')
    summary.setStyle(TABLE_STYLE)
    summary.setStyle(TableStyle([('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold')]))
    story.append(summary)

    for section in report.sections:
        story.append(Spacer(1, 12))
        story.append(Paragraph(escape(section.title), hdr))
        pages = section.pages
        if not pages:
            story.append(Paragraph(section.empty_message, italic))
            continue
        for index, rows in enumerate(pages):
            if index > 0:
                story.append(PageBreak())
            data = [list(section.headers)]
            # wrap the free-text description column
            data.extend([row[0], Paragraph(escape(row[1] or ''), cell), *row[2:]] for row in rows)
            table = Table(data, colWidths=section.col_widths, hAlign='LEFT', repeatRows=1)
            table.setStyle(TABLE_STYLE)
            story.append(table)

    footer = f"Generated on {report.generated_at:%B} {report.generated_at.day}, " \
             f"{report.generated_at.year} at {report.generated_at:%I:%M %p}"

    def draw_footer(canvas, doc_):
        canvas.saveState()
        canvas.setFont('Helvetica', 8)
        canvas.setFillColor(colors.HexColor("#666666"))
        canvas.drawCentredString(A4[0] / 2, PAGE_MARGIN, footer)
        canvas.drawRightString(A4[0] - PAGE_MARGIN, PAGE_MARGIN, f"Page {doc_.page}")
        canvas.restoreState()

    doc.build(story, onFirstPage=draw_footer, onLaterPages=draw_footer)
    return buffer
