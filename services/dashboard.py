import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List

from errors import BackendError
from models import current_financial_year
from services.cash import cash_store
from services.cheques import cheque_store
from services.digital import digital_store

logger = logging.getLogger(__name__)

OTHERS_BANK = 'Others'
CASH_BUCKET = 'Cash'
ZERO = Decimal('0')


@dataclass
class TransactionSummary:
    total_inflow: Decimal = ZERO
    cheque_transactions: int = 0
    cheque_amount: Decimal = ZERO
    cash_transactions: int = 0
    cash_amount: Decimal = ZERO
    digital_transactions: int = 0
    digital_amount: Decimal = ZERO
    recent_transactions: list = field(default_factory=list)


@dataclass
class BankShare:
    name: str
    value: Decimal


@dataclass
class PartyTotal:
    name: str
    incoming: Decimal = ZERO
    outgoing: Decimal = ZERO


@dataclass
class Dashboard:
    financial_year: str
    summary: TransactionSummary = field(default_factory=TransactionSummary)
    bank_distribution: List[BankShare] = field(default_factory=list)
    party_totals: List[PartyTotal] = field(default_factory=list)
    degraded: bool = False


def _sum_amounts(records):
    return sum((record.amount for record in records), ZERO)


def _created_key(record):
    return record.created_at or datetime.min


def summarize(cash, cheques, digital, recent_limit=5):
    """Totals, counts and most recently created records for one period."""
    cash_amount = _sum_amounts(cash)
    cheque_amount = _sum_amounts(cheques)
    digital_amount = _sum_amounts(digital)
    recent = sorted([*cheques, *cash, *digital], key=_created_key, reverse=True)[:recent_limit]
    return TransactionSummary(
        total_inflow=cheque_amount + cash_amount + digital_amount,
        cheque_transactions=len(cheques),
        cheque_amount=cheque_amount,
        cash_transactions=len(cash),
        cash_amount=cash_amount,
        digital_transactions=len(digital),
        digital_amount=digital_amount,
        recent_transactions=recent,
    )


def bank_distribution(cheques, digital, cash):
    """Total per bank for cheque and digital records, plus a ``Cash`` bucket."""
    totals = {}
    for record in [*cheques, *digital]:
        bank = (record.bank_name or '').strip() or OTHERS_BANK
        totals[bank] = totals.get(bank, ZERO) + record.amount

    cash_total = _sum_amounts(cash)
    if cash_total > 0:
        totals[CASH_BUCKET] = totals.pop(CASH_BUCKET, ZERO) + cash_total

    return [BankShare(name, value) for name, value in totals.items()]


def party_totals(records):
    """Incoming and outgoing totals per party, ordered by party name."""
    by_party = {}
    for record in records:
        entry = by_party.setdefault(record.party, PartyTotal(record.party))
        if record.is_incoming:
            entry.incoming += record.amount
        else:
            entry.outgoing += record.amount
    return [by_party[name] for name in sorted(by_party)]


def load_dashboard(user_id, financial_year=None, recent_limit=5):
    financial_year = financial_year or current_financial_year()
    try:
        cheques = cheque_store.fetch(user_id)
        cash = cash_store.fetch(user_id)
        digital = digital_store.fetch(user_id)
    except BackendError:
        logger.error("Dashboard data unavailable for user %s", user_id)
        return Dashboard(financial_year=financial_year, degraded=True)

    def in_year(records):
        return [record for record in records if record.financial_year == financial_year]

    year_cheques, year_cash, year_digital = in_year(cheques), in_year(cash), in_year(digital)
    return Dashboard(
        financial_year=financial_year,
        summary=summarize(year_cash, year_cheques, year_digital, recent_limit),
        bank_distribution=bank_distribution(year_cheques, year_digital, year_cash),
        party_totals=party_totals([*cash, *cheques, *digital]),
    )
