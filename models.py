from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional


class TransactionKind(str, Enum):
    CASH = 'cash'
    CHEQUE = 'cheque'
    DIGITAL = 'digital'

    @property
    def table(self):
        return KIND_TABLES[self]

    @property
    def label(self):
        return KIND_LABELS[self]


KIND_TABLES = {
    TransactionKind.CASH: 'cash_transactions',
    TransactionKind.CHEQUE: 'cheques',
    TransactionKind.DIGITAL: 'digital_transactions',
}

KIND_LABELS = {
    TransactionKind.CASH: 'Cash',
    TransactionKind.CHEQUE: 'Cheque',
    TransactionKind.DIGITAL: 'Digital',
}


class Direction(str, Enum):
    INCOMING = 'incoming'
    OUTGOING = 'outgoing'


class ChequeStatus(str, Enum):
    PENDING = 'pending'
    CLEARED = 'cleared'
    BOUNCED = 'bounced'
    CANCELLED = 'cancelled'


class TransferType(str, Enum):
    NEFT = 'NEFT'
    IMPS = 'IMPS'
    UPI = 'UPI'
    RTGS = 'RTGS'


def financial_year_for(day: date) -> str:
    """Return the April-start financial year containing ``day``, e.g. ``'2026-2027'``."""
    if day.month >= 4:
        return f"{day.year}-{day.year + 1}"
    return f"{day.year - 1}-{day.year}"


def current_financial_year(today: Optional[date] = None) -> str:
    return financial_year_for(today or date.today())


def _to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass
class Transaction:
    """Fields shared by every transaction kind."""

    kind: ClassVar[TransactionKind]
    # column order used for INSERT/UPDATE; id, user_id and created_at are managed separately
    columns: ClassVar[tuple] = ('date', 'party', 'amount', 'description', 'direction', 'financial_year')

    date: date
    party: str
    amount: Decimal
    direction: Direction = Direction.INCOMING
    description: str = ''
    financial_year: str = ''
    id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_incoming(self):
        return self.direction == Direction.INCOMING

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_incoming else -self.amount

    @property
    def bank(self) -> str:
        """Bank the money moved through; cash has none."""
        return ''

    def to_row(self):
        row = {}
        for name in self.columns:
            value = getattr(self, name)
            if isinstance(value, Enum):
                value = value.value
            row[name] = value
        return row

    @classmethod
    def _coerce(cls, name, value):
        if name == 'date':
            return _to_date(value)
        if name == 'amount':
            return Decimal(str(value))
        if name == 'direction':
            return Direction(value)
        if value is None and name in ('description', 'bank_name', 'reference_number', 'cheque_number'):
            return ''
        return value

    @classmethod
    def from_row(cls, row):
        """Build a record from a ``cursor(dictionary=True)`` row, ignoring unknown columns."""
        known = {f.name for f in fields(cls)}
        values = {name: cls._coerce(name, value) for name, value in row.items() if name in known}
        return cls(**values)


@dataclass
class CashTransaction(Transaction):
    kind: ClassVar[TransactionKind] = TransactionKind.CASH


@dataclass
class Cheque(Transaction):
    kind: ClassVar[TransactionKind] = TransactionKind.CHEQUE
    columns: ClassVar[tuple] = Transaction.columns + ('cheque_number', 'bank_name', 'status')

    cheque_number: str = ''
    bank_name: str = ''
    status: ChequeStatus = ChequeStatus.PENDING

    @property
    def bank(self):
        return self.bank_name

    @classmethod
    def _coerce(cls, name, value):
        if name == 'status':
            return ChequeStatus(value)
        return super()._coerce(name, value)


@dataclass
class DigitalTransaction(Transaction):
    kind: ClassVar[TransactionKind] = TransactionKind.DIGITAL
    columns: ClassVar[tuple] = Transaction.columns + ('bank_name', 'transfer_type', 'reference_number')

    bank_name: str = ''
    transfer_type: TransferType = TransferType.NEFT
    reference_number: str = ''

    @property
    def bank(self):
        return self.bank_name

    @classmethod
    def _coerce(cls, name, value):
        if name == 'transfer_type':
            return TransferType(value)
        return super()._coerce(name, value)


MODEL_FOR_KIND = {
    TransactionKind.CASH: CashTransaction,
    TransactionKind.CHEQUE: Cheque,
    TransactionKind.DIGITAL: DigitalTransaction,
}


def transaction_from_row(kind, row):
    return MODEL_FOR_KIND[TransactionKind(kind)].from_row(row)


@dataclass
class User:
    id: int
    email: str
    full_name: str = ''
    email_verified: bool = False
    password_hash: str = field(default='', repr=False)

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            email=row['email'],
            full_name=row.get('full_name') or '',
            email_verified=bool(row.get('email_verified')),
            password_hash=row.get('password_hash') or '',
        )
