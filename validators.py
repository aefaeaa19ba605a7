import re
from datetime import date
from decimal import Decimal, InvalidOperation

from errors import ValidationError
from models import (
    Cheque, ChequeStatus, DigitalTransaction, Direction, TransferType,
    current_financial_year,
)

MAX_PARTY_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 100
# DECIMAL(12, 2) columns
MAX_AMOUNT = Decimal('9999999999.99')
CENTS = Decimal('0.01')
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

REQUIRED_FIELDS = {
    'cash': ('date', 'party'),
    'cheque': ('cheque_number', 'date', 'party', 'bank_name'),
    'digital': ('date', 'party', 'bank_name', 'transfer_type'),
}


def parse_amount(raw):
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number")
    if not amount.is_finite():
        raise ValidationError("Amount must be a number")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount must be at most {MAX_AMOUNT:,.2f}")
    if amount > 0:
        try:
            amount = amount.quantize(CENTS)
        except InvalidOperation:
            raise ValidationError("Amount must be a number")
    # the rounded value must stay positive
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return amount


def parse_date(raw):
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format")


def _parse_enum(enum_cls, raw, label):
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(f"Invalid {label}")


def parse_transaction_form(model_cls, form, financial_year=None):
    """
    Build a ``model_cls`` record from submitted form data.

    ``financial_year`` is kept when editing; new records get the current one.
    """
    kind = model_cls.kind.value
    values = {name: (form.get(name) or '').strip() for name in model_cls.columns if name != 'amount'}

    missing = [name for name in REQUIRED_FIELDS[kind] if not values.get(name)]
    if missing:
        raise ValidationError("Please fill all required fields")

    if len(values['party']) > MAX_PARTY_LENGTH:
        raise ValidationError(f"Party must be at most {MAX_PARTY_LENGTH} characters")
    if len(values['description']) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters")

    values['amount'] = parse_amount(form.get('amount', ''))
    values['date'] = parse_date(values['date'])
    values['direction'] = _parse_enum(Direction, values['direction'] or Direction.INCOMING.value, 'direction')
    values['financial_year'] = financial_year or current_financial_year()

    if model_cls is Cheque:
        values['status'] = _parse_enum(ChequeStatus, values['status'] or ChequeStatus.PENDING.value, 'cheque status')
    elif model_cls is DigitalTransaction:
        values['transfer_type'] = _parse_enum(TransferType, values['transfer_type'], 'transfer type')

    return model_cls(**values)


def validate_signup(name, email, password):
    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")
    validate_email(email)
    validate_password(password)


def validate_email(email):
    if not EMAIL_RE.match(email or ''):
        raise ValidationError("Please enter a valid email address")


def validate_password(password):
    if len(password or '') < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
