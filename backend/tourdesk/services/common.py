"""
Helpers shared by the services
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from sqlalchemy.orm import Session

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round4(value) -> Decimal:
    return to_decimal(value).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def ensure_exists(db: Session, model, record_id: Optional[int], label: str):
    """Load a referenced record, raising ValueError when the id is dangling"""
    if record_id is None:
        return None
    record = db.query(model).filter(model.id == record_id).first()
    if record is None:
        raise ValueError(f"{label} {record_id} not found")
    return record


def next_number(db: Session, column, prefix: str) -> str:
    """
    Next PREFIX-00001 style number for a column.
    Follows the highest numeric suffix; hand-entered values such as
    PREFIX-WEB1 are ignored.
    """
    highest = 0
    for (value,) in db.query(column).filter(column.like(f"{prefix}-%")).all():
        suffix = value[len(prefix) + 1:]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1:05d}"
