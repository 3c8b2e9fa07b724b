from datetime import datetime
from typing import Iterable, Sequence, Union

from .models import (
    AuditExpenseRow,
    AuditPaymentRow,
    AuditProjection,
    Expense,
    Participant,
    Payment,
)

# Fixed English abbreviations; %b would follow the process locale.
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_audit_timestamp(value: Union[datetime, str]) -> str:
    """Render as ``DD-Mon HH:MM`` in local time, e.g. ``07-Jan 14:05``."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00")) if isinstance(value, str) else value
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment.day:02d}-{MONTHS[moment.month - 1]} {moment.hour:02d}:{moment.minute:02d}"


def project_audit(
    expenses: Iterable[Expense],
    payment_log: Iterable[Payment],
    participants: Sequence[Participant] = (),
) -> AuditProjection:
    names = {p.id: p.name for p in participants}

    expense_rows = [
        AuditExpenseRow(
            timestamp=format_audit_timestamp(e.created_at),
            payer=names.get(e.paid_by, e.paid_by),
            description=e.description or "",
            amount=e.amount,
        )
        for e in expenses
    ]
    payment_rows = [
        AuditPaymentRow(
            timestamp=format_audit_timestamp(p.created_at),
            from_label=f"From: {names.get(p.by_id, p.by_id)}",
            to_label=f"To: {names.get(p.to_id, p.to_id)}",
            amount=p.amount,
        )
        for p in payment_log
    ]
    return AuditProjection(expense_rows=expense_rows, payment_rows=payment_rows)
