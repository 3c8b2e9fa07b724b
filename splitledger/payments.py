from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Protocol, Sequence

from .errors import ValidationError
from .models import Participant, Payment
from .money import AmountInput, is_blank, parse_amount


class PaymentSink(Protocol):
    """Persistence hook for logged payments. Payments are session-only unless a sink is given."""

    def save(self, payment: Payment) -> None:
        ...


class PaymentLog:
    """Append-only, caller-owned sequence of payments.

    Appends are not locked here; whoever owns the log serializes writers.
    """

    def __init__(self, payments: Iterable[Payment] = (), sink: Optional[PaymentSink] = None):
        self._payments: list[Payment] = list(payments)
        self._sink = sink

    def append(self, payment: Payment) -> Payment:
        # A payment the sink rejected must not reach balances.
        if self._sink is not None:
            self._sink.save(payment)
        self._payments.append(payment)
        return payment

    def __iter__(self) -> Iterator[Payment]:
        return iter(tuple(self._payments))

    def __len__(self) -> int:
        return len(self._payments)

    def __getitem__(self, index: int) -> Payment:
        return self._payments[index]

    def __repr__(self) -> str:
        return f"PaymentLog({len(self._payments)} payments)"


def build_payment(
    amount: AmountInput,
    by_id: str,
    to_id: str,
    participants: Sequence[Participant],
    created_at: Optional[datetime] = None,
) -> Payment:
    missing = []
    if is_blank(amount):
        missing.append("Amount")
    if not by_id:
        missing.append("Paid By")
    if not to_id:
        missing.append("Paid To")
    if missing:
        raise ValidationError("Payment: Missing required: " + ", ".join(missing), missing=missing)
    if by_id == to_id:
        raise ValidationError("Payment: Paid To must differ from Paid By")

    value = parse_amount(amount, label="Payment amount")
    if value <= 0:
        raise ValidationError("Payment amount must be greater than zero")

    known = {p.id for p in participants}
    unknown = [pid for pid in (by_id, to_id) if pid not in known]
    if unknown:
        raise ValidationError("Payment: unknown participant(s): " + ", ".join(unknown))

    return Payment(
        amount=value,
        by_id=by_id,
        to_id=to_id,
        created_at=created_at or datetime.now(timezone.utc),
    )
