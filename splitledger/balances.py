"""
Balance Aggregator

Folds the session payment log into a Balance Store snapshot. A payment raises
the payer's effective contribution and lowers the payee's by the same amount,
so the sum of net positions stays at zero.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Sequence, Union

from pydantic import ValidationError as SchemaError

from .errors import DataError
from .models import BalanceSnapshot, NetBalance, Participant, Payment

SnapshotRow = Union[BalanceSnapshot, Mapping]


def _load_row(row: SnapshotRow) -> BalanceSnapshot:
    if isinstance(row, BalanceSnapshot):
        return row
    try:
        return BalanceSnapshot.model_validate(row)
    except SchemaError as e:
        raise DataError(f"Malformed balance snapshot row {row!r}: {e}")


def load_snapshot(snapshot: Iterable[SnapshotRow]) -> list[BalanceSnapshot]:
    return [_load_row(row) for row in snapshot]


def payment_delta(participant_id: str, payment_log: Iterable[Payment]) -> Decimal:
    delta = Decimal("0")
    for payment in payment_log:
        if payment.by_id == participant_id:
            delta += payment.amount
        elif payment.to_id == participant_id:
            delta -= payment.amount
    return delta


def aggregate_balances(
    snapshot: Iterable[SnapshotRow],
    payment_log: Iterable[Payment],
    participants: Sequence[Participant],
) -> list[NetBalance]:
    rows = load_snapshot(snapshot)
    payments = list(payment_log)
    names = {p.id: p.name for p in participants}

    seen = {row.participant_id for row in rows}
    rows.extend(BalanceSnapshot(participant_id=p.id) for p in participants if p.id not in seen)

    balances = []
    for row in rows:
        delta = payment_delta(row.participant_id, payments)
        effective_paid = row.total_paid + delta
        balances.append(NetBalance(
            participant_id=row.participant_id,
            name=names.get(row.participant_id, row.participant_id),
            total_paid=row.total_paid,
            total_owed=row.total_owed,
            delta=delta,
            effective_paid=effective_paid,
            effective_owed=row.total_owed,
            net=effective_paid - row.total_owed,
        ))
    return balances


def total_expense(snapshot: Iterable[SnapshotRow]) -> Decimal:
    return sum((row.total_owed for row in load_snapshot(snapshot)), Decimal("0"))
