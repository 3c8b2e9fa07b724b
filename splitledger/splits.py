"""
Split Calculator

Turns an expense amount, a split mode and optional per-participant custom
amounts into one ExpenseSplit candidate per participant, or rejects the input
with a ValidationError. Shares keep full Decimal precision; rounding is a
display concern only.
"""

from decimal import Decimal
from typing import Mapping, Optional, Sequence, Union

from .errors import ValidationError, SplitExceedsAmountError, SplitMismatchError
from .models import (
    ExpenseSplit,
    Participant,
    SplitMode,
    SPLIT_SUM_TOLERANCE,
    OVER_ALLOCATION_TOLERANCE,
)
from .money import AmountInput, is_blank, parse_amount, format_amount


def _coerce_mode(mode: Union[SplitMode, str, None]) -> SplitMode:
    if mode is None or mode == "" or mode == "blank":
        return SplitMode.UNSET
    try:
        return SplitMode(mode)
    except ValueError:
        raise ValidationError(f"Unknown split mode: {mode!r}")


def compute_splits(
    amount: AmountInput,
    mode: Union[SplitMode, str, None],
    participants: Sequence[Participant],
    custom_shares: Optional[Mapping[str, AmountInput]] = None,
    *,
    paid_by: Optional[str] = None,
) -> list[ExpenseSplit]:
    split_mode = _coerce_mode(mode)

    missing = []
    if is_blank(amount):
        missing.append("Amount")
    if not participants:
        missing.append("Participants")
    if split_mode == SplitMode.UNSET:
        missing.append("Split By")
    if missing:
        raise ValidationError("Missing required: " + ", ".join(missing), missing=missing)

    total_amount = parse_amount(amount)
    if total_amount <= 0:
        raise ValidationError(f"Amount must be greater than zero, got {format_amount(total_amount)}")

    if paid_by is not None and paid_by not in {p.id for p in participants}:
        raise ValidationError(f"Payer {paid_by!r} is not a participant of this tracker")

    if split_mode == SplitMode.EQUAL:
        share = total_amount / len(participants)
        return [ExpenseSplit(participant_id=p.id, share_amount=share) for p in participants]

    return _custom_splits(total_amount, participants, custom_shares or {})


def _custom_splits(
    total_amount: Decimal,
    participants: Sequence[Participant],
    custom_shares: Mapping[str, AmountInput],
) -> list[ExpenseSplit]:
    empty_for = [p.name for p in participants if is_blank(custom_shares.get(p.id))]
    if empty_for:
        raise ValidationError(
            "Missing custom split amount for: " + ", ".join(empty_for), missing=empty_for
        )

    shares = []
    for p in participants:
        share = parse_amount(custom_shares[p.id], label=f"Custom split amount for {p.name}")
        if share < 0:
            raise ValidationError(f"Custom split amount for {p.name} cannot be negative")
        shares.append((p, share))

    total = sum((share for _, share in shares), Decimal("0"))
    if total > total_amount + OVER_ALLOCATION_TOLERANCE:
        raise SplitExceedsAmountError(
            f"Custom split total ({format_amount(total)}) exceeds amount ({format_amount(total_amount)})"
        )
    if abs(total - total_amount) > SPLIT_SUM_TOLERANCE:
        raise SplitMismatchError(
            f"Custom split total ({format_amount(total)}) must equal amount ({format_amount(total_amount)})"
        )

    return [ExpenseSplit(participant_id=p.id, share_amount=share) for p, share in shares]


def preview_equal_share(amount: AmountInput, participants: Sequence[Participant]) -> Decimal:
    if not participants or is_blank(amount):
        return Decimal("0")
    try:
        value = parse_amount(amount)
    except ValidationError:
        return Decimal("0")
    return value / len(participants)
