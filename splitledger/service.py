import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from threading import Lock
from typing import Optional
from uuid import uuid4

from .audit import project_audit
from .balances import aggregate_balances, total_expense
from .config import Settings
from .errors import (
    PartialPersistenceError,
    StorageError,
    TrackerNotFoundError,
    ValidationError,
)
from .models import (
    AuditProjection,
    BalanceSnapshot,
    BalanceSummary,
    CreateExpenseRequest,
    CreatePaymentRequest,
    CreateTrackerRequest,
    Expense,
    ExpenseResponse,
    ExpenseSplit,
    Participant,
    PaymentResponse,
    SplitMode,
    Tracker,
    TrackerResponse,
)
from .money import parse_amount
from .payments import PaymentLog, build_payment
from .planner import plan_settlements
from .splits import compute_splits

logger = logging.getLogger(__name__)


class InMemoryStorage:
    """Stands in for the tracker, participant, expense and balance stores."""

    def __init__(self):
        self.trackers: dict[str, dict] = {}
        self.participants: dict[str, list[dict]] = defaultdict(list)
        self.expenses: dict[str, dict] = {}
        self.expense_splits: dict[str, list[dict]] = defaultdict(list)
        self.payment_logs: dict[str, PaymentLog] = {}

    def insert_tracker(self, tracker: dict, participants: list[dict]) -> None:
        self.trackers[tracker["id"]] = tracker
        self.participants[tracker["id"]] = participants

    def insert_expense(self, expense: dict) -> None:
        self.expenses[expense["id"]] = expense

    def insert_splits(self, splits: list[dict]) -> None:
        for split in splits:
            if split["expense_id"] not in self.expenses:
                raise StorageError(f"Expense {split['expense_id']} does not exist")
        for split in splits:
            self.expense_splits[split["expense_id"]].append(split)

    def list_expenses(self, tracker_id: str) -> list[dict]:
        rows = [(i, e) for i, e in enumerate(self.expenses.values()) if e["tracker_id"] == tracker_id]
        # Newest first; insertion order breaks timestamp ties.
        rows.sort(key=lambda item: (item[1]["created_at"], item[0]), reverse=True)
        return [e for _, e in rows]

    def tracker_balances(self, tracker_id: str) -> list[dict]:
        paid: dict[str, Decimal] = defaultdict(Decimal)
        owed: dict[str, Decimal] = defaultdict(Decimal)
        for expense in self.list_expenses(tracker_id):
            paid[expense["paid_by"]] += expense["amount"]
            for split in self.expense_splits.get(expense["id"], []):
                owed[split["participant_id"]] += split["share_amount"]
        return [
            {"participant_id": p["id"], "total_paid": paid[p["id"]], "total_owed": owed[p["id"]]}
            for p in self.participants.get(tracker_id, [])
        ]

    def payment_log(self, tracker_id: str) -> PaymentLog:
        return self.payment_logs.setdefault(tracker_id, PaymentLog())


class TrackerService:
    def __init__(self, storage: Optional[InMemoryStorage] = None, settings: Optional[Settings] = None):
        self.storage = storage or InMemoryStorage()
        self.settings = settings or Settings()
        self._payment_lock = Lock()

    def create_tracker(self, request: CreateTrackerRequest) -> TrackerResponse:
        missing = []
        if not request.name.strip():
            missing.append("Tracker name")
        names = [n.strip() for n in request.participant_names]
        if not names:
            missing.append("Number of participants")
        elif any(not n for n in names):
            missing.append("Participant name(s)")
        if missing:
            raise ValidationError("Missing required: " + ", ".join(missing), missing=missing)
        if len(names) > self.settings.max_participants:
            raise ValidationError(
                f"Number of participants must be between 1 and {self.settings.max_participants}"
            )

        tracker_data = {
            "id": str(uuid4()),
            "name": request.name.strip(),
            "description": request.description,
            "created_at": datetime.now(timezone.utc),
        }
        participant_data = [{"id": str(uuid4()), "name": n} for n in names]
        self.storage.insert_tracker(tracker_data, participant_data)
        logger.info("Created tracker %s with %d participants", tracker_data["id"], len(names))

        return TrackerResponse(
            tracker=Tracker(**tracker_data),
            participants=[Participant(**p) for p in participant_data],
        )

    def resolve_tracker(self, ref: str) -> Tracker:
        tracker_data = self.storage.trackers.get(ref)
        if tracker_data is None:
            tracker_data = next((t for t in self.storage.trackers.values() if t["name"] == ref), None)
        if tracker_data is None:
            raise TrackerNotFoundError(f"Tracker {ref} not found")
        return Tracker(**tracker_data)

    def list_trackers(self) -> list[Tracker]:
        return [Tracker(**t) for t in self.storage.trackers.values()]

    def list_participants(self, tracker_id: str) -> list[Participant]:
        self._require_tracker(tracker_id)
        return [Participant(**p) for p in self.storage.participants.get(tracker_id, [])]

    def preview_splits(self, tracker_id: str, request: CreateExpenseRequest) -> list[ExpenseSplit]:
        participants = self.list_participants(tracker_id)
        return compute_splits(
            request.amount, request.split_mode, participants, request.custom_shares,
            paid_by=request.paid_by or None,
        )

    def add_expense(self, tracker_id: str, request: CreateExpenseRequest) -> ExpenseResponse:
        participants = self.list_participants(tracker_id)
        missing = []
        if not request.description.strip():
            missing.append("Description")
        if not request.amount.strip():
            missing.append("Amount")
        if not request.paid_by:
            missing.append("Paid By")
        if not participants:
            missing.append("Participants")
        if request.split_mode == SplitMode.UNSET:
            missing.append("Split By")
        if missing:
            raise ValidationError("Missing required: " + ", ".join(missing), missing=missing)

        candidates = compute_splits(
            request.amount, request.split_mode, participants, request.custom_shares,
            paid_by=request.paid_by,
        )
        amount = parse_amount(request.amount)

        expense_data = {
            "id": str(uuid4()),
            "tracker_id": tracker_id,
            "description": request.description,
            "amount": amount,
            "paid_by": request.paid_by,
            "created_at": datetime.now(timezone.utc),
        }
        self.storage.insert_expense(expense_data)

        split_data = [
            {"expense_id": expense_data["id"], "participant_id": c.participant_id, "share_amount": c.share_amount}
            for c in candidates
        ]
        try:
            self.storage.insert_splits(split_data)
        except StorageError as e:
            logger.error("Splits for expense %s failed to persist: %s", expense_data["id"], e)
            raise PartialPersistenceError(expense_data["id"], str(e))

        logger.info("Added expense %s (%s) to tracker %s", expense_data["id"], amount, tracker_id)
        return ExpenseResponse(
            expense=Expense(**expense_data),
            splits=[ExpenseSplit(**s) for s in split_data],
            message="Expense and splits added",
        )

    def record_payment(self, tracker_id: str, request: CreatePaymentRequest) -> PaymentResponse:
        participants = self.list_participants(tracker_id)
        payment = build_payment(request.amount, request.paid_by, request.paid_to, participants)
        with self._payment_lock:
            self.storage.payment_log(tracker_id).append(payment)
        logger.info("Logged payment of %s from %s to %s", payment.amount, payment.by_id, payment.to_id)
        return PaymentResponse(payment=payment, message="Payment logged")

    def get_balance_snapshot(self, tracker_id: str) -> list[BalanceSnapshot]:
        self._require_tracker(tracker_id)
        return [BalanceSnapshot(**row) for row in self.storage.tracker_balances(tracker_id)]

    def get_balance_summary(self, tracker_id: str) -> BalanceSummary:
        participants = self.list_participants(tracker_id)
        snapshot = self.get_balance_snapshot(tracker_id)
        balances = aggregate_balances(snapshot, self.storage.payment_log(tracker_id), participants)
        return BalanceSummary(
            tracker_id=tracker_id,
            total_expense=total_expense(snapshot),
            balances=balances,
            settlements=plan_settlements(balances),
        )

    def get_audit(self, tracker_id: str) -> AuditProjection:
        participants = self.list_participants(tracker_id)
        expenses = [Expense(**e) for e in self.storage.list_expenses(tracker_id)]
        return project_audit(expenses, self.storage.payment_log(tracker_id), participants)

    def _require_tracker(self, tracker_id: str) -> None:
        if tracker_id not in self.storage.trackers:
            raise TrackerNotFoundError(f"Tracker {tracker_id} not found")
