import pytest
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as SchemaError

from splitledger.errors import ValidationError
from splitledger.models import Participant, Payment
from splitledger.payments import PaymentLog, build_payment


PEOPLE = [Participant(id="a", name="Asha"), Participant(id="b", name="Ben")]


class RecordingSink:
    def __init__(self):
        self.saved = []

    def save(self, payment: Payment) -> None:
        self.saved.append(payment)


class FailingSink:
    def save(self, payment: Payment) -> None:
        raise RuntimeError("payment store unavailable")


class TestBuildPayment:
    """Tests for payment validation."""

    def test_valid_payment(self):
        payment = build_payment("20", "b", "a", PEOPLE)

        assert payment.amount == Decimal("20")
        assert payment.by_id == "b"
        assert payment.to_id == "a"
        assert payment.created_at.tzinfo is not None

    def test_missing_fields(self):
        with pytest.raises(ValidationError) as exc:
            build_payment("", "", "", PEOPLE)

        assert exc.value.missing == ["Amount", "Paid By", "Paid To"]
        assert str(exc.value).startswith("Payment: Missing required")

    def test_payee_must_differ(self):
        with pytest.raises(ValidationError, match="must differ"):
            build_payment("5", "a", "a", PEOPLE)

    def test_amount_must_be_positive_number(self):
        with pytest.raises(ValidationError):
            build_payment("five", "a", "b", PEOPLE)
        with pytest.raises(ValidationError):
            build_payment("-5", "a", "b", PEOPLE)

    def test_unknown_participant(self):
        with pytest.raises(ValidationError, match="unknown participant"):
            build_payment("5", "a", "zed", PEOPLE)

    def test_model_rejects_self_payment(self):
        with pytest.raises(SchemaError):
            Payment(amount=Decimal("1"), by_id="a", to_id="a", created_at=datetime.now(timezone.utc))

    def test_serialized_with_short_keys(self):
        payment = build_payment("3", "a", "b", PEOPLE)
        data = payment.model_dump(by_alias=True)

        assert data["byId"] == "a"
        assert data["toId"] == "b"


class TestPaymentLog:
    """Tests for the append-only log."""

    def test_append_keeps_order(self):
        log = PaymentLog()
        first = log.append(build_payment("1", "a", "b", PEOPLE))
        second = log.append(build_payment("2", "b", "a", PEOPLE))

        assert len(log) == 2
        assert list(log) == [first, second]
        assert log[1] is second

    def test_iteration_is_a_snapshot(self):
        log = PaymentLog([build_payment("1", "a", "b", PEOPLE)])
        seen = []
        for payment in log:
            seen.append(payment)
            if len(seen) == 1:
                log.append(build_payment("2", "b", "a", PEOPLE))

        assert len(seen) == 1
        assert len(log) == 2

    def test_rejected_by_sink_is_not_logged(self):
        log = PaymentLog(sink=FailingSink())

        with pytest.raises(RuntimeError):
            log.append(build_payment("20", "b", "a", PEOPLE))

        # A retry must not count the payment twice.
        assert len(log) == 0
        assert list(log) == []

    def test_sink_receives_appends(self):
        sink = RecordingSink()
        log = PaymentLog(sink=sink)
        payment = log.append(build_payment("4", "a", "b", PEOPLE))

        assert sink.saved == [payment]
