"""
Unit Tests for the Split Calculator

Tests cover:
1. Required-field validation
2. Equal split precision
3. Custom split over-allocation and mismatch checks
4. Payer membership
"""

import pytest
from decimal import Decimal

from splitledger.errors import ValidationError, SplitExceedsAmountError, SplitMismatchError
from splitledger.models import Participant, SplitMode
from splitledger.splits import compute_splits, preview_equal_share


A = Participant(id="a", name="Asha")
B = Participant(id="b", name="Ben")
C = Participant(id="c", name="Chen")


class TestRequiredFields:
    """Inputs that are missing or unusable."""

    def test_blank_amount_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            compute_splits("   ", SplitMode.EQUAL, [A, B])
        assert exc.value.missing == ["Amount"]

    def test_missing_fields_are_reported_together(self):
        with pytest.raises(ValidationError) as exc:
            compute_splits("", SplitMode.UNSET, [])
        assert exc.value.missing == ["Amount", "Participants", "Split By"]
        assert str(exc.value) == "Missing required: Amount, Participants, Split By"

    def test_unset_mode_is_rejected(self):
        with pytest.raises(ValidationError, match="Split By"):
            compute_splits("10", "unset", [A])

    def test_non_numeric_amount_is_rejected(self):
        with pytest.raises(ValidationError, match="must be a number"):
            compute_splits("ten", SplitMode.EQUAL, [A, B])

    def test_non_finite_amount_is_rejected(self):
        with pytest.raises(ValidationError):
            compute_splits("NaN", SplitMode.EQUAL, [A, B])

    def test_zero_amount_is_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            compute_splits("0", SplitMode.EQUAL, [A, B])

    def test_unknown_mode_string_is_rejected(self):
        with pytest.raises(ValidationError, match="Unknown split mode"):
            compute_splits("10", "percent", [A, B])

    def test_payer_must_be_a_participant(self):
        with pytest.raises(ValidationError, match="not a participant"):
            compute_splits("10", SplitMode.EQUAL, [A, B], paid_by="z")


class TestEqualSplit:
    """Tests for equal splits."""

    def test_three_way_split_of_ninety(self):
        splits = compute_splits("90", SplitMode.EQUAL, [A, B, C], paid_by="a")

        assert [s.participant_id for s in splits] == ["a", "b", "c"]
        assert [s.share_amount for s in splits] == [Decimal("30")] * 3
        assert all(s.expense_id is None for s in splits)

    def test_shares_are_not_rounded(self):
        splits = compute_splits("100", "equal", [A, B, C])

        # Each share keeps full precision; only display rounds.
        assert splits[0].share_amount != Decimal("33.33")
        total = sum(s.share_amount for s in splits)
        assert abs(total - Decimal("100")) < Decimal("1e-9")

    @pytest.mark.parametrize("amount,count", [("0.01", 3), ("7", 6), ("1234.56", 7), ("99.99", 9)])
    def test_sum_matches_amount(self, amount, count):
        people = [Participant(id=str(i), name=f"P{i}") for i in range(count)]
        splits = compute_splits(amount, SplitMode.EQUAL, people)
        assert abs(sum(s.share_amount for s in splits) - Decimal(amount)) < Decimal("1e-9")

    def test_preview_share(self):
        assert preview_equal_share("90", [A, B, C]) == Decimal("30")
        assert preview_equal_share("", [A, B, C]) == Decimal("0")
        assert preview_equal_share("abc", [A, B]) == Decimal("0")
        assert preview_equal_share("10", []) == Decimal("0")


class TestCustomSplit:
    """Tests for custom splits."""

    def test_exact_custom_split(self):
        splits = compute_splits("100", SplitMode.CUSTOM, [A, B, C], {"a": "50", "b": "50", "c": "0"})

        assert [s.share_amount for s in splits] == [Decimal("50"), Decimal("50"), Decimal("0")]
        assert splits[2].participant_id == "c"

    def test_missing_candidates_are_named(self):
        with pytest.raises(ValidationError) as exc:
            compute_splits("100", SplitMode.CUSTOM, [A, B, C], {"a": "100", "b": " "})

        assert "Missing custom split amount for: Ben, Chen" in str(exc.value)
        assert exc.value.missing == ["Ben", "Chen"]

    def test_non_numeric_candidate_is_rejected(self):
        with pytest.raises(ValidationError, match="Ben"):
            compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "50", "b": "fifty"})

    def test_negative_candidate_is_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "110", "b": "-10"})

    def test_under_allocation_reports_must_equal(self):
        p1 = Participant(id="p1", name="P1")
        p2 = Participant(id="p2", name="P2")

        with pytest.raises(SplitMismatchError) as exc:
            compute_splits("100", SplitMode.CUSTOM, [p1, p2], {"p1": "40", "p2": "59"})

        assert "must equal" in str(exc.value)
        assert "exceeds" not in str(exc.value)

    def test_over_allocation_reports_exceeds(self):
        with pytest.raises(SplitExceedsAmountError) as exc:
            compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "60", "b": "50"})

        assert "exceeds" in str(exc.value)
        assert isinstance(exc.value, ValidationError)

    def test_small_excess_beyond_upper_bound_is_exceeds(self):
        # 0.0005 over: past the 1e-4 upper bound, though within the 1e-3 equality tolerance.
        with pytest.raises(SplitExceedsAmountError):
            compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "50.0005", "b": "50"})

    def test_tolerances_accept_tiny_differences(self):
        under = compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "49.9995", "b": "50"})
        over = compute_splits("100", SplitMode.CUSTOM, [A, B], {"a": "50.00005", "b": "50"})

        assert len(under) == 2
        assert len(over) == 2

    def test_numeric_candidates_are_accepted(self):
        splits = compute_splits(Decimal("30"), SplitMode.CUSTOM, [A, B], {"a": 10, "b": Decimal("20")})
        assert [s.share_amount for s in splits] == [Decimal("10"), Decimal("20")]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
