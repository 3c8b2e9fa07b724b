from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


# Tolerances are part of the observable contract.
BALANCE_TOLERANCE = Decimal("0.0001")
SPLIT_SUM_TOLERANCE = Decimal("0.001")
OVER_ALLOCATION_TOLERANCE = Decimal("0.0001")


class SplitMode(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"
    UNSET = "unset"


class Participant(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Tracker(BaseModel):
    id: str
    name: str
    description: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Expense(BaseModel):
    id: str
    tracker_id: str
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    paid_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseSplit(BaseModel):
    expense_id: Optional[str] = None
    participant_id: str
    share_amount: Decimal = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class Payment(BaseModel):
    amount: Decimal = Field(..., gt=0)
    by_id: str = Field(..., alias="byId")
    to_id: str = Field(..., alias="toId")
    created_at: datetime

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def _distinct_parties(self) -> "Payment":
        if self.by_id == self.to_id:
            raise ValueError("payment payee must differ from payer")
        return self


class BalanceSnapshot(BaseModel):
    participant_id: str
    total_paid: Decimal = Decimal("0")
    total_owed: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("total_paid", "total_owed", mode="before")
    @classmethod
    def _null_is_zero(cls, value):
        if value is None or value == "":
            return Decimal("0")
        return value


class NetBalance(BaseModel):
    participant_id: str
    name: str
    total_paid: Decimal
    total_owed: Decimal
    delta: Decimal
    effective_paid: Decimal
    effective_owed: Decimal
    net: Decimal

    def is_creditor(self) -> bool:
        return self.net > BALANCE_TOLERANCE

    def is_debtor(self) -> bool:
        return self.net < -BALANCE_TOLERANCE

    def is_settled(self) -> bool:
        return not self.is_creditor() and not self.is_debtor()


class Settlement(BaseModel):
    from_participant: Participant = Field(..., alias="from")
    to: Participant
    amount: Decimal = Field(..., gt=0)

    model_config = ConfigDict(populate_by_name=True)


class AuditExpenseRow(BaseModel):
    timestamp: str
    payer: str
    description: str
    amount: Decimal


class AuditPaymentRow(BaseModel):
    timestamp: str
    from_label: str
    to_label: str
    amount: Decimal


class AuditProjection(BaseModel):
    expense_rows: list[AuditExpenseRow]
    payment_rows: list[AuditPaymentRow]


class BalanceSummary(BaseModel):
    tracker_id: str
    total_expense: Decimal
    balances: list[NetBalance]
    settlements: list[Settlement]


class CreateTrackerRequest(BaseModel):
    name: str
    description: str = ""
    participant_names: list[str] = Field(default_factory=list)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Goa trip",
            "description": "Flights, villa and food",
            "participant_names": ["Asha", "Ben", "Chen"]
        }
    })


class CreateExpenseRequest(BaseModel):
    description: str = ""
    amount: str = Field(..., description="Amount as typed by the user")
    paid_by: str = ""
    split_mode: SplitMode = SplitMode.UNSET
    custom_shares: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "description": "Dinner",
            "amount": "90",
            "paid_by": "participant-id",
            "split_mode": "equal"
        }
    })


class CreatePaymentRequest(BaseModel):
    amount: str
    paid_by: str = ""
    paid_to: str = ""


class TrackerResponse(BaseModel):
    tracker: Tracker
    participants: list[Participant]


class ExpenseResponse(BaseModel):
    expense: Expense
    splits: list[ExpenseSplit]
    message: str


class PaymentResponse(BaseModel):
    payment: Payment
    message: str
