from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging
from .errors import (
    DataError,
    PartialPersistenceError,
    StorageError,
    TrackerNotFoundError,
    ValidationError,
)
from .models import (
    AuditProjection,
    BalanceSummary,
    CreateExpenseRequest,
    CreatePaymentRequest,
    CreateTrackerRequest,
    ExpenseResponse,
    ExpenseSplit,
    Participant,
    PaymentResponse,
    Tracker,
    TrackerResponse,
)
from .service import TrackerService

settings = Settings.from_env()
configure_logging(settings)

app = FastAPI(
    title="Split Ledger API",
    description="Shared expense tracking with splits, logged payments and settlement plans",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

tracker_service = TrackerService(settings=settings)


def _not_found(e: TrackerNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "split-ledger"}


@app.post("/trackers", response_model=TrackerResponse, status_code=status.HTTP_201_CREATED, tags=["Trackers"])
def create_tracker(request: CreateTrackerRequest) -> TrackerResponse:
    try:
        return tracker_service.create_tracker(request)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/trackers", response_model=list[Tracker], tags=["Trackers"])
def list_trackers() -> list[Tracker]:
    return tracker_service.list_trackers()


@app.get("/trackers/{tracker_ref}", response_model=Tracker, tags=["Trackers"])
def get_tracker(tracker_ref: str) -> Tracker:
    try:
        return tracker_service.resolve_tracker(tracker_ref)
    except TrackerNotFoundError as e:
        raise _not_found(e)


@app.get("/trackers/{tracker_id}/participants", response_model=list[Participant], tags=["Trackers"])
def list_participants(tracker_id: str) -> list[Participant]:
    try:
        return tracker_service.list_participants(tracker_id)
    except TrackerNotFoundError as e:
        raise _not_found(e)


@app.post("/trackers/{tracker_id}/splits/preview", response_model=list[ExpenseSplit], tags=["Expenses"])
def preview_splits(tracker_id: str, request: CreateExpenseRequest) -> list[ExpenseSplit]:
    try:
        return tracker_service.preview_splits(tracker_id, request)
    except TrackerNotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.post("/trackers/{tracker_id}/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED, tags=["Expenses"])
def add_expense(tracker_id: str, request: CreateExpenseRequest) -> ExpenseResponse:
    try:
        return tracker_service.add_expense(tracker_id, request)
    except TrackerNotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PartialPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(e), "expense_id": e.expense_id},
        )
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Expense was not saved: {e}")


@app.post("/trackers/{tracker_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED, tags=["Payments"])
def record_payment(tracker_id: str, request: CreatePaymentRequest) -> PaymentResponse:
    try:
        return tracker_service.record_payment(tracker_id, request)
    except TrackerNotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/trackers/{tracker_id}/balances", response_model=BalanceSummary, tags=["Balances"])
def get_balances(tracker_id: str) -> BalanceSummary:
    try:
        return tracker_service.get_balance_summary(tracker_id)
    except TrackerNotFoundError as e:
        raise _not_found(e)
    except DataError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@app.get("/trackers/{tracker_id}/audit", response_model=AuditProjection, tags=["Audit"])
def get_audit(tracker_id: str) -> AuditProjection:
    try:
        return tracker_service.get_audit(tracker_id)
    except TrackerNotFoundError as e:
        raise _not_found(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
