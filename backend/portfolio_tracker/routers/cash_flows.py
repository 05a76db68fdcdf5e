# backend/portfolio_tracker/routers/cash_flows.py
"""Cash flow endpoints: deposits, withdrawals and net cash invested."""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_cash_ledger_service, get_user
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_WRITE
from portfolio_tracker.models import CashFlow, User
from portfolio_tracker.schemas.cash_flows import (
    CashFlowCreate,
    CashFlowResponse,
    CashFlowUpdate,
    NetCashResponse,
)
from portfolio_tracker.services.cash_ledger import CashLedgerService

router = APIRouter(
    prefix="/cash-flows",
    tags=["Cash Flows"],
)


@router.get("/", response_model=list[CashFlowResponse], summary="List cash flows")
def list_cash_flows(
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> list[CashFlow]:
    return service.list_cash_flows(db, user.id, list_id)


@router.post(
    "/",
    response_model=CashFlowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a deposit or withdrawal",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_cash_flow(
        request: Request,  # Required for rate limiting
        payload: CashFlowCreate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> CashFlow:
    return service.add_cash_flow(
        db,
        user.id,
        flow_type=payload.flow_type,
        amount=payload.amount,
        date=payload.date,
        description=payload.description,
        list_id=payload.list_id,
    )


@router.get("/total", response_model=NetCashResponse, summary="Net cash invested")
def get_net_cash_invested(
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> NetCashResponse:
    """Deposits minus withdrawals; may be negative."""
    return NetCashResponse(
        user_id=user.id,
        list_id=list_id,
        net_cash_invested=service.net_cash_invested(db, user.id, list_id),
    )


@router.get("/{cash_flow_id}", response_model=CashFlowResponse, summary="Get a cash flow")
def get_cash_flow(
        cash_flow_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> CashFlow:
    return service.get_cash_flow(db, user.id, cash_flow_id)


@router.patch("/{cash_flow_id}", response_model=CashFlowResponse, summary="Update a cash flow")
def update_cash_flow(
        cash_flow_id: int,
        payload: CashFlowUpdate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> CashFlow:
    return service.update_cash_flow(
        db,
        user.id,
        cash_flow_id,
        flow_type=payload.flow_type,
        amount=payload.amount,
        date=payload.date,
        description=payload.description,
        list_id=payload.list_id,
    )


@router.delete(
    "/{cash_flow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a cash flow",
)
def delete_cash_flow(
        cash_flow_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: CashLedgerService = Depends(get_cash_ledger_service),
) -> Response:
    service.delete_cash_flow(db, user.id, cash_flow_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
