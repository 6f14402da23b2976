"""Payment status and totals endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.payment import schemas
from components.payment.repository import PaymentRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/plans",
    tags=["payments"],
    responses={404: {"description": "Plan not found"}},
)


def get_payment_repository(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentRepository:
    return PaymentRepository(db, current_user.id)


@router.get("/{plan_id}/payments", response_model=ApiResponse[List[schemas.PaymentStatusEntry]])
async def get_payment_status(plan_id: str, repo: PaymentRepository = Depends(get_payment_repository)):
    """Get the payment entries of a plan ordered by month index."""
    rows = await repo.get_status(plan_id)
    return ApiResponse(success=True, data=[schemas.PaymentStatusEntry.model_validate(row) for row in rows])


@router.put("/{plan_id}/payments", response_model=ApiResponse[List[schemas.PaymentStatusEntry]])
async def save_payment_status(
    plan_id: str,
    status_in: schemas.PaymentStatusUpdate,
    repo: PaymentRepository = Depends(get_payment_repository),
):
    """Replace every payment entry of a plan."""
    rows = await repo.replace_status(plan_id, status_in.status)
    return ApiResponse(success=True, data=[schemas.PaymentStatusEntry.model_validate(row) for row in rows])


@router.delete("/{plan_id}/payments", response_model=ApiResponse)
async def delete_payment_data(plan_id: str, repo: PaymentRepository = Depends(get_payment_repository)):
    """Delete payment entries and totals of a plan."""
    await repo.delete_payment_data(plan_id)
    return ApiResponse(success=True, message="Payment data deleted successfully")


@router.get("/{plan_id}/totals", response_model=ApiResponse[Optional[schemas.PaymentTotals]])
async def get_payment_totals(plan_id: str, repo: PaymentRepository = Depends(get_payment_repository)):
    db_totals = await repo.get_totals(plan_id)
    data = schemas.PaymentTotals.model_validate(db_totals) if db_totals is not None else None
    return ApiResponse(success=True, data=data)


@router.put("/{plan_id}/totals", response_model=ApiResponse[schemas.PaymentTotals])
async def save_payment_totals(
    plan_id: str,
    totals_in: schemas.PaymentTotals,
    repo: PaymentRepository = Depends(get_payment_repository),
):
    db_totals = await repo.save_totals(plan_id, totals_in)
    return ApiResponse(success=True, data=schemas.PaymentTotals.model_validate(db_totals))
