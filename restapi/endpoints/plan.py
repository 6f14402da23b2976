"""Plan endpoints for the API."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ValidationError
from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.plan import schemas
from components.plan.csv_import import parse_plans_csv
from components.plan.repository import PlanRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/plans",
    tags=["plans"],
    responses={404: {"description": "Not found"}},
)


def get_plan_repository(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PlanRepository:
    return PlanRepository(db, current_user.id)


def _to_schemas(db_plans) -> List[schemas.Plan]:
    return [schemas.Plan.model_validate(db_plan) for db_plan in db_plans]


@router.get("", response_model=ApiResponse[List[schemas.Plan]])
async def list_plans(repo: PlanRepository = Depends(get_plan_repository)):
    """Get every plan of the current user, oldest first."""
    return ApiResponse(success=True, data=_to_schemas(await repo.get_all()))


@router.post("", response_model=ApiResponse[schemas.Plan], status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_in: schemas.PlanCreate,
    repo: PlanRepository = Depends(get_plan_repository),
):
    db_plan = await repo.create(plan_in)
    return ApiResponse(success=True, data=schemas.Plan.model_validate(db_plan))


@router.post("/bulk", response_model=ApiResponse[List[schemas.Plan]], status_code=status.HTTP_201_CREATED)
async def bulk_save_plans(
    bulk_in: schemas.BulkPlans,
    repo: PlanRepository = Depends(get_plan_repository),
):
    """
    Upsert several plans at once.

    Entries with an id update that plan or create it under that id; entries
    without one are created. Nothing is saved if any entry fails.
    """
    saved = await repo.bulk_save(bulk_in.plans)
    return ApiResponse(success=True, data=_to_schemas(saved))


@router.post("/import", response_model=ApiResponse[List[schemas.Plan]], status_code=status.HTTP_201_CREATED)
async def import_plans(
    file: UploadFile = File(...),
    repo: PlanRepository = Depends(get_plan_repository),
):
    """
    Import plans from a CSV file.

    The header row must contain planName, totalAmount and monthlyPayment;
    id, numberOfMonths, debtOwner and isActive are optional. Rows are saved
    through the bulk upsert, so either every row is imported or none is.
    """
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise ValidationError("Invalid file format. Only CSV files (.csv) are supported.")

    items, errors = parse_plans_csv(await file.read())
    if errors:
        raise ValidationError(
            f"{len(errors)} invalid row(s) in {file.filename}",
            violations=[{"field": f"row {error.row}", "message": error.message} for error in errors],
        )
    if not items:
        raise ValidationError("The file contains no plans")

    saved = await repo.bulk_save(items)
    return ApiResponse(success=True, data=_to_schemas(saved), message=f"Imported {len(saved)} plans")


@router.get("/{plan_id}", response_model=ApiResponse[schemas.Plan])
async def get_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    return ApiResponse(success=True, data=schemas.Plan.model_validate(await repo.get(plan_id)))


@router.put("/{plan_id}", response_model=ApiResponse[schemas.Plan])
async def update_plan(
    plan_id: str,
    plan_in: schemas.PlanUpdate,
    repo: PlanRepository = Depends(get_plan_repository),
):
    """Update the fields present in the body; absent fields are kept."""
    db_plan = await repo.update(plan_id, plan_in)
    return ApiResponse(success=True, data=schemas.Plan.model_validate(db_plan))


@router.delete("/{plan_id}", response_model=ApiResponse)
async def delete_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    await repo.delete(plan_id)
    return ApiResponse(success=True, message="Plan deleted successfully")
