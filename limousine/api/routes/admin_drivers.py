"""
Admin driver management
=======================

POST /admin/driver/addRecord    -- create a driver
GET  /admin/driver/getAll       -- list drivers (optional status)
GET  /admin/driver/getById      -- one driver
POST /admin/driver/updateRecord -- patch a driver
POST /admin/driver/deleteById   -- remove a driver without bookings
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from limousine.api.dependencies import get_driver_accounts, require_admin
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    AddDriverRequest,
    DriverResponse,
    Envelope,
    MessageResponse,
    RecordIdRequest,
    UpdateDriverRequest,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.domain.enums import DriverStatus
from limousine.services.account_service import DriverAccounts

router = APIRouter(prefix="/admin/driver", tags=["admin - drivers"])


@router.post(
    "/addRecord",
    response_model=Envelope[DriverResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a driver",
)
@limiter.limit(settings.rate_limit)
async def add_record(
    request: Request,
    body: AddDriverRequest,
    actor: Actor = Depends(require_admin),
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    driver = await accounts.add(
        body.name,
        body.email,
        body.password,
        body.vehicle_details.model,
        body.vehicle_details.license_plate,
        status=body.status,
    )
    return Envelope(data=DriverResponse.model_validate(driver))


@router.get("/getAll", response_model=Envelope[list[DriverResponse]], summary="List drivers")
@limiter.limit(settings.rate_limit)
async def get_all(
    request: Request,
    status: Optional[DriverStatus] = None,
    actor: Actor = Depends(require_admin),
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    drivers = await accounts.list_all(status)
    return Envelope(data=[DriverResponse.model_validate(d) for d in drivers])


@router.get("/getById", response_model=Envelope[DriverResponse], summary="Get a driver")
@limiter.limit(settings.rate_limit)
async def get_by_id(
    request: Request,
    id: int,
    actor: Actor = Depends(require_admin),
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    driver = await accounts.get(id)
    return Envelope(data=DriverResponse.model_validate(driver))


@router.post(
    "/updateRecord",
    response_model=Envelope[DriverResponse],
    summary="Update a driver",
)
@limiter.limit(settings.rate_limit)
async def update_record(
    request: Request,
    body: UpdateDriverRequest,
    actor: Actor = Depends(require_admin),
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    patch = body.model_dump(
        exclude={"record_id", "vehicle_details"}, exclude_none=True
    )
    if body.vehicle_details is not None:
        patch["vehicle_model"] = body.vehicle_details.model
        patch["license_plate"] = body.vehicle_details.license_plate
    driver = await accounts.update(body.record_id, **patch)
    return Envelope(data=DriverResponse.model_validate(driver))


@router.post("/deleteById", response_model=MessageResponse, summary="Delete a driver")
@limiter.limit(settings.rate_limit)
async def delete_by_id(
    request: Request,
    body: RecordIdRequest,
    actor: Actor = Depends(require_admin),
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    await accounts.delete(body.record_id)
    return MessageResponse(message="Driver deleted successfully")
