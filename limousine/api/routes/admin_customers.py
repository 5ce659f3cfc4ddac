"""
Admin customer management
=========================

GET  /admin/customer/getAll       -- list customers
GET  /admin/customer/getById      -- one customer
POST /admin/customer/updateRecord -- patch a customer
POST /admin/customer/deleteById   -- remove a customer without history
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_customer_accounts, require_admin
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    CustomerResponse,
    Envelope,
    MessageResponse,
    RecordIdRequest,
    UpdateCustomerRequest,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.services.account_service import CustomerAccounts

router = APIRouter(prefix="/admin/customer", tags=["admin - customers"])


@router.get(
    "/getAll", response_model=Envelope[list[CustomerResponse]], summary="List customers"
)
@limiter.limit(settings.rate_limit)
async def get_all(
    request: Request,
    actor: Actor = Depends(require_admin),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    customers = await accounts.list_all()
    return Envelope(data=[CustomerResponse.model_validate(c) for c in customers])


@router.get("/getById", response_model=Envelope[CustomerResponse], summary="Get a customer")
@limiter.limit(settings.rate_limit)
async def get_by_id(
    request: Request,
    id: int,
    actor: Actor = Depends(require_admin),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    customer = await accounts.get(id)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "/updateRecord", response_model=Envelope[CustomerResponse], summary="Update a customer"
)
@limiter.limit(settings.rate_limit)
async def update_record(
    request: Request,
    body: UpdateCustomerRequest,
    actor: Actor = Depends(require_admin),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    patch = body.model_dump(exclude={"record_id"}, exclude_none=True)
    customer = await accounts.update(body.record_id, **patch)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post("/deleteById", response_model=MessageResponse, summary="Delete a customer")
@limiter.limit(settings.rate_limit)
async def delete_by_id(
    request: Request,
    body: RecordIdRequest,
    actor: Actor = Depends(require_admin),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    await accounts.delete(body.record_id)
    return MessageResponse(message="Customer deleted successfully")
