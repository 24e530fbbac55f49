"""Customer payment API endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import (
    ERROR_RESPONSES,
    PaymentCreate,
    PaymentUpdate,
    operation_response,
)

router = APIRouter(prefix="/payments", tags=["payments"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_payment(
    actions: Actions,
    identity: CurrentIdentity,
    payload: PaymentCreate,
) -> JSONResponse:
    """Record a customer payment."""
    result = await actions.add_payment(identity, **payload.model_dump())
    return operation_response(result, status.HTTP_201_CREATED)


@router.patch("/{payment_id}")
async def update_payment(
    actions: Actions,
    identity: CurrentIdentity,
    payment_id: str,
    payload: PaymentUpdate,
) -> JSONResponse:
    """Partially update a customer payment."""
    fields = payload.model_dump(exclude_unset=True)
    return operation_response(await actions.update_payment(identity, payment_id, **fields))


@router.delete("/{payment_id}")
async def delete_payment(actions: Actions, identity: CurrentIdentity, payment_id: str) -> JSONResponse:
    """Delete a customer payment. Repeating the call succeeds with a warning."""
    return operation_response(await actions.delete_payment(identity, payment_id))
