"""Employee payout API endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import ERROR_RESPONSES, EmployeePaymentCreate, operation_response

router = APIRouter(prefix="/employee-payments", tags=["employee-payments"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_employee_payment(
    actions: Actions,
    identity: CurrentIdentity,
    payload: EmployeePaymentCreate,
) -> JSONResponse:
    """Record a payout, bump the order total and post the EXPENSE entry."""
    result = await actions.add_employee_payment(identity, **payload.model_dump())
    return operation_response(result, status.HTTP_201_CREATED)


@router.delete("/{employee_payment_id}")
async def delete_employee_payment(
    actions: Actions,
    identity: CurrentIdentity,
    employee_payment_id: str,
) -> JSONResponse:
    """Delete a payout and post the compensating INCOME entry."""
    return operation_response(await actions.delete_employee_payment(identity, employee_payment_id))
