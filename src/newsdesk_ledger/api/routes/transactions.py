"""Manual ledger entry API endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import (
    ERROR_RESPONSES,
    TransactionCreate,
    TransactionUpdate,
    operation_response,
)

router = APIRouter(prefix="/transactions", tags=["transactions"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    actions: Actions,
    identity: CurrentIdentity,
    payload: TransactionCreate,
) -> JSONResponse:
    """Create a manual ledger entry (ADMIN or CHIEF_EDITOR)."""
    result = await actions.create_transaction(identity, **payload.model_dump(by_alias=True))
    return operation_response(result, status.HTTP_201_CREATED)


@router.patch("/{transaction_id}")
async def update_transaction(
    actions: Actions,
    identity: CurrentIdentity,
    transaction_id: str,
    payload: TransactionUpdate,
) -> JSONResponse:
    """Partially update a ledger entry (ADMIN or CHIEF_EDITOR)."""
    fields = payload.model_dump(exclude_unset=True, by_alias=True)
    return operation_response(await actions.update_transaction(identity, transaction_id, **fields))


@router.delete("/{transaction_id}")
async def delete_transaction(
    actions: Actions,
    identity: CurrentIdentity,
    transaction_id: str,
) -> JSONResponse:
    """Delete a ledger entry (ADMIN or CHIEF_EDITOR)."""
    return operation_response(await actions.delete_transaction(identity, transaction_id))
