"""Business data endpoint."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import ERROR_RESPONSES, operation_response

router = APIRouter(prefix="/business", tags=["business"], responses=ERROR_RESPONSES)


@router.get("")
async def get_business_data(actions: Actions, identity: CurrentIdentity) -> JSONResponse:
    """Orders, payments, ledger entries and staff, with resolved names."""
    return operation_response(await actions.get_business_data(identity))
