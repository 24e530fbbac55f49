"""Order API endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import (
    ERROR_RESPONSES,
    OrderCreate,
    OrderStatusUpdate,
    operation_response,
)

router = APIRouter(prefix="/orders", tags=["orders"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    actions: Actions,
    identity: CurrentIdentity,
    payload: OrderCreate,
) -> JSONResponse:
    """Create a new order in PENDING status."""
    result = await actions.create_order(identity, **payload.model_dump())
    return operation_response(result, status.HTTP_201_CREATED)


@router.get("/{order_id}")
async def get_order(actions: Actions, identity: CurrentIdentity, order_id: str) -> JSONResponse:
    """Get an order by id."""
    return operation_response(await actions.get_order(identity, order_id))


@router.patch("/{order_id}/status")
async def update_order_status(
    actions: Actions,
    identity: CurrentIdentity,
    order_id: str,
    payload: OrderStatusUpdate,
) -> JSONResponse:
    """Change the order status."""
    return operation_response(await actions.update_order_status(identity, order_id, payload.status))


@router.get("/{order_id}/verify")
async def verify_order(actions: Actions, identity: CurrentIdentity, order_id: str) -> JSONResponse:
    """Check the stored payout total against the payout rows."""
    return operation_response(await actions.verify_order(identity, order_id))


@router.post("/{order_id}/repair")
async def repair_order(actions: Actions, identity: CurrentIdentity, order_id: str) -> JSONResponse:
    """Recompute the stored payout total (ADMIN only)."""
    return operation_response(await actions.repair_order(identity, order_id))
