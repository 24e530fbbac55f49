"""Notification campaign API endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import (
    ERROR_RESPONSES,
    NotificationCreate,
    SettleRequest,
    TogglePayoutRequest,
    operation_response,
)

router = APIRouter(prefix="/notifications", tags=["notifications"], responses=ERROR_RESPONSES)


@router.get("")
async def list_notifications(actions: Actions, identity: CurrentIdentity) -> JSONResponse:
    """List campaigns, newest first."""
    return operation_response(await actions.list_notifications(identity))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification(
    actions: Actions,
    identity: CurrentIdentity,
    payload: NotificationCreate,
) -> JSONResponse:
    """Create a campaign."""
    result = await actions.create_notification(identity, **payload.model_dump())
    return operation_response(result, status.HTTP_201_CREATED)


@router.post("/settle")
async def settle_sends(actions: Actions, identity: CurrentIdentity, payload: SettleRequest) -> JSONResponse:
    """Mark every unpaid send of a staff member as paid."""
    result = await actions.settle_sends(identity, payload.user_name, payload.employee_payment_id)
    return operation_response(result)


@router.post("/{notification_id}/send")
async def record_send(actions: Actions, identity: CurrentIdentity, notification_id: str) -> JSONResponse:
    """Record one send of the campaign."""
    return operation_response(await actions.record_send(identity, notification_id))


@router.post("/{notification_id}/toggle-payout")
async def toggle_payout(
    actions: Actions,
    identity: CurrentIdentity,
    notification_id: str,
    payload: TogglePayoutRequest,
) -> JSONResponse:
    """Flip the paid flag of one history entry."""
    return operation_response(await actions.toggle_payout(identity, notification_id, payload.timestamp))


@router.post("/{notification_id}/archive")
async def toggle_archive(actions: Actions, identity: CurrentIdentity, notification_id: str) -> JSONResponse:
    return operation_response(await actions.toggle_archive(identity, notification_id))


@router.delete("/{notification_id}")
async def delete_notification(
    actions: Actions,
    identity: CurrentIdentity,
    notification_id: str,
) -> JSONResponse:
    """Delete a campaign (ADMIN or CHIEF_EDITOR)."""
    return operation_response(await actions.delete_notification(identity, notification_id))
