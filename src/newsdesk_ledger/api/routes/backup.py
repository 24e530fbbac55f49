"""Backup export and restore endpoints (ADMIN only)."""

from typing import Annotated, Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from newsdesk_ledger.api.dependencies import Actions, CurrentIdentity
from newsdesk_ledger.api.schemas import ERROR_RESPONSES, operation_response

router = APIRouter(prefix="/backup", tags=["backup"], responses=ERROR_RESPONSES)


@router.get("")
async def export_backup(actions: Actions, identity: CurrentIdentity) -> JSONResponse:
    """Dump every collection as JSON."""
    return operation_response(await actions.export_backup(identity))


@router.post("/restore")
async def restore_backup(
    actions: Actions,
    identity: CurrentIdentity,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Upsert every record of a backup payload."""
    return operation_response(await actions.restore_backup(identity, payload))
