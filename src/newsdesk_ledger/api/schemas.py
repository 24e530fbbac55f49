"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from newsdesk_ledger.actions import OperationResult

# Identifiers are plain strings; a malformed id is reported by the services
# as INVALID_IDENTIFIER.


# ============================================================================
# Operation result
# ============================================================================


class OperationResponse(BaseModel):
    """Body returned by every ledger operation."""

    success: bool
    error: str | None = None
    code: str | None = None
    warning: str | None = None
    data: Any = None


STATUS_BY_CODE = {
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_IDENTIFIER": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
}

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": OperationResponse} for code in (400, 401, 403, 404, 500)
}


def operation_response(
    result: OperationResult,
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Map an OperationResult onto an HTTP response."""
    if result.success:
        status_code = success_status
    else:
        status_code = STATUS_BY_CODE.get(result.code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status_code, content=result.to_dict())


# ============================================================================
# Order schemas
# ============================================================================


class OrderCreate(BaseModel):
    """Schema for creating an order."""

    client: str
    description: str = ""
    total_price: Decimal = Decimal("0")
    quantity: int = 1
    package_type: str | None = None
    employee: str | None = None
    employee_id: str | None = None
    notes: str | None = None


class OrderStatusUpdate(BaseModel):
    """Schema for changing an order status."""

    status: str


# ============================================================================
# Payment schemas
# ============================================================================


class EmployeePaymentCreate(BaseModel):
    """Schema for recording an employee payout."""

    order_id: str
    amount: Decimal
    payment_date: date
    payment_method: str
    notes: str | None = None
    employee_name: str | None = None
    target_employee_id: str | None = None


class PaymentCreate(BaseModel):
    """Schema for recording a customer payment."""

    order_id: str
    amount: Decimal
    payment_date: date
    payment_method: str
    received_by: str | None = None
    receipt_number: str | None = None
    notes: str | None = None


class PaymentUpdate(BaseModel):
    """Partial update of a customer payment. Only set fields are applied."""

    amount: Decimal | None = None
    payment_date: date | None = None
    payment_method: str | None = None
    received_by: str | None = None
    receipt_number: str | None = None
    notes: str | None = None


# ============================================================================
# Ledger schemas
# ============================================================================


class TransactionCreate(BaseModel):
    """Schema for a manual ledger entry."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    amount: Decimal
    description: str
    entry_date: date = Field(alias="date")
    category: str | None = None
    order_id: str | None = None


class TransactionUpdate(BaseModel):
    """Partial update of a ledger entry."""

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    amount: Decimal | None = None
    description: str | None = None
    entry_date: date | None = Field(default=None, alias="date")
    category: str | None = None


# ============================================================================
# Notification schemas
# ============================================================================


class NotificationCreate(BaseModel):
    """Schema for creating a notification campaign."""

    customer: str
    ad_text: str
    quantity: int
    start_date: date
    end_date: date


class TogglePayoutRequest(BaseModel):
    """Identifies one history entry by its send timestamp."""

    timestamp: str


class SettleRequest(BaseModel):
    """Settle every unpaid send of one staff member."""

    user_name: str
    employee_payment_id: str | None = None
