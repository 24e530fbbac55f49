"""API routes."""

from newsdesk_ledger.api.routes.backup import router as backup_router
from newsdesk_ledger.api.routes.business import router as business_router
from newsdesk_ledger.api.routes.employee_payments import router as employee_payments_router
from newsdesk_ledger.api.routes.health import router as health_router
from newsdesk_ledger.api.routes.notifications import router as notifications_router
from newsdesk_ledger.api.routes.orders import router as orders_router
from newsdesk_ledger.api.routes.payments import router as payments_router
from newsdesk_ledger.api.routes.transactions import router as transactions_router

__all__ = [
    "backup_router",
    "business_router",
    "employee_payments_router",
    "health_router",
    "notifications_router",
    "orders_router",
    "payments_router",
    "transactions_router",
]

# Routers mounted under /api/v1
API_ROUTERS = (
    orders_router,
    employee_payments_router,
    payments_router,
    transactions_router,
    notifications_router,
    business_router,
    backup_router,
)
