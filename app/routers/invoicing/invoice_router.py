from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.integrations.invoiced_client import InvoicedClient, get_invoiced_client
from app.utils.check_roles import require_role
from app.utils.response import success_response, partial_success_response, APIResponse

from app.services.invoicing.invoice_service import (
    generate_invoice,
    sync_invoiced_customer,
)

from app.schemas.invoicing.invoice_schemas import (
    InvoiceClientRequest,
    GeneratedInvoiceOut,
    InvoicedCustomerOut,
)

router = APIRouter(
    prefix="/api/admin",
    tags=["Invoicing"],
)


# =====================================================
# GENERATE INVOICE
# =====================================================
@router.post(
    "/generate-invoice",
    response_model=APIResponse[GeneratedInvoiceOut],
    responses={207: {"description": "Invoice sent but quote statuses not updated"}},
)
async def generate_invoice_api(
    payload: InvoiceClientRequest,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
    invoiced: InvoicedClient = Depends(get_invoiced_client),
):
    result = await generate_invoice(db, payload.client_id, admin, invoiced)
    if result.partial:
        return partial_success_response(result.message, result.data)
    return success_response(result.message, result.data)


# =====================================================
# SYNC CUSTOMER
# =====================================================
@router.post(
    "/sync-invoiced-customer",
    response_model=APIResponse[InvoicedCustomerOut],
)
async def sync_invoiced_customer_api(
    payload: InvoiceClientRequest,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
    invoiced: InvoicedClient = Depends(get_invoiced_client),
):
    message, data = await sync_invoiced_customer(db, payload.client_id, admin, invoiced)
    return success_response(message, data)
