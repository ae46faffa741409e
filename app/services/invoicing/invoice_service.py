# app/services/invoicing/invoice_service.py
"""Bill completed partner quote requests through the hosted invoicing service."""

from dataclasses import dataclass
from typing import Any, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import API_QUOTE_FEE
from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.integrations.invoiced_client import InvoicedClient
from app.models.enums.quote_status import ApiQuoteStatus
from app.models.partners.api_quote_request_models import ApiQuoteRequest
from app.models.users.user_models import User
from app.schemas.invoicing.invoice_schemas import GeneratedInvoiceOut, InvoicedCustomerOut
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InvoiceResult:
    message: str
    data: GeneratedInvoiceOut
    partial: bool = False


# =====================================================
# ERROR MAPPING
# =====================================================
def _upstream_error(exc: UpstreamServiceError) -> AppException:
    if exc.is_client_error:
        return AppException(
            400,
            "Invoice generation failed due to invalid data or configuration issue with the invoicing service.",
            ErrorCode.INVOICE_UPSTREAM_REJECTED,
            details=f"Upstream error: {exc}",
        )
    return AppException(
        502,
        "Invoice generation failed due to an issue with the invoicing service.",
        ErrorCode.INVOICE_UPSTREAM_ERROR,
        details=f"Upstream error: {exc}",
    )


# =====================================================
# HELPERS
# =====================================================
async def _load_client(db: AsyncSession, client_id: Optional[UUID]) -> User:
    if not client_id:
        raise AppException(400, "Missing client_id in request body", ErrorCode.VALIDATION_ERROR)

    client = await db.get(User, client_id)
    if not client:
        raise AppException(404, "Client user not found", ErrorCode.USER_NOT_FOUND)
    return client


def billing_identity(client: User) -> Tuple[str, str]:
    """(billing email, customer name) used on the invoicing side."""
    billing_email = client.billing_email or client.email
    name = client.company_name or client.full_name or client.email

    if not billing_email or not name:
        raise AppException(
            400,
            "Client information is incomplete for invoicing. Please update billing details.",
            ErrorCode.USER_BILLING_INCOMPLETE,
        )
    return billing_email, name


async def find_or_create_customer(invoiced: InvoicedClient, client: User) -> Tuple[Any, bool]:
    """Return ``(customer_id, existed)``."""
    billing_email, name = billing_identity(client)

    customer = await invoiced.find_customer_by_email(billing_email)
    if customer:
        logger.info(
            "Invoicing customer found",
            extra={"client_id": str(client.id), "invoiced_customer_id": customer["id"]},
        )
        return customer["id"], True

    customer = await invoiced.create_customer(
        name=name,
        email=billing_email,
        metadata={"user_id": str(client.id)},
    )
    logger.info(
        "Invoicing customer created",
        extra={"client_id": str(client.id), "invoiced_customer_id": customer["id"]},
    )
    return customer["id"], False


def line_item(row: ApiQuoteRequest) -> dict:
    return {
        "name": f"API Quote Request: {row.applicant_name or 'N/A'} - {row.country_of_education or 'N/A'}",
        "quantity": 1,
        "unit_cost": float(API_QUOTE_FEE),
    }


# =====================================================
# GENERATE INVOICE
# =====================================================
async def generate_invoice(
    db: AsyncSession,
    client_id: Optional[UUID],
    admin: User,
    invoiced: InvoicedClient,
) -> InvoiceResult:
    client = await _load_client(db, client_id)

    rows = (
        await db.execute(
            select(ApiQuoteRequest)
            .where(
                ApiQuoteRequest.user_id == client.id,
                ApiQuoteRequest.status == ApiQuoteStatus.completed,
            )
            .order_by(ApiQuoteRequest.created_at)
        )
    ).scalars().all()

    if not rows:
        raise AppException(
            400,
            "No completed API quote requests found for this client to invoice.",
            ErrorCode.INVOICE_NO_BILLABLE_QUOTES,
        )

    logger.info(
        "Generating invoice",
        extra={"client_id": str(client.id), "quote_count": len(rows)},
    )

    try:
        customer_id, _ = await find_or_create_customer(invoiced, client)
        invoice = await invoiced.create_invoice(customer_id, [line_item(r) for r in rows])
    except UpstreamServiceError as e:
        raise _upstream_error(e)

    invoice_id = str(invoice["id"])
    billed = [r.id for r in rows]
    data = GeneratedInvoiceOut(
        invoice_id=invoice_id,
        invoice_url=invoice.get("url"),
        billed_quotes=billed,
    )

    # the invoice already exists upstream; a failed status write is reported, not undone
    try:
        await db.execute(
            update(ApiQuoteRequest)
            .where(ApiQuoteRequest.id.in_(billed))
            .values(status=ApiQuoteStatus.invoiced, invoice_id=invoice_id)
        )
        await emit_user_activity(
            db,
            admin,
            ActivityCode.GENERATE_INVOICE,
            invoice_id=invoice_id,
            target_email=client.email,
            quote_count=len(billed),
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(
            "Invoice sent but quote status update failed",
            extra={"invoice_id": invoice_id, "billed_quotes": [str(b) for b in billed]},
        )
        data.update_error = str(e.orig if getattr(e, "orig", None) else e)
        return InvoiceResult(
            message=(
                f"Invoice {invoice_id} generated and sent, but failed to update all "
                "API quote statuses in DB. Please check manually."
            ),
            data=data,
            partial=True,
        )

    logger.info("Invoice generated", extra={"invoice_id": invoice_id, "quote_count": len(billed)})
    return InvoiceResult(
        message=f"Invoice {invoice_id} generated and sent successfully for {len(billed)} quote requests.",
        data=data,
    )


# =====================================================
# SYNC CUSTOMER
# =====================================================
async def sync_invoiced_customer(
    db: AsyncSession,
    client_id: Optional[UUID],
    admin: User,
    invoiced: InvoicedClient,
) -> Tuple[str, InvoicedCustomerOut]:
    client = await _load_client(db, client_id)

    try:
        customer_id, existed = await find_or_create_customer(invoiced, client)
    except UpstreamServiceError as e:
        raise _upstream_error(e)

    await emit_user_activity(
        db,
        admin,
        ActivityCode.SYNC_INVOICED_CUSTOMER,
        invoiced_customer_id=customer_id,
        target_email=client.email,
    )
    await db.commit()

    message = (
        f"Customer found on Invoiced.com (ID: {customer_id})."
        if existed
        else f"Customer created successfully on Invoiced.com (ID: {customer_id})."
    )
    return message, InvoicedCustomerOut(invoiced_customer_id=customer_id, customer_existed=existed)
