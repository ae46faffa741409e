# app/schemas/invoicing/invoice_schemas.py

from pydantic import BaseModel
from typing import Optional, List, Any
from uuid import UUID


class InvoiceClientRequest(BaseModel):
    client_id: Optional[UUID] = None


class GeneratedInvoiceOut(BaseModel):
    invoice_id: str
    invoice_url: Optional[str] = None
    billed_quotes: List[UUID]
    update_error: Optional[str] = None


class InvoicedCustomerOut(BaseModel):
    invoiced_customer_id: Any
    customer_existed: bool
