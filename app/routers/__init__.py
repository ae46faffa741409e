# app/routers/__init__.py

from .users.user_router import router as user_router

from .checkout.checkout_router import router as checkout_router
from .payments.payment_router import router as payment_router

from .orders.order_router import router as order_router
from .orders.order_router import admin_router as admin_order_router
from .orders.document_router import router as document_router

from .quotes.quote_router import router as quote_router
from .quotes.quote_router import admin_router as admin_quote_router

from .partners.partner_quote_router import router as partner_quote_router
from .partners.partner_quote_router import admin_router as admin_api_quote_router
from .partners.api_key_router import router as api_key_router

from .invoicing.invoice_router import router as invoice_router

from .support.activity_router import router as activity_router


__all__ = [
"user_router",

"checkout_router",
"payment_router",

"order_router",
"admin_order_router",
"document_router",

"quote_router",
"admin_quote_router",

"partner_quote_router",
"admin_api_quote_router",
"api_key_router",

"invoice_router",

"activity_router",

]
