# app/services/notifications/email_service.py
"""Customer and staff notification emails.

Sending is best effort: every failure is logged and swallowed so the order or
quote operation that triggered it still succeeds.
"""

from html import escape

from app.core.config import (
    APP_URL,
    SENDER_EMAIL,
    ORDER_SENDER_EMAIL,
    ADMIN_NOTIFICATION_EMAIL,
)
from app.integrations.email_client import EmailClient
from app.models.enums.service_type import ServiceType
from app.models.orders.order_models import Order
from app.models.quotes.quote_models import Quote
from app.utils.decimal_utils import to_decimal
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _na(value) -> str:
    return escape(str(value)) if value else "N/A"


# =====================================================
# TEMPLATES
# =====================================================
def _order_summary_items(order: Order) -> str:
    if order.order_type == ServiceType.credential_evaluation:
        rows = [
            ("Service", "Credential Evaluation"),
            ("Evaluation Type", _na(order.evaluation_type)),
            ("Processing Time", _na(order.processing_time)),
        ]
    else:
        rows = [
            ("Document Type", _na(order.document_type)),
            ("Language", f"{_na(order.source_language)} to {_na(order.target_language)}"),
            ("Service Level", _na(order.service_level)),
            ("Delivery", _na(order.delivery_method)),
        ]

    rows.append(("Files Submitted", str(len(order.document_paths or []))))
    rows.append(("Total Price", f"${to_decimal(order.total)}"))

    return "\n".join(f"<li><strong>{label}:</strong> {value}</li>" for label, value in rows)


def order_confirmation_html(order: Order) -> str:
    return f"""
<h1>Your OpenTranslate Order #{escape(order.order_number)} is Confirmed!</h1>
<p>Hi {_na(order.full_name) if order.full_name else "Customer"},</p>
<p>Thank you for your order. Here's a summary:</p>
<ul>
{_order_summary_items(order)}
</ul>
<p>We'll notify you once your order is complete. You can view your order details in your dashboard.</p>
<p>Thanks,<br/>The OpenTranslate Team</p>
"""


def admin_order_html(order: Order) -> str:
    return f"""
<h1>New Order Received: #{escape(order.order_number)}</h1>
<p>A new order has been placed:</p>
<ul>
<li><strong>Order ID:</strong> {escape(order.order_number)}</li>
<li><strong>Customer Name:</strong> {_na(order.full_name)}</li>
<li><strong>Customer Email:</strong> {_na(order.email)}</li>
{_order_summary_items(order)}
</ul>
<p>Please check the admin dashboard for details and uploaded files.</p>
"""


def quote_ready_html(quote: Quote) -> str:
    short_id = str(quote.id)[:8]
    return f"""
<h1>Your Quote is Ready!</h1>
<p>Hello,</p>
<p>Your quote request (#{short_id}) has been processed.</p>
<p>The price for your translation is: <strong>${to_decimal(quote.price)}</strong></p>
<p>Please log in to your dashboard to review and proceed with payment:</p>
<a href="{APP_URL}/dashboard/my-quotes">View Your Quote</a>
<p>Thank you for choosing OpenEval!</p>
"""


# =====================================================
# SENDERS
# =====================================================
async def send_order_confirmation(client: EmailClient, order: Order) -> bool:
    if not order.email:
        logger.warning("Order has no email, confirmation skipped", extra={"order_number": order.order_number})
        return False

    try:
        await client.send(
            sender=ORDER_SENDER_EMAIL,
            to=[order.email],
            subject=f"Your OpenTranslate Order Confirmation #{order.order_number}",
            html=order_confirmation_html(order),
        )
        if ADMIN_NOTIFICATION_EMAIL:
            await client.send(
                sender=ORDER_SENDER_EMAIL,
                to=[ADMIN_NOTIFICATION_EMAIL],
                subject=f"New Order Received: #{order.order_number}",
                html=admin_order_html(order),
            )
    except Exception:
        logger.exception("Order confirmation email failed", extra={"order_number": order.order_number})
        return False

    return True


async def send_quote_ready(client: EmailClient, quote: Quote) -> bool:
    try:
        await client.send(
            sender=SENDER_EMAIL,
            to=[quote.email],
            subject=f"Your Translation Quote #{str(quote.id)[:8]} is Ready!",
            html=quote_ready_html(quote),
        )
    except Exception:
        logger.exception("Quote ready email failed", extra={"quote_id": str(quote.id)})
        return False

    return True
