from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- API KEYS ----------------
    ActivityCode.GENERATE_API_KEY:
        "{actor_role} ({actor_email}) generated API key {key_prefix}",

    ActivityCode.REVOKE_API_KEY:
        "{actor_role} ({actor_email}) revoked API key {key_prefix}",

    ActivityCode.CONFIGURE_CALLBACK:
        "{actor_role} ({actor_email}) set callback URL for API key {key_prefix} to {callback_url}",

    # ---------------- ORDERS ----------------
    ActivityCode.PLACE_ORDER:
        "{actor_role} ({actor_email}) placed {order_type} order {target_name} (${total})",

    ActivityCode.START_ORDER_PROCESSING:
        "{actor_role} ({actor_email}) started processing order {target_name}",

    ActivityCode.COMPLETE_ORDER:
        "{actor_role} ({actor_email}) completed order {target_name}",

    ActivityCode.UPLOAD_TRANSLATION:
        "{actor_role} ({actor_email}) uploaded translation {file_name} for order {target_name}",

    # ---------------- WEB QUOTES ----------------
    ActivityCode.REQUEST_QUOTE:
        "{actor_role} ({actor_email}) requested quote {target_name}",

    ActivityCode.REVIEW_QUOTE:
        "{actor_role} ({actor_email}) marked quote {target_name} as reviewed",

    ActivityCode.PRICE_QUOTE:
        "{actor_role} ({actor_email}) quoted ${price} for quote {target_name}",

    ActivityCode.REJECT_QUOTE:
        "{actor_role} ({actor_email}) rejected quote {target_name}",

    ActivityCode.CONVERT_QUOTE_TO_ORDER:
        "{actor_role} ({actor_email}) converted quote {target_name} to order {order_number}",

    # ---------------- PARTNER QUOTES ----------------
    ActivityCode.COMPLETE_API_QUOTE:
        "{actor_role} ({actor_email}) completed API quote {target_name}: {us_equivalent}",

    ActivityCode.REJECT_API_QUOTE:
        "{actor_role} ({actor_email}) rejected API quote {target_name}: {rejection_reason}",

    # ---------------- INVOICING ----------------
    ActivityCode.GENERATE_INVOICE:
        "{actor_role} ({actor_email}) generated invoice {invoice_id} for {target_email} "
        "covering {quote_count} quote requests",

    ActivityCode.SYNC_INVOICED_CUSTOMER:
        "{actor_role} ({actor_email}) synced invoicing customer {invoiced_customer_id} for {target_email}",

    # ---------------- USERS ----------------
    ActivityCode.UPDATE_BILLING_DETAILS:
        "{actor_role} ({actor_email}) updated billing details of {target_email}: {changes}",
}
