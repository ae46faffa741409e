# app/constants/activity_codes.py
from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- API KEYS ----------------
    GENERATE_API_KEY = "GENERATE_API_KEY"
    REVOKE_API_KEY = "REVOKE_API_KEY"
    CONFIGURE_CALLBACK = "CONFIGURE_CALLBACK"

    # ---------------- ORDERS ----------------
    PLACE_ORDER = "PLACE_ORDER"
    START_ORDER_PROCESSING = "START_ORDER_PROCESSING"
    COMPLETE_ORDER = "COMPLETE_ORDER"
    UPLOAD_TRANSLATION = "UPLOAD_TRANSLATION"

    # ---------------- WEB QUOTES ----------------
    REQUEST_QUOTE = "REQUEST_QUOTE"
    REVIEW_QUOTE = "REVIEW_QUOTE"
    PRICE_QUOTE = "PRICE_QUOTE"
    REJECT_QUOTE = "REJECT_QUOTE"
    CONVERT_QUOTE_TO_ORDER = "CONVERT_QUOTE_TO_ORDER"

    # ---------------- PARTNER QUOTES ----------------
    COMPLETE_API_QUOTE = "COMPLETE_API_QUOTE"
    REJECT_API_QUOTE = "REJECT_API_QUOTE"

    # ---------------- INVOICING ----------------
    GENERATE_INVOICE = "GENERATE_INVOICE"
    SYNC_INVOICED_CUSTOMER = "SYNC_INVOICED_CUSTOMER"

    # ---------------- USERS ----------------
    UPDATE_BILLING_DETAILS = "UPDATE_BILLING_DETAILS"
