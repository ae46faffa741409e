# app/constants/error_codes.py
from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_INACTIVE = "USER_INACTIVE"
    USER_BILLING_INCOMPLETE = "USER_BILLING_INCOMPLETE"

    # ---------------- API KEYS ----------------
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    API_KEY_REVOKED = "API_KEY_REVOKED"
    API_KEY_NOT_FOUND = "API_KEY_NOT_FOUND"

    # ---------------- CHECKOUT ----------------
    CHECKOUT_STEP_INCOMPLETE = "CHECKOUT_STEP_INCOMPLETE"
    CHECKOUT_STEP_INVALID = "CHECKOUT_STEP_INVALID"
    CHECKOUT_PRICE_UNAVAILABLE = "CHECKOUT_PRICE_UNAVAILABLE"

    # ---------------- PAYMENTS ----------------
    PAYMENT_INVALID_AMOUNT = "PAYMENT_INVALID_AMOUNT"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"
    PAYMENT_PROVIDER_ERROR = "PAYMENT_PROVIDER_ERROR"
    PAYMENT_INTENT_MISMATCH = "PAYMENT_INTENT_MISMATCH"
    PAYMENT_ALREADY_USED = "PAYMENT_ALREADY_USED"

    # ---------------- ORDERS ----------------
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_INVALID_STATE = "ORDER_INVALID_STATE"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"

    # ---------------- QUOTES ----------------
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    QUOTE_INVALID_STATE = "QUOTE_INVALID_STATE"
    API_QUOTE_NOT_FOUND = "API_QUOTE_NOT_FOUND"
    API_QUOTE_MISSING_FIELDS = "API_QUOTE_MISSING_FIELDS"

    # ---------------- CALLBACKS ----------------
    CALLBACK_NOT_CONFIGURED = "CALLBACK_NOT_CONFIGURED"
    CALLBACK_INVALID_PAYLOAD = "CALLBACK_INVALID_PAYLOAD"

    # ---------------- INVOICING ----------------
    INVOICE_NO_BILLABLE_QUOTES = "INVOICE_NO_BILLABLE_QUOTES"
    INVOICE_UPSTREAM_REJECTED = "INVOICE_UPSTREAM_REJECTED"
    INVOICE_UPSTREAM_ERROR = "INVOICE_UPSTREAM_ERROR"
