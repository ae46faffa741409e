# app/models/enums/quote_status.py
import enum


class QuoteStatus(str, enum.Enum):
    pending = "pending"
    reviewed = "reviewed"
    quoted = "quoted"
    rejected = "rejected"
    converted_to_order = "converted_to_order"


class ApiQuoteStatus(str, enum.Enum):
    pending = "pending"
    reviewed = "reviewed"
    completed = "completed"
    rejected = "rejected"
    failed = "failed"
    invoiced = "invoiced"
