from sqlalchemy import Column, String, ForeignKey, Numeric, JSON, Index, CheckConstraint, Uuid
from app.core.db import Base
from app.models.base.mixins import UUIDPrimaryKeyMixin, TimestampMixin, status_column_type
from app.models.enums.quote_status import QuoteStatus


class Quote(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Translation quote requested from the website and priced by staff."""

    __tablename__ = "quotes"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)

    document_type = Column(String(50), nullable=True)
    source_language = Column(String(50), nullable=True)
    target_language = Column(String(50), nullable=True)
    document_paths = Column(JSON, nullable=True)
    notes = Column(String, nullable=True)

    price = Column(Numeric(10, 2), nullable=True)
    status = Column(status_column_type(QuoteStatus), nullable=False, default=QuoteStatus.pending, index=True)

    __table_args__ = (
        Index("ix_quotes_user_status", "user_id", "status"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_quote_price_non_negative"),
    )

    def __repr__(self):
        return f"<Quote id={self.id} status={self.status}>"
