from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import UUIDPrimaryKeyMixin, TimestampMixin, status_column_type
from app.models.enums.quote_status import ApiQuoteStatus


class ApiQuoteRequest(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Credential evaluation request submitted by a partner through the API."""

    __tablename__ = "api_quote_requests"

    api_key_id = Column(Uuid, ForeignKey("api_keys.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    applicant_name = Column(String(255), nullable=True)
    country_of_education = Column(String(100), nullable=False)
    college_attended = Column(String(255), nullable=True)
    degree_received = Column(String(255), nullable=False)
    year_of_graduation = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)

    status = Column(status_column_type(ApiQuoteStatus), nullable=False, default=ApiQuoteStatus.pending, index=True)
    us_equivalent = Column(String, nullable=True)
    unable_to_provide = Column(Boolean, nullable=False, default=False)
    rejection_reason = Column(String, nullable=True)

    # upstream invoicing id, stored as text
    invoice_id = Column(String(64), nullable=True, index=True)

    api_key = relationship("ApiKey", lazy="raise")

    __table_args__ = (Index("ix_api_quote_requests_user_status", "user_id", "status"),)

    def __repr__(self):
        return f"<ApiQuoteRequest id={self.id} status={self.status}>"
