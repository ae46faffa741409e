from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class ApiKey(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Partner API credential. Only the bcrypt hash of the key is stored."""

    __tablename__ = "api_keys"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    hashed_key = Column(String(255), nullable=False)
    key_prefix = Column(String(8), nullable=False, index=True)
    client_name = Column(String(100), nullable=True)

    callback_url = Column(String(2048), nullable=True)
    webhook_secret = Column(String(255), nullable=True)

    revoked = Column(Boolean, default=False, nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="api_keys", lazy="raise")

    @property
    def has_callback(self) -> bool:
        return bool(self.callback_url and self.webhook_secret)

    def __repr__(self):
        return f"<ApiKey id={self.id} prefix={self.key_prefix} revoked={self.revoked}>"
