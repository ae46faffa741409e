from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Local profile of a hosted-auth account; ``id`` is the auth subject."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    company_name = Column(String(255), nullable=True)
    billing_email = Column(String(255), nullable=True)
    role = Column(String(50), nullable=False, default="user")
    stripe_customer_id = Column(String(255), nullable=True, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)

    orders = relationship("Order", back_populates="user", lazy="raise")
    api_keys = relationship("ApiKey", back_populates="user", lazy="raise")

    __table_args__ = (Index("ix_users_role", "role"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
