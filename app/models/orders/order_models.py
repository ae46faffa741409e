from decimal import Decimal

from sqlalchemy import Column, String, Integer, ForeignKey, Numeric, JSON, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import UUIDPrimaryKeyMixin, TimestampMixin, status_column_type
from app.models.enums.order_status import OrderStatus
from app.models.enums.service_type import ServiceType


class Order(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "orders"

    order_number = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)

    order_type = Column(status_column_type(ServiceType), nullable=False)
    status = Column(status_column_type(OrderStatus), nullable=False, default=OrderStatus.pending, index=True)

    # credential evaluation
    evaluation_type = Column(String(50), nullable=True)
    processing_time = Column(String(50), nullable=True)

    # certified translation
    document_type = Column(String(50), nullable=True)
    source_language = Column(String(50), nullable=True)
    target_language = Column(String(50), nullable=True)
    service_level = Column(String(50), nullable=True)
    delivery_method = Column(String(50), nullable=True)

    document_paths = Column(JSON, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    tax = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    quote_id = Column(Uuid, ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True, index=True)
    document_id = Column(Uuid, ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)
    payment_intent_id = Column(String(255), nullable=True, unique=True, index=True)

    user = relationship("User", back_populates="orders", lazy="raise")
    translations = relationship(
        "Translation",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Translation.created_at",
    )

    __table_args__ = (
        Index("ix_orders_user_status", "user_id", "status"),
        CheckConstraint("subtotal >= 0 AND tax >= 0 AND total >= 0", name="ck_order_amounts_non_negative"),
    )

    def __repr__(self):
        return f"<Order {self.order_number} status={self.status}>"


class Document(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Metadata for a file held in hosted object storage."""

    __tablename__ = "documents"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    order_id = Column(Uuid, nullable=True, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False, unique=True, index=True)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Document id={self.id} path={self.file_path}>"


class Translation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "translations"

    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False)
    uploaded_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    order = relationship("Order", back_populates="translations", lazy="raise")

    def __repr__(self):
        return f"<Translation id={self.id} order_id={self.order_id}>"
