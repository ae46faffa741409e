import uuid

from sqlalchemy import Column, DateTime, Enum, Uuid
from sqlalchemy.sql import func


class UUIDPrimaryKeyMixin:
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


def status_column_type(enum_cls):
    """Plain VARCHAR status column; the hosted schema stores lifecycle values as text."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=40,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
