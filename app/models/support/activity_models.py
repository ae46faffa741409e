from sqlalchemy import Column, Integer, String, ForeignKey, Index, Uuid
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class UserActivity(Base, TimestampMixin):
    """Append-only audit row written alongside staff and customer actions."""

    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    username_snapshot = Column(String(255), nullable=False, index=True)
    # ActivityCode value, e.g. GENERATE_INVOICE
    code = Column(String(64), nullable=True, index=True)
    message = Column(String, nullable=False)

    __table_args__ = (
        Index("ix_user_activity_user_created", "user_id", "created_at"),
        Index("ix_user_activity_code_created", "code", "created_at"),
    )

    def __repr__(self):
        return f"<UserActivity id={self.id} code={self.code} user={self.username_snapshot}>"
