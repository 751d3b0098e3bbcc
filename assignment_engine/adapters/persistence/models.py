"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assignment_engine.adapters.persistence.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    rules: Mapped[list["AssignmentRuleModel"]] = relationship(back_populates="assign_to")

    __table_args__ = (Index("idx_users_role_active", "role", "is_active"),)


class AssignmentRuleModel(Base):
    __tablename__ = "assignment_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    asset_types: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    categories: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    locations: Mapped[list[str]] = mapped_column(ARRAY(String(200)), nullable=False, default=list)
    priorities: Mapped[list[str]] = mapped_column(ARRAY(String(20)), nullable=False, default=list)
    assign_to_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    assign_to: Mapped["UserModel"] = relationship(back_populates="rules")

    __table_args__ = (
        Index("idx_rules_active_priority", "is_active", "priority", "created_at"),
        Index("idx_rules_assign_to", "assign_to_id"),
    )


class NotificationModel(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    work_order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "is_read"),
        Index("idx_notifications_read_created", "is_read", "created_at"),
        # One assignment notification per (recipient, work order).
        Index(
            "uq_notifications_assigned_once",
            "user_id",
            "work_order_id",
            unique=True,
            postgresql_where=text("type = 'WORK_ORDER_ASSIGNED'"),
        ),
    )
