from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class GroupStatus(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    ASSIGNED = "assigned"


group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("user_uid", String, ForeignKey("users.uid", ondelete="CASCADE"), primary_key=True),
    Column("position", Integer, nullable=False),
    Column("joined_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    UniqueConstraint("group_id", "user_uid", name="uq_group_members_group_user"),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    uid = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return "<User(id={0}, uid={1}, display_name={2})>".format(self.id, self.uid, self.display_name)


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    admin_uid = Column(String, ForeignKey("users.uid"), nullable=False)
    status = Column(
        Enum(GroupStatus, name="group_status"),
        nullable=False,
        default=GroupStatus.PENDING,
        server_default=GroupStatus.PENDING.value,
    )
    is_locked = Column(Boolean, default=False, nullable=False)
    budget_amount = Column(Numeric(10, 2), nullable=True)
    event_date = Column(Date, nullable=True)
    description = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    assigned_at = Column(DateTime(timezone=True), nullable=True)

    assignments = relationship("Assignment", back_populates="group", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name}, status={self.status})>"


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    giver_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    receiver_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    group = relationship("Group", back_populates="assignments")

    __table_args__ = (
        UniqueConstraint("group_id", "giver_uid", name="uq_assignments_group_giver"),
    )
