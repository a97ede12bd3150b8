"""SQLAlchemy ORM models for persisted priority scores"""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BillPriorityRecord(Base):
    """Latest priority calculation for a bill.

    (user_id, sort_key) is the secondary index bills are listed by; sort_key is
    the zero-padded score so string order equals numeric order.
    """

    __tablename__ = "bill_priority"
    __table_args__ = (
        UniqueConstraint("user_id", "bill_id", name="uq_bill_priority_user_bill"),
        Index("ix_bill_priority_user_sort_key", "user_id", "sort_key"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    bill_id = Column(Text, nullable=False)
    bill_name = Column(Text, nullable=False)
    current_balance = Column(Float, nullable=False)
    final_score = Column(Float, nullable=False)
    sort_key = Column(String(6), nullable=False)
    tier = Column(Text, nullable=False)
    scores = Column(JSON, nullable=False)
    reasoning = Column(JSON, nullable=False)
    calculated_at = Column(DateTime(timezone=True), nullable=False)
    archived = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
