"""User subscription model."""

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from vcnotebook.models import Base


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Identity-provider uid, not a local foreign key
    user_id = Column(String(128), unique=True, nullable=False, index=True)
    user_email = Column(String(255), nullable=True)
    is_premium = Column(Boolean, default=False, nullable=False)
    subscription_status = Column(String(20), default=SubscriptionStatus.INACTIVE.value, nullable=False)
    subscription_id = Column(String(255), nullable=True)
    payment_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
