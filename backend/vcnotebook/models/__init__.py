"""SQLAlchemy models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models so Base.metadata.create_all() picks them up
from vcnotebook.models.subscription import SubscriptionStatus, UserSubscription  # noqa: E402, F401
