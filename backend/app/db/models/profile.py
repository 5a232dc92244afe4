"""Profile model: one row per user, carries tier and billing state."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from app.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Subject claim from the auth provider's session token
    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=False, default="")
    full_name = Column(String(255), nullable=True)

    # Tier
    is_pro = Column(Boolean, nullable=False, default=False)

    # Stripe
    stripe_customer_id = Column(String(255), unique=True, nullable=True, index=True)
    stripe_subscription_id = Column(String(255), nullable=True)
    subscription_status = Column(String(50), nullable=True)

    # Stored but not consulted by the tier gate
    trial_ends_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
