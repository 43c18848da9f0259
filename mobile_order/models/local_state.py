"""Local key/value state model"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from mobile_order.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalState(Base):
    """One independently keyed JSON value (cart, order history, language, ...)"""
    __tablename__ = "local_state"

    key = Column(String(100), primary_key=True)

    # Whole JSON document, always replaced as one value
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
