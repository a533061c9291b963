"""
Common mixins for POS models
"""
from datetime import datetime

from sqlalchemy import Column, DateTime


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
