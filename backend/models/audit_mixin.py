from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Every inventory model uses this. There is no soft-delete: deleting a
    consumable or accessory really removes it (and cascades its ledger) so the
    replayed totals never see stale rows.
    """
    # DateTime(timezone=True) keeps the UTC offset on backends that support it.
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(pytz.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=lambda: datetime.now(pytz.utc))
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
