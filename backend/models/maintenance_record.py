import enum
import uuid

from sqlalchemy import Column, Date, Enum, String, Text
from database import Base
from models.audit_mixin import TimestampMixin


class MaintenanceType(enum.Enum):
    CLEANING = "cleaning"
    LUBRICATION = "lubrication"
    REPLACEMENT = "replacement"
    CALIBRATION = "calibration"
    OTHER = "other"


class MaintenanceRecord(Base, TimestampMixin):
    """A printer maintenance job. Not tied to any stock."""
    __tablename__ = "maintenance_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    maintenance_date = Column(Date, index=True, nullable=False)
    maintenance_type = Column(Enum(MaintenanceType), nullable=False)
    description = Column(Text, nullable=True)
