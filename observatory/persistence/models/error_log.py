"""Error log model."""

from enum import Enum

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from observatory.core.time_windows import utcnow
from observatory.persistence.database import Base


class UserImpact(str, Enum):
    """How badly an error affected the end user."""

    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class ErrorLog(Base):
    """A structured error report from an application error handler.

    ``error_hash`` fingerprints service, type, message, and endpoint so
    repeated occurrences of one logical error can be grouped.
    """

    __tablename__ = "error_logs"

    id = Column(Integer, primary_key=True, index=True)

    service_name = Column(String(255), nullable=False)
    error_type = Column(String(255), nullable=False)
    error_message = Column(Text, nullable=False)
    stack_trace = Column(Text, nullable=True)

    endpoint = Column(String(1024), nullable=True)
    user_id = Column(String(255), nullable=True)
    request_id = Column(String(255), nullable=True)

    error_hash = Column(String(64), nullable=False, index=True)
    user_impact = Column(String(20), nullable=False, default=UserImpact.MINOR.value)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_error_logs_created_at", "created_at"),
        Index("ix_error_logs_service_created", "service_name", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ErrorLog(id={self.id}, service={self.service_name}, "
            f"type={self.error_type}, hash={self.error_hash})>"
        )
