"""Daily uptime rollup model."""

from sqlalchemy import Column, Date, Float, Integer, String, UniqueConstraint

from observatory.persistence.database import Base


class UptimeDaily(Base):
    """One row per service per calendar day.

    Rows are aggregated outside this service and only read here.
    """

    __tablename__ = "uptime_daily"

    id = Column(Integer, primary_key=True, index=True)
    service_name = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    uptime_percent = Column(Float, nullable=True)  # 0-100, NULL read as 100

    __table_args__ = (
        UniqueConstraint("service_name", "date", name="uq_uptime_daily_service_date"),
    )

    def __repr__(self) -> str:
        return f"<UptimeDaily(service={self.service_name}, date={self.date}, uptime={self.uptime_percent})>"
