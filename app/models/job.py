from sqlalchemy import Column, String, Float, ForeignKey, func
from app.database import Base, UTCDateTime, generate_uuid


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    hourly_rate = Column(Float, nullable=False)
    daily_hour_limit = Column(Float, nullable=False, default=8)
    status = Column(String(20), nullable=False, default="active")  # 'active', 'retired', 'archived'
    color = Column(String(7), nullable=False, default="#3b82f6")
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == "active"
