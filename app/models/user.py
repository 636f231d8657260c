from sqlalchemy import Column, String, Boolean, Text, ForeignKey, func
from app.database import Base, UTCDateTime, generate_uuid


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    manager_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    invite_code = Column(String(12), unique=True, nullable=False, index=True)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(120), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="employee")  # 'employee', 'manager'
    avatar = Column(Text)
    # 弱參照：團隊刪除時只清空，不連帶刪除成員
    team_id = Column(String(36), index=True)
    is_premium = Column(Boolean, default=False)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_manager(self) -> bool:
        return self.role == "manager"
