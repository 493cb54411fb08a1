import uuid

from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base

class User(Base):
    """
    외부 신원 저장소가 소유하는 사용자를 나타냅니다.
    인가 코어는 이 테이블을 외래 키 대상으로만 참조하고, 수정하지 않습니다.
    """
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    role_links = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")
    permission_links = relationship("UserPermission", back_populates="user", cascade="all, delete-orphan")
