from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base

class Permission(Base):
    """
    'entity:action:scope' 형식의 권한 문자열 하나를 나타냅니다.
    (예: 'submission:review:self').
    DB 수준에서는 소문자 여부만 검사하고, 형식 검증은 서비스 계층이 담당합니다.
    """
    __tablename__ = "permission"
    __table_args__ = (
        CheckConstraint("slug = lower(slug)", name="permission_lower_slug"),
    )
    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False)
    description = Column(String)

    user_links = relationship("UserPermission", back_populates="permission", cascade="all, delete-orphan")
    role_links = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")
