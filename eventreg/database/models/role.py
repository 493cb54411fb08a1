from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base

class Role(Base):
    """
    권한의 묶음에 이름을 붙인 역할을 정의합니다.
    (예: 'organizer', 'judge').
    역할이 삭제되면 역할-권한, 사용자-역할 연결도 함께 삭제됩니다.
    """
    __tablename__ = "role"
    __table_args__ = (
        CheckConstraint("slug = lower(slug)", name="role_lower_slug"),
    )
    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False)
    description = Column(String)

    user_links = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")
    permission_links = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
