from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base

class UserRole(Base):
    """
    사용자(User)와 역할(Role) 사이의 다대다 관계를 연결하는 연관 테이블 모델입니다.
    사용자는 역할에 연결된 모든 권한을 갖게 됩니다.
    """
    __tablename__ = 'user_role'
    user_id = Column(String(36), ForeignKey('users.id', ondelete="CASCADE"), primary_key=True)
    role_id = Column(Integer, ForeignKey('role.id', ondelete="CASCADE"), primary_key=True)

    user = relationship("User", back_populates="role_links")
    role = relationship("Role", back_populates="user_links")


class UserPermission(Base):
    """
    역할을 거치지 않고 사용자에게 직접 부여된 권한입니다.
    """
    __tablename__ = 'user_permission'
    user_id = Column(String(36), ForeignKey('users.id', ondelete="CASCADE"), primary_key=True)
    permission_id = Column(Integer, ForeignKey('permission.id', ondelete="CASCADE"), primary_key=True)

    user = relationship("User", back_populates="permission_links")
    permission = relationship("Permission", back_populates="user_links")


class RolePermission(Base):
    """
    역할(Role)에 권한(Permission)을 연결하는 연관 테이블 모델입니다.
    """
    __tablename__ = 'role_permission'
    role_id = Column(Integer, ForeignKey('role.id', ondelete="CASCADE"), primary_key=True)
    permission_id = Column(Integer, ForeignKey('permission.id', ondelete="CASCADE"), primary_key=True)

    role = relationship("Role", back_populates="permission_links")
    permission = relationship("Permission", back_populates="role_links")
