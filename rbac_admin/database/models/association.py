from sqlalchemy import Column, Integer, Boolean, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from ..database import Base

class RolePermission(Base):
    """
    역할(Role)과 권한(Permission) 사이의 다대다 관계를 연결하는 연관 테이블 모델입니다.
    (role_id, permission_id) 쌍마다 최대 한 행만 존재합니다.
    """
    __tablename__ = 'role_permissions'
    __table_args__ = (UniqueConstraint('role_id', 'permission_id', name='uq_role_permission'),)
    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey('roles.id'), nullable=False, index=True)
    permission_id = Column(Integer, ForeignKey('permissions.id'), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    granted_at = Column(DateTime, server_default=func.now())
    notes = Column(Text, nullable=True)

    role = relationship("Role", back_populates="permission_links")
    permission = relationship("Permission", back_populates="role_links")


class UserRole(Base):
    """
    사용자(User)와 역할(Role) 사이의 다대다 관계를 연결하는 연관 테이블 모델입니다.
    한 사용자는 0개 이상의 활성 역할을 가질 수 있습니다.
    """
    __tablename__ = 'user_roles'
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey('roles.id'), nullable=False, index=True)
    assigned_at = Column(DateTime, server_default=func.now())
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)

    user = relationship("User", back_populates="role_links")
    role = relationship("Role", back_populates="user_links")
