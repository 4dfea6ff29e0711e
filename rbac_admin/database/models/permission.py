from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base

class Permission(Base):
    """
    역할에 부여할 수 있는 단일 권한을 정의합니다.
    slug는 '<resource>.<action>'(게이트 형식) 또는 '<resource>_<action>'(시더 형식)이며,
    두 형식은 서로의 별칭으로 취급됩니다.
    """
    __tablename__ = "permissions"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    resource = Column(String(100), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    requires_ownership = Column(Boolean, nullable=False, default=False)
    can_delegate = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    role_links = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")
