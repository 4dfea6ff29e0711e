from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Role(Base):
    """
    사용자에게 부여되는 권한의 묶음을 정의합니다.
    (예: 'super-admin', 'librarian', 'guest').
    level이 높을수록 더 큰 권한을 가지며, parent_id로 단일 부모를 가리키는 트리를 구성합니다.
    부모 관계는 저장만 되고, 권한 판정 시 상속 계산에는 사용되지 않습니다.
    """
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    level = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    parent_id = Column(Integer, ForeignKey("roles.id"), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    parent = relationship("Role", remote_side=[id], back_populates="children")
    children = relationship("Role", back_populates="parent")
    permission_links = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    user_links = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")

    def is_higher_than(self, other: "Role") -> bool:
        return self.level > other.level
