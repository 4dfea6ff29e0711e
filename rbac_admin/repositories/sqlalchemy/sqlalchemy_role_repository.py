from typing import List, Optional
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IRoleRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyRoleRepository(SqlalchemyBaseRepository, IRoleRepository):
    model = models.Role
    search_columns = ("name", "slug", "description")
    filter_columns = ("is_active", "level", "parent_id")

    def find_by_slug(self, slug: str) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(models.Role.slug == slug).first()

    def find_active(self, role_id: int) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(
            models.Role.id == role_id,
            models.Role.is_active.is_(True)
        ).first()

    def list_active_ordered(self) -> List[models.Role]:
        return self.db.query(models.Role).filter(models.Role.is_active.is_(True)).order_by(
            models.Role.level.desc(), models.Role.name.asc()
        ).all()

    def list_for_user(self, user_id: int) -> List[models.Role]:
        return self.db.query(models.Role).join(
            models.UserRole, models.UserRole.role_id == models.Role.id
        ).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.is_active.is_(True),
            models.Role.is_active.is_(True)
        ).order_by(models.Role.level.desc()).all()

    def count_active_users(self, role_id: int) -> int:
        return self.db.query(models.UserRole).filter(
            models.UserRole.role_id == role_id,
            models.UserRole.is_active.is_(True)
        ).count()
