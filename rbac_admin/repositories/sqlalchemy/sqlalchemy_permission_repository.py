from typing import List, Optional
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IPermissionRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyPermissionRepository(SqlalchemyBaseRepository, IPermissionRepository):
    model = models.Permission
    search_columns = ("name", "slug", "description")
    filter_columns = ("is_active", "category", "resource", "action")

    def find_by_slug(self, slug: str) -> Optional[models.Permission]:
        return self.db.query(models.Permission).filter(models.Permission.slug == slug).first()

    def find_by_slugs(self, slugs: List[str]) -> List[models.Permission]:
        if not slugs:
            return []
        return self.db.query(models.Permission).filter(models.Permission.slug.in_(slugs)).all()

    def find_active(self, permission_id: int) -> Optional[models.Permission]:
        return self.db.query(models.Permission).filter(
            models.Permission.id == permission_id,
            models.Permission.is_active.is_(True)
        ).first()

    def list_active_ordered(self) -> List[models.Permission]:
        return self.db.query(models.Permission).filter(models.Permission.is_active.is_(True)).order_by(
            models.Permission.category.asc(), models.Permission.action.asc()
        ).all()

    def list_for_role(self, role_id: int) -> List[models.Permission]:
        return self.db.query(models.Permission).join(
            models.RolePermission, models.RolePermission.permission_id == models.Permission.id
        ).filter(
            models.RolePermission.role_id == role_id,
            models.RolePermission.is_active.is_(True),
            models.Permission.is_active.is_(True)
        ).order_by(models.Permission.category.asc(), models.Permission.action.asc()).all()

    def list_for_user(self, user_id: int) -> List[models.Permission]:
        return self.db.query(models.Permission).join(
            models.RolePermission, models.RolePermission.permission_id == models.Permission.id
        ).join(
            models.Role, models.Role.id == models.RolePermission.role_id
        ).join(
            models.UserRole, models.UserRole.role_id == models.Role.id
        ).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.is_active.is_(True),
            models.Role.is_active.is_(True),
            models.RolePermission.is_active.is_(True),
            models.Permission.is_active.is_(True)
        ).distinct().all()
