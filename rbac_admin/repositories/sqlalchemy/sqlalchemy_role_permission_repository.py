from typing import Dict, List, Optional
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IRolePermissionRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyRolePermissionRepository(SqlalchemyBaseRepository, IRolePermissionRepository):
    model = models.RolePermission
    filter_columns = ("role_id", "permission_id", "is_active")

    def find_pair(self, role_id: int, permission_id: int) -> Optional[models.RolePermission]:
        return self.db.query(models.RolePermission).filter(
            models.RolePermission.role_id == role_id,
            models.RolePermission.permission_id == permission_id
        ).first()

    def delete_pair(self, role_id: int, permission_id: int) -> bool:
        return self.delete(self.find_pair(role_id, permission_id))

    def delete_by_role(self, role_id: int) -> int:
        deleted = self.db.query(models.RolePermission).filter(
            models.RolePermission.role_id == role_id
        ).delete(synchronize_session="fetch")
        self._save()
        return deleted

    def active_permission_ids_by_role(self, role_ids: List[int]) -> Dict[int, List[int]]:
        result = {role_id: [] for role_id in role_ids}
        if not role_ids:
            return result
        rows = self.db.query(models.RolePermission.role_id, models.RolePermission.permission_id).join(
            models.Permission, models.Permission.id == models.RolePermission.permission_id
        ).filter(
            models.RolePermission.role_id.in_(role_ids),
            models.RolePermission.is_active.is_(True),
            models.Permission.is_active.is_(True)
        ).order_by(models.RolePermission.permission_id.asc()).all()
        for role_id, permission_id in rows:
            result[role_id].append(permission_id)
        return result
