from typing import Optional
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IUserRoleRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyUserRoleRepository(SqlalchemyBaseRepository, IUserRoleRepository):
    model = models.UserRole
    filter_columns = ("user_id", "role_id", "is_active")

    def find_pair(self, user_id: int, role_id: int) -> Optional[models.UserRole]:
        return self.db.query(models.UserRole).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.role_id == role_id
        ).first()
