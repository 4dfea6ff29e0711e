from abc import abstractmethod
from typing import Optional
from rbac_admin.database import models
from .base import IRepository

class IUserRoleRepository(IRepository):
    @abstractmethod
    def find_pair(self, user_id: int, role_id: int) -> Optional[models.UserRole]:
        """(user_id, role_id) 쌍의 할당 행을 조회합니다."""
        pass
