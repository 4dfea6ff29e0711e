from abc import abstractmethod
from typing import Dict, List, Optional
from rbac_admin.database import models
from .base import IRepository

class IRolePermissionRepository(IRepository):
    @abstractmethod
    def find_pair(self, role_id: int, permission_id: int) -> Optional[models.RolePermission]:
        """(role_id, permission_id) 쌍의 할당 행을 조회합니다."""
        pass

    @abstractmethod
    def delete_pair(self, role_id: int, permission_id: int) -> bool:
        """할당 행을 삭제합니다. 행이 없으면 False를 반환합니다."""
        pass

    @abstractmethod
    def delete_by_role(self, role_id: int) -> int:
        """역할의 모든 할당 행을 삭제하고 삭제된 행 수를 반환합니다."""
        pass

    @abstractmethod
    def active_permission_ids_by_role(self, role_ids: List[int]) -> Dict[int, List[int]]:
        """역할 ID -> 활성 권한 ID 목록. 할당이 없는 역할은 빈 목록입니다."""
        pass
