from abc import abstractmethod
from typing import List, Optional
from rbac_admin.database import models
from .base import IRepository

class IPermissionRepository(IRepository):
    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[models.Permission]:
        pass

    @abstractmethod
    def find_by_slugs(self, slugs: List[str]) -> List[models.Permission]:
        pass

    @abstractmethod
    def find_active(self, permission_id: int) -> Optional[models.Permission]:
        """활성 상태인 권한만 조회합니다."""
        pass

    @abstractmethod
    def list_active_ordered(self) -> List[models.Permission]:
        """활성 권한을 category 오름차순, action 오름차순으로 조회합니다."""
        pass

    @abstractmethod
    def list_for_role(self, role_id: int) -> List[models.Permission]:
        """역할에 활성 상태로 할당된 활성 권한 목록을 조회합니다."""
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[models.Permission]:
        """
        사용자의 활성 역할들을 통해 부여된 활성 권한의 합집합을 조회합니다.
        역할의 parent_id는 따라가지 않습니다.
        """
        pass
