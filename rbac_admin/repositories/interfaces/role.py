from abc import abstractmethod
from typing import List, Optional
from rbac_admin.database import models
from .base import IPageableRepository

class IRoleRepository(IPageableRepository):
    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[models.Role]:
        """slug로 특정 역할을 조회합니다."""
        pass

    @abstractmethod
    def find_active(self, role_id: int) -> Optional[models.Role]:
        """활성 상태인 역할만 조회합니다. 비활성이면 None을 반환합니다."""
        pass

    @abstractmethod
    def list_active_ordered(self) -> List[models.Role]:
        """활성 역할을 level 내림차순, name 오름차순으로 조회합니다."""
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[models.Role]:
        """사용자에게 활성 상태로 할당된 활성 역할 목록을 조회합니다."""
        pass

    @abstractmethod
    def count_active_users(self, role_id: int) -> int:
        """역할에 활성 상태로 할당된 사용자 수를 반환합니다."""
        pass
