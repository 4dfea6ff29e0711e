from abc import abstractmethod
from typing import Optional
from rbac_admin.database import models
from .base import IPageableRepository

class IUserRepository(IPageableRepository):
    @abstractmethod
    def find_by_email(self, email: str) -> Optional[models.User]:
        """이메일로 특정 사용자를 조회합니다."""
        pass
