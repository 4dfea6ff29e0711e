from abc import abstractmethod
from typing import Optional
from rbac_admin.database import models
from .base import IPageableRepository

class IBookRepository(IPageableRepository):
    @abstractmethod
    def find_by_isbn(self, isbn: str) -> Optional[models.Book]:
        """ISBN으로 특정 도서를 조회합니다."""
        pass
