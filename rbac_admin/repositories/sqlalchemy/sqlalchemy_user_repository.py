from typing import Optional
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IUserRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyUserRepository(SqlalchemyBaseRepository, IUserRepository):
    model = models.User
    search_columns = ("name", "email")
    filter_columns = ("is_active", "is_super_admin", "email")

    def find_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.email == email).first()
