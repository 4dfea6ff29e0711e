from typing import Any, Optional
from sqlalchemy.orm import Query
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IBookRepository
from .sqlalchemy_base_repository import SqlalchemyBaseRepository

class SqlalchemyBookRepository(SqlalchemyBaseRepository, IBookRepository):
    model = models.Book
    search_columns = ("title", "author", "description", "isbn")
    filter_columns = ("status", "isbn")

    def _apply_filter(self, query: Query, key: str, value: Any) -> Query:
        if key == "author":
            return query.filter(models.Book.author.ilike(f"%{value}%"))
        if key == "min_price":
            return query.filter(models.Book.price >= value)
        if key == "max_price":
            return query.filter(models.Book.price <= value)
        return super()._apply_filter(query, key, value)

    def find_by_isbn(self, isbn: str) -> Optional[models.Book]:
        return self.db.query(models.Book).filter(models.Book.isbn == isbn).first()
