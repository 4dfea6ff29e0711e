# rbac_admin/services/book_service.py
import logging
from typing import Any, Dict

from rbac_admin.config import Settings
from rbac_admin.contracts.types import ListRequest, PaginatedResult
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IBookRepository
from rbac_admin.services.exceptions import (
    BookNotFoundError, InvalidArgumentError, InvalidStateError, ResourceAlreadyExistsError
)
from rbac_admin.services.resource_service import ResourceService

logger = logging.getLogger(__name__)


class BookService(ResourceService):
    """도서 목록 조회, 등록/수정/삭제, 대출/반납 상태 전이를 제공합니다."""
    MODEL = models.Book
    RESOURCE_TYPE = "Book"
    NOT_FOUND_ERROR = BookNotFoundError

    SORTABLE_FIELDS = ["id", "title", "author", "isbn", "price", "status", "createdAt", "updatedAt", "publishedAt"]
    FILTERABLE_FIELDS = ["status", "author", "minPrice", "maxPrice", "isbn"]
    SEARCHABLE_FIELDS = ["title", "author", "description", "isbn"]
    COLUMN_MAPPING = {
        "id": "id",
        "title": "title",
        "author": "author",
        "isbn": "isbn",
        "price": "price",
        "status": "status",
        "description": "description",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "publishedAt": "published_at",
        "minPrice": "min_price",
        "maxPrice": "max_price",
    }
    FILTER_TYPES = {"minPrice": float, "maxPrice": float}
    WRITABLE_FIELDS = ["title", "author", "isbn", "description", "price", "status", "publishedAt"]
    VALIDATION_RULES = {
        "title": "required|string|max:255",
        "author": "required|string|max:255",
        "isbn": "required|string|min:10|max:17",
        "description": "string|max:1000",
        "price": "numeric|min:0",
        "status": "in:AVAILABLE,BORROWED,MAINTENANCE",
        "publishedAt": "string",
    }

    def __init__(self, book_repo: IBookRepository, settings: Settings = None):
        """
        BookService를 초기화합니다.

        Args:
            book_repo: 도서 데이터에 접근하기 위한 리포지토리.
            settings: 페이지네이션/검색 한도 설정.
        """
        super().__init__(book_repo, "books", settings)

    def _validate(self, data: Dict[str, Any], entity: Any = None):
        """
        Raises:
            InvalidArgumentError: 필수 필드 누락, ISBN 길이, status, price 형식이 잘못되었을 때.
            ResourceAlreadyExistsError: 다른 도서가 같은 ISBN을 사용 중일 때.
        """
        if entity is None:
            for field in ("title", "author", "isbn"):
                value = data.get(field)
                if value is None or (isinstance(value, str) and not value.strip()):
                    raise InvalidArgumentError(f"{field} is required", field=field)

        isbn = data.get("isbn")
        if isinstance(isbn, str) and isbn:
            if len(isbn) < 10 or len(isbn) > 17:
                raise InvalidArgumentError("invalid ISBN format", field="isbn")
            existing = self.repo.find_by_isbn(isbn)
            if existing and (entity is None or existing.id != entity.id):
                raise ResourceAlreadyExistsError(f"Book with ISBN '{isbn}' already exists")

        if "status" in data:
            status = data["status"]
            if not isinstance(status, str):
                raise InvalidArgumentError("status must be a string", field="status")
            if status not in models.BOOK_STATUSES:
                raise InvalidArgumentError(
                    f"status must be one of: {', '.join(models.BOOK_STATUSES)}", field="status"
                )

        if "price" in data:
            self._parse_price(data["price"])

    @staticmethod
    def _parse_price(value: Any) -> float:
        if isinstance(value, bool):
            raise InvalidArgumentError("price must be a number", field="price")
        if isinstance(value, (int, float)):
            if value < 0:
                raise InvalidArgumentError("price cannot be negative", field="price")
            return float(value)
        if isinstance(value, str):
            try:
                price = float(value)
            except ValueError:
                raise InvalidArgumentError("invalid price format", field="price") from None
            if price < 0:
                raise InvalidArgumentError("invalid price format", field="price")
            return price
        raise InvalidArgumentError("price must be a number", field="price")

    def _to_column_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = super()._to_column_values(data)
        if "price" in values:
            values["price"] = self._parse_price(values["price"])
        return values

    def _serialize(self, book: models.Book) -> Dict[str, Any]:
        return {
            "id": book.id,
            "title": book.title,
            "author": book.author,
            "isbn": book.isbn,
            "description": book.description,
            "price": book.price,
            "status": book.status,
            "published_at": book.published_at,
            "created_at": book.created_at.isoformat() if book.created_at else None,
            "updated_at": book.updated_at.isoformat() if book.updated_at else None,
        }

    # --- 도서 전용 연산 ---
    def get_by_isbn(self, isbn: str) -> Dict[str, Any]:
        book = self.repo.find_by_isbn(isbn)
        if not book:
            raise BookNotFoundError(f"Book with ISBN '{isbn}' not found")
        return self._serialize(book)

    def get_available(self, req: ListRequest) -> PaginatedResult:
        req.filters = dict(req.filters, status="AVAILABLE")
        return self.get_list(req)

    def borrow_book(self, book_id: int) -> Dict[str, Any]:
        """
        대출 가능한 도서를 BORROWED 상태로 바꿉니다.

        Raises:
            BookNotFoundError: 해당 ID의 도서가 없을 때.
            InvalidStateError: 도서가 AVAILABLE 상태가 아닐 때.
        """
        book = self._find_or_raise(book_id)
        if book.status != "AVAILABLE":
            raise InvalidStateError("book is not available for borrowing")
        updated = self.repo.update(book, {"status": "BORROWED"})
        logger.info("Book id=%s borrowed", book_id)
        return self._serialize(updated)

    def return_book(self, book_id: int) -> Dict[str, Any]:
        """
        Raises:
            BookNotFoundError: 해당 ID의 도서가 없을 때.
            InvalidStateError: 도서가 BORROWED 상태가 아닐 때.
        """
        book = self._find_or_raise(book_id)
        if book.status != "BORROWED":
            raise InvalidStateError("book is not currently borrowed")
        updated = self.repo.update(book, {"status": "AVAILABLE"})
        logger.info("Book id=%s returned", book_id)
        return self._serialize(updated)
