from .role import Role
from .permission import Permission
from .association import RolePermission, UserRole
from .user import User
from .book import Book, BOOK_STATUSES

__all__ = [
    "Role", "Permission", "RolePermission", "UserRole", "User", "Book", "BOOK_STATUSES",
]
