# rbac_admin/services/user_service.py
import hashlib
import re
from typing import Any, Dict

from rbac_admin.config import Settings
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IUserRepository
from rbac_admin.services.exceptions import InvalidArgumentError, ResourceAlreadyExistsError, UserNotFoundError
from rbac_admin.services.resource_service import ResourceService

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class UserService(ResourceService):
    """관리 화면 사용자 계정의 목록 조회와 등록/수정/삭제를 제공합니다. 비밀번호는 해시하여 저장합니다."""
    MODEL = models.User
    RESOURCE_TYPE = "User"
    NOT_FOUND_ERROR = UserNotFoundError

    SORTABLE_FIELDS = ["id", "name", "email", "isActive", "createdAt", "updatedAt"]
    FILTERABLE_FIELDS = ["isActive", "isSuperAdmin", "email"]
    SEARCHABLE_FIELDS = ["name", "email"]
    COLUMN_MAPPING = {
        "id": "id",
        "name": "name",
        "email": "email",
        "isActive": "is_active",
        "isSuperAdmin": "is_super_admin",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    FILTER_TYPES = {"isActive": bool, "isSuperAdmin": bool}
    WRITABLE_FIELDS = ["name", "email", "isActive", "isSuperAdmin"]
    VALIDATION_RULES = {
        "name": "required|string|max:255",
        "email": "required|email|max:255",
        "password": "required|string|min:8",
        "isActive": "boolean",
        "isSuperAdmin": "boolean",
    }

    def __init__(self, user_repo: IUserRepository, settings: Settings = None):
        super().__init__(user_repo, "users", settings)

    def _validate(self, data: Dict[str, Any], entity: Any = None):
        """
        Raises:
            InvalidArgumentError: 필수 필드 누락, 이름 길이, 이메일 형식, 비밀번호 길이가 잘못되었을 때.
            ResourceAlreadyExistsError: 다른 사용자가 같은 이메일을 사용 중일 때.
        """
        if entity is None:
            for field in ("name", "email", "password"):
                value = data.get(field)
                if value is None or (isinstance(value, str) and not value.strip()):
                    raise InvalidArgumentError(f"{field} is required", field=field)

        if "name" in data:
            name = data["name"]
            if not isinstance(name, str) or not 2 <= len(name.strip()) <= 255:
                raise InvalidArgumentError("name must be between 2 and 255 characters", field="name")

        if "email" in data:
            email = data["email"]
            if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
                raise InvalidArgumentError("invalid email format", field="email")
            if len(email) > 255:
                raise InvalidArgumentError("email cannot exceed 255 characters", field="email")
            existing = self.repo.find_by_email(email)
            if existing and (entity is None or existing.id != entity.id):
                raise ResourceAlreadyExistsError("email already exists")

        if data.get("password") is not None:
            password = data["password"]
            if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
                raise InvalidArgumentError(
                    f"password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
                )

    def _to_column_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = super()._to_column_values(data)
        if data.get("password"):
            values["password_hash"] = hash_password(data["password"])
        return values

    def _serialize(self, user: models.User) -> Dict[str, Any]:
        # 비밀번호 해시는 응답에 포함하지 않습니다.
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "is_active": user.is_active,
            "is_super_admin": user.is_super_admin,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "updated_at": user.updated_at.isoformat() if user.updated_at else None,
        }

    def get_by_email(self, email: str) -> Dict[str, Any]:
        user = self.repo.find_by_email(email)
        if not user:
            raise UserNotFoundError(f"User with email '{email}' not found")
        return self._serialize(user)

