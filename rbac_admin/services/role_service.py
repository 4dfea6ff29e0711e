# rbac_admin/services/role_service.py
import logging
from typing import Any, Dict

from rbac_admin.config import Settings
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IRoleRepository
from rbac_admin.services.exceptions import (
    ConflictError, InvalidArgumentError, ResourceAlreadyExistsError, RoleNotFoundError
)
from rbac_admin.services.resource_service import ResourceService

logger = logging.getLogger(__name__)

MIN_ROLE_LEVEL = 0
MAX_ROLE_LEVEL = 100


class RoleService(ResourceService):
    """
    역할의 목록 조회와 등록/수정/삭제를 제공합니다.

    parentId는 존재하는 역할을 가리켜야 하지만, 계층을 따라 권한을 계산하지는 않습니다.
    비활성 역할은 조회/수정/삭제 대상에서 제외되며, 삭제는 비활성화로 처리합니다.
    """
    MODEL = models.Role
    RESOURCE_TYPE = "Role"
    NOT_FOUND_ERROR = RoleNotFoundError

    SORTABLE_FIELDS = ["id", "name", "slug", "level", "createdAt"]
    FILTERABLE_FIELDS = ["level", "parentId"]
    SEARCHABLE_FIELDS = ["name", "slug", "description"]
    COLUMN_MAPPING = {
        "id": "id",
        "name": "name",
        "slug": "slug",
        "description": "description",
        "level": "level",
        "isActive": "is_active",
        "parentId": "parent_id",
        "createdAt": "created_at",
    }
    FILTER_TYPES = {"level": int, "parentId": int}
    WRITABLE_FIELDS = ["name", "slug", "description", "level", "isActive", "parentId"]
    VALIDATION_RULES = {
        "name": "required|string|max:255",
        "slug": "required|string|max:255",
        "description": "string",
        "level": "numeric|min:0|max:100",
        "isActive": "boolean",
        "parentId": "numeric",
    }

    def __init__(self, role_repo: IRoleRepository, settings: Settings = None):
        super().__init__(role_repo, "roles", settings)

    def _validate(self, data: Dict[str, Any], entity: Any = None):
        """
        Raises:
            InvalidArgumentError: 필수 필드 누락, level 범위, parentId가 잘못되었을 때.
            ResourceAlreadyExistsError: 다른 역할이 같은 slug를 사용 중일 때.
        """
        if entity is None:
            for field in ("name", "slug"):
                value = data.get(field)
                if value is None or (isinstance(value, str) and not value.strip()):
                    raise InvalidArgumentError(f"{field} is required", field=field)

        if "slug" in data:
            existing = self.repo.find_by_slug(data["slug"])
            if existing and (entity is None or existing.id != entity.id):
                raise ResourceAlreadyExistsError(f"Role with slug '{data['slug']}' already exists")

        if "level" in data:
            level = data["level"]
            if isinstance(level, bool) or not isinstance(level, int) or not MIN_ROLE_LEVEL <= level <= MAX_ROLE_LEVEL:
                raise InvalidArgumentError(
                    f"level must be an integer between {MIN_ROLE_LEVEL} and {MAX_ROLE_LEVEL}", field="level"
                )

        parent_id = data.get("parentId")
        if parent_id is not None:
            if entity is not None and parent_id == entity.id:
                raise InvalidArgumentError("role cannot be its own parent", field="parentId")
            if not self.repo.exists(parent_id):
                raise InvalidArgumentError(f"parent role {parent_id} does not exist", field="parentId")

    def _serialize(self, role: models.Role) -> Dict[str, Any]:
        return {
            "id": role.id,
            "name": role.name,
            "slug": role.slug,
            "description": role.description,
            "level": role.level,
            "is_active": role.is_active,
            "parent_id": role.parent_id,
            "created_at": role.created_at.isoformat() if role.created_at else None,
        }

    def get_by_slug(self, slug: str) -> Dict[str, Any]:
        role = self.repo.find_by_slug(slug)
        if not role:
            raise RoleNotFoundError(f"Role '{slug}' not found")
        return self._serialize(role)

    def _find_or_raise(self, entity_id: int) -> models.Role:
        role = self.repo.find_active(entity_id)
        if not role:
            raise RoleNotFoundError(f"Role with ID {entity_id} not found")
        return role

    def build_filter_query(self, filters: Dict[str, Any], strict: bool = False) -> Dict[str, Any]:
        conditions = super().build_filter_query(filters, strict=strict)
        conditions["is_active"] = True
        return conditions

    def delete(self, entity_id: int) -> bool:
        """
        역할을 비활성화합니다. 역할 행과 권한/사용자 할당 행은 그대로 남습니다.

        Raises:
            RoleNotFoundError: 역할이 없거나 이미 비활성일 때.
            ConflictError: 활성 상태로 할당된 사용자가 있을 때.
        """
        role = self._find_or_raise(entity_id)
        assigned = self.repo.count_active_users(entity_id)
        if assigned > 0:
            raise ConflictError(f"Cannot delete role: {assigned} users are assigned to this role")
        self.repo.update(role, {"is_active": False})
        logger.info("Deactivated role id=%s", entity_id)
        return True
