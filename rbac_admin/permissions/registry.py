# rbac_admin/permissions/registry.py
import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

GATE_SEPARATOR = "."
SEEDER_SEPARATOR = "_"
WILDCARD = "*"


class StandardPermission(str, Enum):
    """리소스가 선언할 수 있는 표준 권한 종류."""
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    EXPORT = "EXPORT"
    BULK_DELETE = "BULK_DELETE"
    BULK_EDIT = "BULK_EDIT"
    CUSTOM = "CUSTOM"

    @property
    def action(self) -> str:
        return self.value.lower()


class CorePermissionAction(str, Enum):
    """시더가 'resource_action' 권한을 만들 때 사용하는 동작 목록."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"
    BULK_UPDATE = "bulk_update"
    BULK_DELETE = "bulk_delete"
    MANAGE = "manage"
    VIEW = "view"

    @property
    def display_name(self) -> str:
        return _ACTION_DISPLAY_NAMES[self]


class ServiceName(str, Enum):
    """권한이 부여되는 서비스(리소스) 이름."""
    BOOKS = "books"
    USERS = "users"
    ROLES = "roles"
    PERMISSIONS = "permissions"
    REPORTS = "reports"
    SYSTEM = "system"
    BUNDLES = "bundles"

    @property
    def display_name(self) -> str:
        return _SERVICE_DISPLAY_NAMES[self]

    @property
    def actions(self) -> List[CorePermissionAction]:
        """서비스가 지원하는 동작. 별도 정의가 없으면 모든 동작을 지원합니다."""
        return _SERVICE_ACTIONS.get(self, list(CorePermissionAction))


_ACTION_DISPLAY_NAMES = {
    CorePermissionAction.CREATE: "Create",
    CorePermissionAction.READ: "Read/List",
    CorePermissionAction.UPDATE: "Update/Edit",
    CorePermissionAction.DELETE: "Delete",
    CorePermissionAction.EXPORT: "Export",
    CorePermissionAction.BULK_UPDATE: "Bulk Update",
    CorePermissionAction.BULK_DELETE: "Bulk Delete",
    CorePermissionAction.MANAGE: "Full Management",
    CorePermissionAction.VIEW: "View",
}

_SERVICE_DISPLAY_NAMES = {
    ServiceName.BOOKS: "Books Management",
    ServiceName.USERS: "User Management",
    ServiceName.ROLES: "Role Management",
    ServiceName.PERMISSIONS: "Permission Management",
    ServiceName.REPORTS: "Reports & Analytics",
    ServiceName.SYSTEM: "System Administration",
    ServiceName.BUNDLES: "SME Management",
}

_A = CorePermissionAction
_SERVICE_ACTIONS = {
    ServiceName.BOOKS: [_A.CREATE, _A.READ, _A.UPDATE, _A.DELETE, _A.EXPORT, _A.BULK_UPDATE, _A.BULK_DELETE, _A.VIEW],
    ServiceName.BUNDLES: [_A.CREATE, _A.READ, _A.UPDATE, _A.DELETE, _A.EXPORT, _A.BULK_UPDATE, _A.BULK_DELETE, _A.VIEW],
    ServiceName.USERS: [_A.CREATE, _A.READ, _A.UPDATE, _A.DELETE, _A.EXPORT, _A.VIEW, _A.MANAGE],
    ServiceName.ROLES: [_A.CREATE, _A.READ, _A.UPDATE, _A.DELETE, _A.VIEW, _A.MANAGE],
    ServiceName.PERMISSIONS: [_A.READ, _A.UPDATE, _A.VIEW, _A.MANAGE],
    ServiceName.REPORTS: [_A.VIEW, _A.EXPORT],
    ServiceName.SYSTEM: [_A.VIEW, _A.MANAGE],
}

# 긴 동작부터 비교 ('bulk_update'가 'update'보다 먼저)
_SEEDER_ACTIONS = sorted([a.value for a in CorePermissionAction] + [WILDCARD], key=len, reverse=True)


# --- slug helpers ---

def generate_permission_slug(resource: str, action: str) -> str:
    """게이트 형식 slug('resource.action')를 만듭니다."""
    if isinstance(action, Enum):
        action = action.value
    return f"{resource}{GATE_SEPARATOR}{action}"


def build_permission_slug(resource: str, action: str) -> str:
    """시더 형식 slug('resource_action')를 만듭니다."""
    if isinstance(resource, Enum):
        resource = resource.value
    if isinstance(action, Enum):
        action = action.value
    return f"{resource}{SEEDER_SEPARATOR}{action}"


def parse_permission_slug(slug: str) -> Tuple[str, str]:
    """
    slug를 (resource, action)으로 분리합니다.

    게이트 형식을 먼저 확인합니다. 시더 형식은 알려진 동작(CorePermissionAction, '*') 중
    가장 긴 접미사를 action으로 보므로 리소스 이름에 '_'가 있어도 됩니다.
    ('books_bulk_update' -> ('books', 'bulk_update'), 'user_roles_view' -> ('user_roles', 'view'))
    알려진 동작으로 끝나지 않으면 첫 번째 '_'를 기준으로 나누고,
    구분자가 없으면 action은 빈 문자열입니다.
    """
    if GATE_SEPARATOR in slug:
        resource, action = slug.split(GATE_SEPARATOR, 1)
        return resource, action
    for action in _SEEDER_ACTIONS:
        suffix = SEEDER_SEPARATOR + action
        if slug.endswith(suffix) and len(slug) > len(suffix):
            return slug[:-len(suffix)], action
    if SEEDER_SEPARATOR in slug:
        resource, action = slug.split(SEEDER_SEPARATOR, 1)
        return resource, action
    return slug, ""


def slug_aliases(slug: str) -> List[str]:
    """같은 권한을 가리키는 두 표기('books.create', 'books_create')를 모두 반환합니다."""
    resource, action = parse_permission_slug(slug)
    if not action:
        return [slug]
    aliases = [generate_permission_slug(resource, action), build_permission_slug(resource, action)]
    if slug in aliases:
        aliases.remove(slug)
    return [slug] + aliases


def wildcard_matches(granted: str, required: str) -> bool:
    """
    부여된 권한 slug가 와일드카드('*')를 포함할 때 요구된 slug와 세그먼트 단위로 비교합니다.
    ('books.*'는 'books.create'와 'books_create' 모두에 일치합니다.)
    """
    if WILDCARD not in granted:
        return False
    granted_parts = parse_permission_slug(granted)
    required_parts = parse_permission_slug(required)
    return all(g == WILDCARD or g == r for g, r in zip(granted_parts, required_parts))


# --- resource registry ---

class CustomPermissionDefinition(BaseModel):
    name: str
    slug: str
    description: str = ""


class ResourcePermissionConfig(BaseModel):
    """리소스 하나가 노출하는 권한 선언."""
    resource: str
    display_name: str
    category: str
    enabled_permissions: List[StandardPermission] = Field(default_factory=list)
    custom_permissions: List[CustomPermissionDefinition] = Field(default_factory=list)


class PermissionRegistry:
    """리소스 이름 -> 선언된 표준/사용자 정의 권한. 시작 시 채우고 이후에는 읽기만 합니다."""

    def __init__(self):
        self._resources: Dict[str, ResourcePermissionConfig] = {}

    def register_resource(self, config: ResourcePermissionConfig):
        if config.resource in self._resources:
            logger.debug("Overwriting permission config for resource '%s'", config.resource)
        self._resources[config.resource] = config

    def get_resource(self, resource: str) -> Optional[ResourcePermissionConfig]:
        return self._resources.get(resource)

    def all_resources(self) -> Dict[str, ResourcePermissionConfig]:
        return dict(self._resources)

    def permission_slugs(self, resource: str) -> List[str]:
        """리소스에 선언된 권한을 게이트 형식 slug 목록으로 반환합니다. 미등록 리소스는 빈 목록입니다."""
        config = self._resources.get(resource)
        if config is None:
            return []
        slugs = [
            generate_permission_slug(resource, permission.action)
            for permission in config.enabled_permissions
            if permission is not StandardPermission.CUSTOM
        ]
        slugs.extend(generate_permission_slug(resource, custom.slug) for custom in config.custom_permissions)
        return slugs


def build_default_permission_registry() -> PermissionRegistry:
    """관리 화면에서 다루는 리소스(books, users, roles)의 권한 선언을 등록합니다."""
    crud = [StandardPermission.CREATE, StandardPermission.READ, StandardPermission.UPDATE, StandardPermission.DELETE]
    registry = PermissionRegistry()
    registry.register_resource(ResourcePermissionConfig(
        resource=ServiceName.BOOKS.value,
        display_name=ServiceName.BOOKS.display_name,
        category="books",
        enabled_permissions=crud + [StandardPermission.EXPORT, StandardPermission.BULK_DELETE,
                                    StandardPermission.BULK_EDIT, StandardPermission.CUSTOM],
        custom_permissions=[
            CustomPermissionDefinition(name="Borrow Books", slug="borrow", description="Borrow books from the library"),
            CustomPermissionDefinition(name="Return Books", slug="return", description="Return borrowed books"),
        ],
    ))
    registry.register_resource(ResourcePermissionConfig(
        resource=ServiceName.USERS.value,
        display_name=ServiceName.USERS.display_name,
        category="users",
        enabled_permissions=crud + [StandardPermission.EXPORT],
    ))
    registry.register_resource(ResourcePermissionConfig(
        resource=ServiceName.ROLES.value,
        display_name=ServiceName.ROLES.display_name,
        category="roles",
        enabled_permissions=crud,
    ))
    return registry
