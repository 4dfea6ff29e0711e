import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from rbac_admin.config import Settings, configure_logging, get_settings
from rbac_admin.permissions.registry import ServiceName, build_permission_slug, slug_aliases
from rbac_admin.repositories.sqlalchemy import (
    SqlalchemyPermissionRepository, SqlalchemyRolePermissionRepository, SqlalchemyRoleRepository,
    SqlalchemyUserRepository, SqlalchemyUserRoleRepository
)
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.permissions_service import PermissionsService
from rbac_admin.services.user_service import hash_password
from .database import engine, SessionLocal, Base
from .models import Permission, Role, User

logger = logging.getLogger(__name__)

SUPER_ADMIN_SLUG = "super-admin"

# (slug, name, description, level)
DEFAULT_ROLES = [
    ("super-admin", "Super Administrator", "Full system access with all permissions", 100),
    ("admin", "Administrator", "Administrative access to most features", 80),
    ("librarian", "Librarian", "Full book management access", 60),
    ("moderator", "Moderator", "Limited administrative access", 40),
    ("member", "Member", "Regular user with borrowing privileges", 20),
    ("guest", "Guest", "Basic read-only access", 10),
]

# 자식 slug -> 부모 slug. 저장만 하며 권한 계산에는 쓰지 않습니다.
ROLE_HIERARCHY = {
    "admin": "librarian",
    "librarian": "moderator",
    "moderator": "member",
    "member": "guest",
}

DEFAULT_ROLE_GRANTS = {
    "admin": [
        "books.viewAny", "books.view", "books.create", "books.update", "books.delete", "books.manage", "books.export",
        "users.viewAny", "users.view", "users.create", "users.update", "users.manage",
        "roles.viewAny", "roles.view", "roles.assign",
        "reports.view", "reports.export", "reports.create",
    ],
    "librarian": [
        "books.viewAny", "books.view", "books.create", "books.update", "books.delete", "books.manage", "books.export",
        "users.viewAny", "users.view",
        "reports.view", "reports.export",
    ],
    "moderator": [
        "books.viewAny", "books.view", "books.create", "books.update", "books.borrow", "books.return",
        "users.view",
        "reports.view",
    ],
    "member": ["books.viewAny", "books.view", "books.borrow", "books.return"],
    "guest": ["books.viewAny", "books.view"],
}


def _seed_roles(role_repo: SqlalchemyRoleRepository) -> Dict[str, Role]:
    roles = {}
    for slug, name, description, level in DEFAULT_ROLES:
        role = role_repo.find_by_slug(slug)
        if role is None:
            role = role_repo.create(Role(slug=slug, name=name, description=description, level=level, is_active=True))
            logger.info("Created role '%s' (level %d)", slug, level)
        roles[slug] = role
    return roles


def _apply_hierarchy(role_repo: SqlalchemyRoleRepository, roles: Dict[str, Role]):
    for child_slug, parent_slug in ROLE_HIERARCHY.items():
        child, parent = roles.get(child_slug), roles.get(parent_slug)
        if child is None or parent is None:
            continue
        if child.parent_id != parent.id:
            role_repo.update(child, {"parent_id": parent.id})


def _seed_service_permissions(permission_repo: SqlalchemyPermissionRepository) -> int:
    """ServiceName x 서비스별 동작으로 'resource_action' 권한을 만듭니다. 이미 있는 slug는 건너뜁니다."""
    created = 0
    for service in ServiceName:
        for action in service.actions:
            slug = build_permission_slug(service, action)
            if permission_repo.find_by_slug(slug):
                continue
            permission_repo.create(Permission(
                name=f"{action.display_name} {service.display_name}",
                slug=slug,
                description=f"{action.display_name} {service.value} in the system",
                category=service.value,
                resource=service.value,
                action=action.value,
                is_active=True,
            ))
            created += 1
    if created:
        logger.info("Created %d service permissions", created)
    return created


def _resolve_permission(permission_repo: SqlalchemyPermissionRepository, slug: str) -> Optional[Permission]:
    """slug 또는 그 다른 표기로 등록된 활성 권한을 찾습니다."""
    for permission in permission_repo.find_by_slugs(slug_aliases(slug)):
        if permission.is_active:
            return permission
    return None


def _grant_defaults(
    permission_repo: SqlalchemyPermissionRepository,
    matrix: PermissionsService,
    roles: Dict[str, Role],
) -> int:
    granted = 0
    super_admin = roles[SUPER_ADMIN_SLUG]
    for permission in permission_repo.list_active_ordered():
        if matrix.assign_permission_to_role(super_admin.id, permission.id):
            granted += 1

    for role_slug, slugs in DEFAULT_ROLE_GRANTS.items():
        role = roles[role_slug]
        for slug in slugs:
            permission = _resolve_permission(permission_repo, slug)
            if permission is None:
                logger.debug("Skipping unknown permission '%s' for role '%s'", slug, role_slug)
                continue
            if matrix.assign_permission_to_role(role.id, permission.id):
                granted += 1
    return granted


def _seed_admin_user(db: Session, authorization: AuthorizationService, settings: Settings) -> Optional[User]:
    user_repo = SqlalchemyUserRepository(db)
    if user_repo.count() > 0:
        return None
    admin = user_repo.create(User(
        name=settings.BOOTSTRAP_ADMIN_NAME,
        email=settings.BOOTSTRAP_ADMIN_EMAIL,
        password_hash=hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD),
        is_active=True,
        is_super_admin=True,
    ))
    authorization.assign_role_to_user(admin.id, SUPER_ADMIN_SLUG, notes="Assigned during RBAC seeding")
    logger.info("Created bootstrap admin user '%s'", admin.email)
    return admin


def seed_rbac(db: Session, settings: Settings = None) -> Dict[str, int]:
    """
    기본 역할, 역할 계층, 권한, 기본 권한 할당을 삽입합니다. 여러 번 실행해도 결과가 같습니다.

    Returns:
        생성/부여된 항목 수 요약.
    """
    settings = settings or get_settings()
    role_repo = SqlalchemyRoleRepository(db)
    permission_repo = SqlalchemyPermissionRepository(db)
    role_permission_repo = SqlalchemyRolePermissionRepository(db)
    matrix = PermissionsService(role_repo, permission_repo, role_permission_repo)
    authorization = AuthorizationService(
        SqlalchemyUserRepository(db), role_repo, permission_repo, SqlalchemyUserRoleRepository(db)
    )

    roles = _seed_roles(role_repo)
    _apply_hierarchy(role_repo, roles)
    service_permissions = _seed_service_permissions(permission_repo)
    gate_sync = matrix.sync_permissions_from_gates()
    granted = _grant_defaults(permission_repo, matrix, roles)
    admin = _seed_admin_user(db, authorization, settings)

    return {
        "roles": len(roles),
        "service_permissions": service_permissions,
        "gate_permissions": gate_sync["created"],
        "grants": granted,
        "admin_users": 1 if admin else 0,
    }


def initialize_db(db: Session = None, bind=None, settings: Settings = None) -> Dict[str, int]:
    """
    테이블을 생성하고 RBAC 기본 데이터를 삽입합니다.

    Args:
        db: 사용할 세션. 없으면 SessionLocal()로 만들고 작업 후 닫습니다.
        bind: 테이블을 만들 엔진/커넥션. 없으면 기본 engine을 사용합니다.
        settings: 부트스트랩 관리자 계정 등의 설정.
    """
    logger.info("Initializing database")
    Base.metadata.create_all(bind=bind if bind is not None else engine)

    owns_session = db is None
    db = db or SessionLocal()
    try:
        summary = seed_rbac(db, settings)
        logger.info("RBAC bootstrap complete: %s", summary)
        return summary
    except Exception:
        logger.exception("RBAC bootstrap failed")
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == '__main__':
    configure_logging()
    initialize_db()
