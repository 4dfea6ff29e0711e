# rbac_admin/app.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from rbac_admin.config import Settings, configure_logging, get_settings
from rbac_admin.contracts.controller_contracts import ResourceControllerContract
from rbac_admin.contracts.registry import ContractRegistry
from rbac_admin.contracts.service_contracts import CompleteCrudService, PermissionMatrixContract
from rbac_admin.controllers.permissions_controller import PermissionsController
from rbac_admin.controllers.resource_controller import ResourceController
from rbac_admin.database.database import SessionLocal
from rbac_admin.database.db_init import initialize_db
from rbac_admin.permissions.registry import PermissionRegistry, build_default_permission_registry
from rbac_admin.repositories.sqlalchemy import (
    SqlalchemyBookRepository, SqlalchemyPermissionRepository, SqlalchemyRolePermissionRepository,
    SqlalchemyRoleRepository, SqlalchemyUserRepository, SqlalchemyUserRoleRepository
)
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.book_service import BookService
from rbac_admin.services.permissions_service import PermissionsService
from rbac_admin.services.role_service import RoleService
from rbac_admin.services.user_service import UserService

logger = logging.getLogger(__name__)

PERMISSIONS_MATRIX = "permissions_matrix"


class Application:
    """한 세션에 묶인 서비스/컨트롤러 레지스트리 묶음. build_application()으로 만듭니다."""

    def __init__(
        self,
        db: Session,
        services: ContractRegistry,
        controllers: ContractRegistry,
        engines: ContractRegistry,
        authorization: AuthorizationService,
        permission_registry: PermissionRegistry,
        permissions_controller: PermissionsController,
    ):
        self.db = db
        self.services = services
        self.controllers = controllers
        self.engines = engines
        self.authorization = authorization
        self.permission_registry = permission_registry
        self.permissions_controller = permissions_controller

    def close(self):
        self.db.close()


def build_application(db: Optional[Session] = None, settings: Settings = None) -> Application:
    """
    리포지토리 -> 서비스 -> 컨트롤러 순으로 의존성을 만들고 각 레지스트리에 등록합니다.

    등록은 must_register로 수행되므로, 계약을 만족하지 못하는 구현이 있으면
    시작 단계에서 프로세스가 종료됩니다.
    """
    settings = settings or get_settings()
    db = db or SessionLocal()

    # 1. 의존성 생성 (Repositories -> Services)
    book_repo = SqlalchemyBookRepository(db)
    user_repo = SqlalchemyUserRepository(db)
    role_repo = SqlalchemyRoleRepository(db)
    permission_repo = SqlalchemyPermissionRepository(db)
    role_permission_repo = SqlalchemyRolePermissionRepository(db)
    user_role_repo = SqlalchemyUserRoleRepository(db)

    authorization = AuthorizationService(user_repo, role_repo, permission_repo, user_role_repo)
    permission_registry = build_default_permission_registry()

    services = ContractRegistry(CompleteCrudService, kind="service")
    services.must_register("books", BookService(book_repo, settings))
    services.must_register("users", UserService(user_repo, settings))
    services.must_register("roles", RoleService(role_repo, settings))

    engines = ContractRegistry(PermissionMatrixContract, kind="service")
    engines.must_register(PERMISSIONS_MATRIX, PermissionsService(role_repo, permission_repo, role_permission_repo))

    # 2. 컨트롤러 생성 (Services -> Controllers)
    controllers = ContractRegistry(ResourceControllerContract, kind="controller")
    for resource, label in (("books", "book"), ("users", "user"), ("roles", "role")):
        controllers.must_register(resource, ResourceController(
            label, resource, services.get(resource), authorization, permission_registry, settings
        ))

    permissions_controller = PermissionsController(engines.get(PERMISSIONS_MATRIX), authorization, settings)

    logger.info("Application ready: services=%s controllers=%s", services.list(), controllers.list())
    return Application(
        db, services, controllers, engines, authorization, permission_registry, permissions_controller
    )


def main():
    configure_logging()
    initialize_db()
    app = build_application()
    try:
        for name, result in app.services.validate_all().items():
            logger.info("service '%s' valid=%s", name, result.valid)
        for name, result in app.controllers.validate_all().items():
            logger.info("controller '%s' valid=%s", name, result.valid)
    finally:
        app.close()


if __name__ == '__main__':
    main()
