# rbac_admin/controllers/permissions_controller.py
import logging

from pydantic import ValidationError

from rbac_admin.config import Settings
from rbac_admin.contracts.service_contracts import PermissionMatrixContract
from rbac_admin.contracts.types import BulkAssignmentRequest
from rbac_admin.controllers.base_controller import BaseCrudController, Request, Response
from rbac_admin.permissions.registry import generate_permission_slug
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.exceptions import InvalidArgumentError, UnauthenticatedError

logger = logging.getLogger(__name__)

VIEW_PERMISSION = generate_permission_slug("permissions", "view")
MANAGE_PERMISSION = generate_permission_slug("permissions", "manage")


class PermissionsController(BaseCrudController):
    """권한 행렬 조회, 일괄 부여/회수, 역할 권한 동기화 핸들러."""

    def __init__(self, matrix_service: PermissionMatrixContract, authorization: AuthorizationService,
                 settings: Settings = None):
        super().__init__("permission", settings)
        self.matrix_service = matrix_service
        self.authorization = authorization

    def _authorize(self, request: Request, slug: str):
        if request.user_id is None:
            raise UnauthenticatedError("authentication required")
        self.authorization.require_permission(request.user_id, slug)

    def index(self, request: Request) -> Response:
        try:
            self._authorize(request, VIEW_PERMISSION)
            matrix = self.matrix_service.get_permission_matrix()
            return self.success_response(matrix.model_dump())
        except Exception as e:
            return self.handle_exception(e)

    def role_permissions(self, request: Request) -> Response:
        try:
            self._authorize(request, VIEW_PERMISSION)
            role_id = self.validate_id(request, "role_id")
            return self.success_response(self.matrix_service.get_role_permissions(role_id))
        except Exception as e:
            return self.handle_exception(e)

    def bulk_update(self, request: Request) -> Response:
        """body: {role_id, permission_ids, action}"""
        try:
            self._authorize(request, MANAGE_PERMISSION)
            try:
                payload = BulkAssignmentRequest.model_validate(request.body or {})
            except ValidationError as e:
                raise InvalidArgumentError(f"invalid bulk assignment request: {e.error_count()} error(s)",
                                           field="body") from e
            result = self.matrix_service.bulk_assign_permissions(payload)
            message = "Permissions assigned successfully" if payload.action == "assign" else "Permissions revoked successfully"
            return self.success_response(result, message)
        except Exception as e:
            return self.handle_exception(e)

    def sync(self, request: Request) -> Response:
        """route: role_id, body: {permission_ids: [...]} 로 역할의 권한 집합을 교체합니다."""
        try:
            self._authorize(request, MANAGE_PERMISSION)
            role_id = self.validate_id(request, "role_id")
            body = request.body if isinstance(request.body, dict) else {}
            permission_ids = body.get("permission_ids")
            if not isinstance(permission_ids, list) or not all(isinstance(i, int) for i in permission_ids):
                raise InvalidArgumentError("permission_ids must be a list of integers", field="permission_ids")
            synced = self.matrix_service.sync_role_permissions(role_id, permission_ids)
            return self.success_response({"role_id": role_id, "permission_ids": synced},
                                         "Role permissions synced successfully")
        except Exception as e:
            return self.handle_exception(e)
