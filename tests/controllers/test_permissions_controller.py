# tests/controllers/test_permissions_controller.py
import pytest
from unittest.mock import MagicMock

from rbac_admin.contracts.service_contracts import PermissionMatrixContract
from rbac_admin.contracts.types import BulkAssignmentRequest, PermissionMatrix
from rbac_admin.controllers.base_controller import Request
from rbac_admin.controllers.permissions_controller import PermissionsController
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.exceptions import *

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_matrix_service() -> MagicMock:
    """PermissionMatrixContract에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=PermissionMatrixContract)

@pytest.fixture
def mock_authorization() -> MagicMock:
    return MagicMock(spec=AuthorizationService)

@pytest.fixture
def controller(mock_matrix_service, mock_authorization, settings) -> PermissionsController:
    return PermissionsController(mock_matrix_service, mock_authorization, settings)

# ===================================================================
#  핸들러(Handler) 테스트
# ===================================================================
class TestPermissionsController:
    def test_index_returns_matrix(self, controller, mock_matrix_service, mock_authorization):
        # === Arrange ===
        mock_matrix_service.get_permission_matrix.return_value = PermissionMatrix(matrix={5: [11]})

        # === Act ===
        status, body = controller.index(Request(user_id=1))

        # === Assert ===
        assert status == "200 OK"
        assert body["data"]["matrix"] == {5: [11]}
        mock_authorization.require_permission.assert_called_once_with(1, "permissions.view")

    def test_index_without_permission_gets_403(self, controller, mock_matrix_service, mock_authorization):
        mock_authorization.require_permission.side_effect = PermissionDeniedError("user 2 lacks permission 'permissions.view'")

        status, _ = controller.index(Request(user_id=2))

        assert status == "403 Forbidden"
        mock_matrix_service.get_permission_matrix.assert_not_called()

    def test_bulk_update_assign(self, controller, mock_matrix_service, mock_authorization):
        """일괄 부여 요청이 BulkAssignmentRequest로 변환되어 전달되는지 테스트합니다."""
        # === Arrange ===
        mock_matrix_service.bulk_assign_permissions.return_value = {"action": "assign", "role_id": 5, "processed": 2}

        # === Act ===
        status, body = controller.bulk_update(Request(user_id=1, body={"role_id": 5, "permission_ids": [10, 11]}))

        # === Assert ===
        assert status == "200 OK"
        assert body["message"] == "Permissions assigned successfully"
        mock_matrix_service.bulk_assign_permissions.assert_called_once_with(
            BulkAssignmentRequest(role_id=5, permission_ids=[10, 11], action="assign")
        )
        mock_authorization.require_permission.assert_called_once_with(1, "permissions.manage")

    def test_bulk_update_malformed_body_gets_400(self, controller, mock_matrix_service):
        status, body = controller.bulk_update(Request(user_id=1, body={"permission_ids": "all"}))

        assert status == "400 Bad Request"
        mock_matrix_service.bulk_assign_permissions.assert_not_called()

    def test_sync_success(self, controller, mock_matrix_service):
        mock_matrix_service.sync_role_permissions.return_value = [11]

        status, body = controller.sync(Request(user_id=1, route={"role_id": "5"}, body={"permission_ids": [11]}))

        assert status == "200 OK"
        assert body["data"] == {"role_id": 5, "permission_ids": [11]}
        mock_matrix_service.sync_role_permissions.assert_called_once_with(5, [11])

    def test_sync_rejects_non_integer_ids(self, controller, mock_matrix_service):
        status, body = controller.sync(Request(user_id=1, route={"role_id": "5"}, body={"permission_ids": ["11"]}))

        assert status == "400 Bad Request"
        assert body["errors"] == {"permission_ids": ["permission_ids must be a list of integers"]}
        mock_matrix_service.sync_role_permissions.assert_not_called()

    def test_sync_transaction_failure_gets_500(self, controller, mock_matrix_service):
        mock_matrix_service.sync_role_permissions.side_effect = TransactionFailureError("failed to sync permissions for role 5")

        status, body = controller.sync(Request(user_id=1, route={"role_id": "5"}, body={"permission_ids": [11, 99]}))

        assert status == "500 Internal Server Error"
        assert "role 5" in body["message"]

    def test_role_permissions_unknown_role_gets_404(self, controller, mock_matrix_service):
        mock_matrix_service.get_role_permissions.side_effect = RoleNotFoundError("role not found or inactive: 8")

        status, _ = controller.role_permissions(Request(user_id=1, route={"role_id": "8"}))

        assert status == "404 Not Found"
