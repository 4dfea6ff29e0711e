# tests/services/test_permissions_service.py
import pytest
from unittest.mock import ANY, MagicMock

from rbac_admin.contracts.types import BulkAssignmentRequest
from rbac_admin.database import models
from rbac_admin.permissions.catalog import GatePermission
from rbac_admin.repositories.interfaces import (
    IPermissionRepository, IRolePermissionRepository, IRoleRepository
)
from rbac_admin.services.exceptions import *
from rbac_admin.services.permissions_service import PermissionsService

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_role_repo() -> MagicMock:
    """IRoleRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IRoleRepository)

@pytest.fixture
def mock_permission_repo() -> MagicMock:
    """IPermissionRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IPermissionRepository)

@pytest.fixture
def mock_role_permission_repo() -> MagicMock:
    """IRolePermissionRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IRolePermissionRepository)

@pytest.fixture
def catalog():
    return [GatePermission("View Books", "books.view", "books", "books", "view", "View specific books")]

@pytest.fixture
def permissions_service(
    mock_role_repo: MagicMock,
    mock_permission_repo: MagicMock,
    mock_role_permission_repo: MagicMock,
    catalog,
) -> PermissionsService:
    """테스트에 사용될 PermissionsService 인스턴스를 생성하고, 의존성을 주입합니다."""
    return PermissionsService(mock_role_repo, mock_permission_repo, mock_role_permission_repo, catalog)

def make_role(role_id: int, level: int = 10) -> models.Role:
    return models.Role(id=role_id, name=f"role-{role_id}", slug=f"role-{role_id}", level=level, is_active=True)

def make_permission(permission_id: int, category: str = "books", action: str = "view") -> models.Permission:
    return models.Permission(id=permission_id, name=f"p{permission_id}", slug=f"{category}.{action}",
                             category=category, resource=category, action=action, is_active=True)

# ===================================================================
#  권한 부여/회수(Assign/Revoke) 테스트
# ===================================================================
class TestAssignRevoke:
    def test_assign_creates_new_row(self, permissions_service, mock_role_repo, mock_permission_repo,
                                    mock_role_permission_repo):
        """할당이 없을 때 새 역할-권한 행이 생성되는지 테스트합니다."""
        # === Arrange ===
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.return_value = make_permission(10)
        mock_role_permission_repo.find_pair.return_value = None

        # === Act ===
        result = permissions_service.assign_permission_to_role(5, 10)

        # === Assert ===
        assert result is True
        mock_role_permission_repo.create.assert_called_once_with(ANY)
        created = mock_role_permission_repo.create.call_args.args[0]
        assert (created.role_id, created.permission_id) == (5, 10)

    def test_assign_is_idempotent(self, permissions_service, mock_role_repo, mock_permission_repo,
                                  mock_role_permission_repo):
        """이미 활성 할당이 있으면 아무 것도 만들지 않는지 테스트합니다."""
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.return_value = make_permission(10)
        mock_role_permission_repo.find_pair.return_value = models.RolePermission(role_id=5, permission_id=10, is_active=True)

        assert permissions_service.assign_permission_to_role(5, 10) is False
        mock_role_permission_repo.create.assert_not_called()
        mock_role_permission_repo.update.assert_not_called()

    def test_assign_reactivates_inactive_row(self, permissions_service, mock_role_repo, mock_permission_repo,
                                             mock_role_permission_repo):
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.return_value = make_permission(10)
        link = models.RolePermission(role_id=5, permission_id=10, is_active=False)
        mock_role_permission_repo.find_pair.return_value = link

        assert permissions_service.assign_permission_to_role(5, 10) is True
        mock_role_permission_repo.update.assert_called_once_with(link, {"is_active": True})

    def test_assign_to_inactive_role_fails(self, permissions_service, mock_role_repo, mock_role_permission_repo):
        mock_role_repo.find_active.return_value = None

        with pytest.raises(RoleNotFoundError):
            permissions_service.assign_permission_to_role(5, 10)
        mock_role_permission_repo.create.assert_not_called()

    def test_assign_unknown_permission_fails(self, permissions_service, mock_role_repo, mock_permission_repo):
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.return_value = None

        with pytest.raises(PermissionNotFoundError):
            permissions_service.assign_permission_to_role(5, 999)

    def test_revoke_missing_assignment_is_not_an_error(self, permissions_service, mock_role_permission_repo):
        mock_role_permission_repo.delete_pair.return_value = False

        assert permissions_service.revoke_permission_from_role(5, 10) is False
        mock_role_permission_repo.delete_pair.assert_called_once_with(5, 10)

# ===================================================================
#  일괄 처리(Bulk Assign) 테스트
# ===================================================================
class TestBulkAssign:
    def test_invalid_action_is_rejected_before_any_change(self, permissions_service, mock_role_permission_repo):
        """'assign'/'revoke' 이외의 action은 아무 변경 없이 거부되는지 테스트합니다."""
        request = BulkAssignmentRequest(role_id=5, permission_ids=[1], action="grant")

        with pytest.raises(InvalidArgumentError, match="invalid action: grant"):
            permissions_service.bulk_assign_permissions(request)
        mock_role_permission_repo.create.assert_not_called()

    def test_empty_permission_list_is_a_no_op(self, permissions_service, mock_role_repo, mock_role_permission_repo):
        result = permissions_service.bulk_assign_permissions(BulkAssignmentRequest(role_id=5, permission_ids=[]))

        assert result == {"action": "assign", "role_id": 5, "processed": 0}
        mock_role_repo.find_active.assert_not_called()
        mock_role_permission_repo.create.assert_not_called()

    def test_partial_failure_keeps_earlier_assignments(self, permissions_service, mock_role_repo,
                                                      mock_permission_repo, mock_role_permission_repo):
        """두 번째 권한에서 실패하면 첫 번째 할당은 남고 BulkOperationError가 발생하는지 테스트합니다."""
        # === Arrange ===
        mock_role_repo.find_active.return_value = make_role(5)
        # 시나리오: 권한 10은 존재하고 11은 존재하지 않음
        mock_permission_repo.find_active.side_effect = lambda pid: make_permission(pid) if pid == 10 else None
        mock_role_permission_repo.find_pair.return_value = None

        # === Act & Assert ===
        with pytest.raises(BulkOperationError, match="1 of 3 succeeded") as exc_info:
            permissions_service.bulk_assign_permissions(
                BulkAssignmentRequest(role_id=5, permission_ids=[10, 11, 12], action="assign")
            )

        assert exc_info.value.failed_id == 11
        assert mock_role_permission_repo.create.call_count == 1
        # 검증: 일괄 처리는 트랜잭션을 사용하지 않음
        mock_role_permission_repo.begin.assert_not_called()
        mock_role_permission_repo.rollback.assert_not_called()

    def test_bulk_revoke(self, permissions_service, mock_role_permission_repo):
        mock_role_permission_repo.delete_pair.return_value = True

        result = permissions_service.bulk_assign_permissions(
            BulkAssignmentRequest(role_id=5, permission_ids=[10, 11], action="revoke")
        )

        assert result == {"action": "revoke", "role_id": 5, "processed": 2}

# ===================================================================
#  역할 권한 동기화(Sync) 테스트
# ===================================================================
class TestSyncRolePermissions:
    def test_sync_replaces_assignments_in_transaction(self, permissions_service, mock_role_repo,
                                                      mock_permission_repo, mock_role_permission_repo):
        # === Arrange ===
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.side_effect = make_permission

        # === Act ===
        synced = permissions_service.sync_role_permissions(5, [11, 12, 11])

        # === Assert ===
        assert synced == [11, 12]
        mock_role_permission_repo.begin.assert_called_once()
        mock_role_permission_repo.delete_by_role.assert_called_once_with(5)
        assert mock_role_permission_repo.create.call_count == 2
        mock_role_permission_repo.commit.assert_called_once()
        mock_role_permission_repo.rollback.assert_not_called()

    def test_sync_rolls_back_on_failure(self, permissions_service, mock_role_repo, mock_permission_repo,
                                        mock_role_permission_repo):
        """중간에 실패하면 롤백하고 TransactionFailureError를 발생시키는지 테스트합니다."""
        # === Arrange ===
        mock_role_repo.find_active.return_value = make_role(5)
        mock_permission_repo.find_active.side_effect = lambda pid: make_permission(pid) if pid == 11 else None

        # === Act & Assert ===
        with pytest.raises(TransactionFailureError) as exc_info:
            permissions_service.sync_role_permissions(5, [11, 99])

        assert isinstance(exc_info.value.__cause__, PermissionNotFoundError)
        mock_role_permission_repo.rollback.assert_called_once()
        mock_role_permission_repo.commit.assert_not_called()

    def test_sync_unknown_role_fails_before_transaction(self, permissions_service, mock_role_repo,
                                                        mock_role_permission_repo):
        mock_role_repo.find_active.return_value = None

        with pytest.raises(RoleNotFoundError):
            permissions_service.sync_role_permissions(5, [1])
        mock_role_permission_repo.begin.assert_not_called()

# ===================================================================
#  행렬 조회 / 게이트 동기화 테스트
# ===================================================================
class TestMatrix:
    def test_sync_from_gates_creates_and_updates(self, permissions_service, mock_permission_repo):
        # 시나리오: 카탈로그의 slug가 DB에 없음
        mock_permission_repo.find_by_slug.return_value = None

        assert permissions_service.sync_permissions_from_gates() == {"created": 1, "updated": 0}
        created = mock_permission_repo.create.call_args.args[0]
        assert created.slug == "books.view"

    def test_sync_from_gates_updates_changed_fields_only(self, permissions_service, mock_permission_repo):
        existing = models.Permission(id=1, name="Old name", slug="books.view", category="books", resource="books",
                                     action="view", description="View specific books", is_active=True)
        mock_permission_repo.find_by_slug.return_value = existing

        assert permissions_service.sync_permissions_from_gates() == {"created": 0, "updated": 1}
        mock_permission_repo.update.assert_called_once_with(existing, {"name": "View Books"})

    def test_get_permission_matrix(self, permissions_service, mock_role_repo, mock_permission_repo,
                                   mock_role_permission_repo):
        """역할 행, 카테고리별 그룹, 통계가 올바르게 구성되는지 테스트합니다."""
        # === Arrange ===
        mock_permission_repo.find_by_slug.return_value = make_permission(1)
        mock_role_repo.list_active_ordered.return_value = [make_role(1, level=100), make_role(2, level=10)]
        mock_permission_repo.list_active_ordered.return_value = [
            make_permission(1, "books", "view"), make_permission(2, "users", "view")
        ]
        mock_role_permission_repo.active_permission_ids_by_role.return_value = {1: [1, 2], 2: []}

        # === Act ===
        matrix = permissions_service.get_permission_matrix()

        # === Assert ===
        assert [row["id"] for row in matrix.roles] == [1, 2]
        assert matrix.roles[0]["permission_count"] == 2
        assert [group.category for group in matrix.permissions] == ["books", "users"]
        assert matrix.matrix == {1: [1, 2], 2: []}
        assert matrix.stats.total_roles == 2
        assert matrix.stats.total_assignments == 2

    def test_matrix_propagates_repository_failure(self, permissions_service, mock_role_repo, mock_permission_repo):
        mock_permission_repo.find_by_slug.return_value = make_permission(1)
        mock_role_repo.list_active_ordered.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            permissions_service.get_permission_matrix()
