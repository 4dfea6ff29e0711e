# tests/integration/test_permission_matrix.py
import pytest
from sqlalchemy.orm import Session

from rbac_admin.contracts.types import BulkAssignmentRequest
from rbac_admin.permissions.catalog import GATE_CATALOG
from rbac_admin.repositories.sqlalchemy import (
    SqlalchemyPermissionRepository, SqlalchemyRolePermissionRepository, SqlalchemyRoleRepository
)
from rbac_admin.services.exceptions import BulkOperationError, TransactionFailureError
from rbac_admin.services.permissions_service import PermissionsService

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def role_permission_repo(db_session: Session) -> SqlalchemyRolePermissionRepository:
    return SqlalchemyRolePermissionRepository(db_session)

@pytest.fixture
def matrix_service(db_session: Session, role_permission_repo) -> PermissionsService:
    """실제 SQLAlchemy 리포지토리로 구성한 행렬 엔진."""
    return PermissionsService(
        SqlalchemyRoleRepository(db_session),
        SqlalchemyPermissionRepository(db_session),
        role_permission_repo,
    )

def assigned_ids(role_permission_repo: SqlalchemyRolePermissionRepository, role_id: int):
    return role_permission_repo.active_permission_ids_by_role([role_id])[role_id]

# ===================================================================
#  행렬 엔진 통합 테스트
# ===================================================================
class TestPermissionMatrixIntegration:
    def test_assign_twice_keeps_single_row(self, matrix_service, role_permission_repo, role_factory,
                                           permission_factory):
        """같은 권한을 두 번 부여해도 활성 행은 하나만 존재하는지 테스트합니다."""
        # === Arrange ===
        role = role_factory("editor")
        permission = permission_factory("books.update")

        # === Act ===
        first = matrix_service.assign_permission_to_role(role.id, permission.id)
        second = matrix_service.assign_permission_to_role(role.id, permission.id)

        # === Assert ===
        assert (first, second) == (True, False)
        assert role_permission_repo.count(role_id=role.id, permission_id=permission.id) == 1

    def test_bulk_assign_then_sync(self, matrix_service, role_factory, permission_factory):
        """[10, 11]을 일괄 부여한 뒤 [11]로 동기화하면 행렬에 11만 남는지 테스트합니다."""
        # === Arrange ===
        role = role_factory("editor", level=50)
        p10 = permission_factory("books.update")
        p11 = permission_factory("books.delete")

        # === Act ===
        matrix_service.bulk_assign_permissions(
            BulkAssignmentRequest(role_id=role.id, permission_ids=[p10.id, p11.id], action="assign")
        )
        matrix_service.sync_role_permissions(role.id, [p11.id])
        matrix = matrix_service.get_permission_matrix()

        # === Assert ===
        assert matrix.matrix[role.id] == [p11.id]
        row = next(r for r in matrix.roles if r["id"] == role.id)
        assert row["permission_ids"] == [p11.id]
        assert row["permission_count"] == 1

    def test_sync_failure_restores_previous_assignments(self, matrix_service, role_permission_repo, role_factory,
                                                        permission_factory):
        """동기화 도중 실패하면 동기화 이전의 할당 집합이 그대로 남는지 테스트합니다."""
        # === Arrange ===
        role = role_factory("editor")
        a, b, c = (permission_factory(slug) for slug in ("books.view", "books.update", "books.delete"))
        matrix_service.sync_role_permissions(role.id, [a.id, b.id])

        # === Act ===
        # 시나리오: c는 존재하지만 9999는 존재하지 않아 두 번째 항목에서 실패함
        with pytest.raises(TransactionFailureError):
            matrix_service.sync_role_permissions(role.id, [c.id, 9999])

        # === Assert ===
        assert assigned_ids(role_permission_repo, role.id) == sorted([a.id, b.id])

    def test_bulk_partial_failure_is_not_rolled_back(self, matrix_service, role_permission_repo, role_factory,
                                                     permission_factory):
        role = role_factory("editor")
        a = permission_factory("books.view")

        with pytest.raises(BulkOperationError) as exc_info:
            matrix_service.bulk_assign_permissions(
                BulkAssignmentRequest(role_id=role.id, permission_ids=[a.id, 9999], action="assign")
            )

        assert exc_info.value.succeeded == 1
        assert assigned_ids(role_permission_repo, role.id) == [a.id]

    def test_inactive_permission_is_hidden_from_matrix(self, matrix_service, role_factory, permission_factory,
                                                       role_permission_repo, db_session):
        # === Arrange ===
        role = role_factory("editor")
        permission = permission_factory("archive.purge")
        matrix_service.assign_permission_to_role(role.id, permission.id)
        SqlalchemyPermissionRepository(db_session).update(permission, {"is_active": False})

        # === Act ===
        matrix = matrix_service.get_permission_matrix()

        # === Assert ===
        assert matrix.matrix[role.id] == []
        assert all(p["id"] != permission.id for group in matrix.permissions for p in group.permissions)

    def test_matrix_syncs_gate_catalog_and_orders_rows(self, matrix_service, role_factory):
        # === Arrange ===
        role_factory("guest", level=10, name="Guest")
        role_factory("admin", level=80, name="Administrator")
        role_factory("auditor", level=80, name="Auditor")

        # === Act ===
        matrix = matrix_service.get_permission_matrix()

        # === Assert ===
        assert [row["slug"] for row in matrix.roles] == ["admin", "auditor", "guest"]
        assert matrix.stats.total_permissions == len(GATE_CATALOG)
        categories = [group.category for group in matrix.permissions]
        assert categories == sorted(categories)
        # 검증: 두 번째 조회에서는 새로 만들 게이트 권한이 없음
        assert matrix_service.sync_permissions_from_gates() == {"created": 0, "updated": 0}
