# rbac_admin/services/permissions_service.py
import logging
from typing import Any, Dict, List, Optional

from rbac_admin.contracts.service_contracts import PermissionMatrixContract
from rbac_admin.contracts.types import (
    BulkAssignmentRequest, MatrixStats, PermissionGroup, PermissionMatrix
)
from rbac_admin.database import models
from rbac_admin.permissions.catalog import GATE_CATALOG, GatePermission
from rbac_admin.repositories.interfaces import (
    IPermissionRepository, IRolePermissionRepository, IRoleRepository
)
from rbac_admin.services.exceptions import (
    BulkOperationError, InvalidArgumentError, PermissionNotFoundError, RoleNotFoundError,
    TransactionFailureError
)

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("assign", "revoke")


def serialize_role(role: models.Role) -> Dict[str, Any]:
    return {
        "id": role.id,
        "name": role.name,
        "slug": role.slug,
        "description": role.description,
        "level": role.level,
        "is_active": role.is_active,
        "parent_id": role.parent_id,
    }


def serialize_permission(permission: models.Permission) -> Dict[str, Any]:
    return {
        "id": permission.id,
        "name": permission.name,
        "slug": permission.slug,
        "description": permission.description,
        "category": permission.category,
        "resource": permission.resource,
        "action": permission.action,
        "is_active": permission.is_active,
    }


class PermissionsService(PermissionMatrixContract):
    """
    역할 x 권한 행렬을 조회하고, 권한 부여/회수, 일괄 처리, 역할 권한 동기화를 제공합니다.

    sync_role_permissions만 트랜잭션으로 묶이며, bulk_assign_permissions는
    항목별로 순차 처리되어 중간 실패 시 앞선 변경이 그대로 남습니다.
    """

    def __init__(
        self,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        role_permission_repo: IRolePermissionRepository,
        catalog: Optional[List[GatePermission]] = None,
    ):
        """
        PermissionsService를 초기화합니다.

        Args:
            role_repo: 역할 데이터에 접근하기 위한 리포지토리.
            permission_repo: 권한 데이터에 접근하기 위한 리포지토리.
            role_permission_repo: 역할-권한 할당 데이터에 접근하기 위한 리포지토리 (트랜잭션 경계 포함).
            catalog: DB와 동기화할 게이트 권한 목록. 없으면 GATE_CATALOG를 사용합니다.
        """
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.role_permission_repo = role_permission_repo
        self.catalog = GATE_CATALOG if catalog is None else catalog

    def get_permission_matrix(self) -> PermissionMatrix:
        """
        게이트 권한을 동기화한 뒤 전체 행렬을 구성합니다.

        역할은 level 내림차순/이름 오름차순, 권한은 category/action 오름차순으로 정렬됩니다.
        조회 중 하나라도 실패하면 예외가 그대로 전파되며 부분 결과는 반환하지 않습니다.
        """
        self.sync_permissions_from_gates()

        roles = self.role_repo.list_active_ordered()
        permissions = self.permission_repo.list_active_ordered()
        matrix = self.role_permission_repo.active_permission_ids_by_role([role.id for role in roles])

        role_rows = []
        for role in roles:
            permission_ids = matrix.get(role.id, [])
            row = serialize_role(role)
            row["permission_ids"] = permission_ids
            row["permission_count"] = len(permission_ids)
            role_rows.append(row)

        stats = MatrixStats(
            total_roles=len(roles),
            total_permissions=len(permissions),
            total_assignments=sum(len(ids) for ids in matrix.values()),
            active_roles=sum(1 for role in roles if role.is_active),
            active_permissions=sum(1 for permission in permissions if permission.is_active),
        )
        groups = [
            PermissionGroup(category=category, permissions=items)
            for category, items in sorted(self._group_by_category(permissions).items())
        ]
        return PermissionMatrix(roles=role_rows, permissions=groups, matrix=matrix, stats=stats)

    def assign_permission_to_role(self, role_id: int, permission_id: int) -> bool:
        """
        역할에 권한을 부여합니다. 이미 활성 할당이 있으면 아무 것도 하지 않습니다.

        Returns:
            새로 부여(또는 재활성화)했으면 True, 이미 부여되어 있었으면 False.

        Raises:
            RoleNotFoundError: 역할이 없거나 비활성일 때.
            PermissionNotFoundError: 권한이 없거나 비활성일 때.
        """
        self.validate_permission_assignment(role_id, permission_id)
        existing = self.role_permission_repo.find_pair(role_id, permission_id)
        if existing:
            if existing.is_active:
                return False
            self.role_permission_repo.update(existing, {"is_active": True})
            return True
        self.role_permission_repo.create(models.RolePermission(role_id=role_id, permission_id=permission_id))
        logger.debug("Assigned permission %s to role %s", permission_id, role_id)
        return True

    def revoke_permission_from_role(self, role_id: int, permission_id: int) -> bool:
        """할당을 제거합니다. 할당이 없어도 오류가 아니며, 제거 여부를 반환합니다."""
        removed = self.role_permission_repo.delete_pair(role_id, permission_id)
        if removed:
            logger.debug("Revoked permission %s from role %s", permission_id, role_id)
        return removed

    def bulk_assign_permissions(self, request: BulkAssignmentRequest) -> Dict[str, Any]:
        """
        권한 목록을 순서대로 부여하거나 회수합니다. 트랜잭션으로 묶지 않습니다.
        빈 목록은 아무 것도 하지 않고 성공합니다.

        Raises:
            InvalidArgumentError: action이 'assign'/'revoke'가 아닐 때.
            BulkOperationError: 중간에 실패했을 때. 앞서 처리된 항목은 그대로 남습니다.
        """
        if request.action not in BULK_ACTIONS:
            raise InvalidArgumentError(f"invalid action: {request.action}", field="action")

        handler = self.assign_permission_to_role if request.action == "assign" else self.revoke_permission_from_role
        total = len(request.permission_ids)
        succeeded = 0
        for permission_id in request.permission_ids:
            try:
                handler(request.role_id, permission_id)
            except Exception as e:
                logger.warning("Bulk %s for role %s stopped at permission %s (%d of %d succeeded)",
                               request.action, request.role_id, permission_id, succeeded, total)
                raise BulkOperationError(request.action, succeeded, total, failed_id=permission_id, cause=e) from e
            succeeded += 1
        return {"action": request.action, "role_id": request.role_id, "processed": succeeded}

    def sync_role_permissions(self, role_id: int, permission_ids: List[int]) -> List[int]:
        """
        역할의 권한 집합을 permission_ids로 완전히 교체합니다.

        기존 할당 삭제와 새 할당 생성이 하나의 트랜잭션에서 수행되며, 중간에 실패하면
        롤백되어 동기화 이전 상태가 유지됩니다. 중복된 ID는 한 번만 할당됩니다.

        Returns:
            할당된 권한 ID 목록 (입력 순서, 중복 제거).

        Raises:
            RoleNotFoundError: 역할이 없거나 비활성일 때 (트랜잭션 시작 전).
            TransactionFailureError: 트랜잭션 도중 실패하여 롤백되었을 때.
        """
        if not self.role_repo.find_active(role_id):
            raise RoleNotFoundError(f"role not found or inactive: {role_id}")

        unique_ids = list(dict.fromkeys(permission_ids))

        self.role_permission_repo.begin()
        try:
            self.role_permission_repo.delete_by_role(role_id)
            for permission_id in unique_ids:
                if not self.permission_repo.find_active(permission_id):
                    raise PermissionNotFoundError(f"permission not found or inactive: {permission_id}")
                self.role_permission_repo.create(
                    models.RolePermission(role_id=role_id, permission_id=permission_id)
                )
            self.role_permission_repo.commit()
        except Exception as e:
            self.role_permission_repo.rollback()
            logger.error("Rolled back permission sync for role %s: %s", role_id, e)
            raise TransactionFailureError(f"failed to sync permissions for role {role_id}: {e}") from e

        logger.info("Synced %d permissions for role %s", len(unique_ids), role_id)
        return unique_ids

    def sync_permissions_from_gates(self) -> Dict[str, int]:
        """
        게이트 카탈로그를 slug 기준으로 permissions 테이블에 반영(upsert)합니다.

        Returns:
            {'created': 생성 수, 'updated': 갱신 수}
        """
        created = updated = 0
        for gate in self.catalog:
            values = {
                "name": gate.name,
                "category": gate.category,
                "resource": gate.resource,
                "action": gate.action,
                "description": gate.description,
                "is_active": True,
            }
            existing = self.permission_repo.find_by_slug(gate.slug)
            if existing is None:
                self.permission_repo.create(models.Permission(slug=gate.slug, **values))
                created += 1
                continue
            changed = {key: value for key, value in values.items() if getattr(existing, key) != value}
            if changed:
                self.permission_repo.update(existing, changed)
                updated += 1

        if created or updated:
            logger.info("Gate permission sync: %d created, %d updated", created, updated)
        return {"created": created, "updated": updated}

    def validate_permission_assignment(self, role_id: int, permission_id: int):
        """
        Raises:
            RoleNotFoundError: 역할이 없거나 비활성일 때.
            PermissionNotFoundError: 권한이 없거나 비활성일 때.
        """
        if not self.role_repo.find_active(role_id):
            raise RoleNotFoundError(f"role not found or inactive: {role_id}")
        if not self.permission_repo.find_active(permission_id):
            raise PermissionNotFoundError(f"permission not found or inactive: {permission_id}")

    def get_role_permissions(self, role_id: int) -> List[Dict[str, Any]]:
        if not self.role_repo.find_active(role_id):
            raise RoleNotFoundError(f"role not found or inactive: {role_id}")
        return [serialize_permission(p) for p in self.permission_repo.list_for_role(role_id)]

    def get_permissions_by_category(self) -> Dict[str, List[Dict[str, Any]]]:
        return self._group_by_category(self.permission_repo.list_active_ordered())

    @staticmethod
    def _group_by_category(permissions: List[models.Permission]) -> Dict[str, List[Dict[str, Any]]]:
        groups: Dict[str, List[Dict[str, Any]]] = {}
        for permission in permissions:
            groups.setdefault(permission.category, []).append(serialize_permission(permission))
        return groups
