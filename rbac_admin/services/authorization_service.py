# rbac_admin/services/authorization_service.py
import logging
from typing import Any, Dict, List, Optional

from rbac_admin.database import models
from rbac_admin.permissions.registry import slug_aliases, wildcard_matches
from rbac_admin.repositories.interfaces import (
    IPermissionRepository, IRoleRepository, IUserRepository, IUserRoleRepository
)
from rbac_admin.services.exceptions import PermissionDeniedError, RoleNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)


class AuthorizationService:
    """
    행위자(user_id)와 권한 slug가 주어졌을 때 허용 여부를 판정하고, 사용자-역할 할당을 관리합니다.

    인증(세션, 토큰)은 다루지 않습니다. 역할의 parent_id는 권한 계산에 사용하지 않습니다.
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        user_role_repo: IUserRoleRepository,
    ):
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.user_role_repo = user_role_repo

    def _active_user(self, user_id: int) -> Optional[models.User]:
        user = self.user_repo.find(user_id)
        if not user or not user.is_active:
            return None
        return user

    def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        """활성 사용자의 요약 정보. 없거나 비활성이면 None."""
        user = self._active_user(user_id)
        if user is None:
            return None
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "is_super_admin": user.is_super_admin,
            "roles": self.get_user_roles(user_id),
        }

    def get_user_roles(self, user_id: int) -> List[str]:
        return [role.slug for role in self.role_repo.list_for_user(user_id)]

    def get_user_permissions(self, user_id: int) -> List[str]:
        """사용자의 활성 역할들을 통해 부여된 활성 권한 slug 목록 (정렬됨)."""
        return sorted({permission.slug for permission in self.permission_repo.list_for_user(user_id)})

    def has_permission(self, user_id: int, slug: str) -> bool:
        """
        사용자가 slug 권한을 가지는지 판정합니다.

        슈퍼 관리자는 항상 허용됩니다. 그 외에는 활성 역할들의 활성 권한 합집합에서
        slug 자체, 다른 표기('books.create' <-> 'books_create'), 또는 와일드카드
        ('books.*', '*.read')로 일치하는 권한이 있으면 허용합니다.
        """
        user = self._active_user(user_id)
        if user is None:
            return False
        if user.is_super_admin:
            return True

        granted = self.get_user_permissions(user_id)
        candidates = set(slug_aliases(slug))
        return any(g in candidates or wildcard_matches(g, slug) for g in granted)

    def require_permission(self, user_id: int, slug: str):
        """
        Raises:
            PermissionDeniedError: 사용자가 slug 권한을 가지지 않을 때.
        """
        if not self.has_permission(user_id, slug):
            logger.info("Denied '%s' for user %s", slug, user_id)
            raise PermissionDeniedError(f"user {user_id} lacks permission '{slug}'")

    def has_role(self, user_id: int, role_slug: str) -> bool:
        if self._active_user(user_id) is None:
            return False
        return role_slug in self.get_user_roles(user_id)

    def assign_role_to_user(self, user_id: int, role_slug: str, notes: Optional[str] = None) -> bool:
        """
        사용자에게 역할을 할당합니다. 이미 활성 할당이 있으면 아무 것도 하지 않습니다.

        Returns:
            새로 할당(또는 재활성화)했으면 True.

        Raises:
            UserNotFoundError: 사용자를 찾을 수 없을 때.
            RoleNotFoundError: 역할이 없거나 비활성일 때.
        """
        if not self.user_repo.find(user_id):
            raise UserNotFoundError(f"User with ID {user_id} not found")
        role = self.role_repo.find_by_slug(role_slug)
        if not role or not role.is_active:
            raise RoleNotFoundError(f"role not found or inactive: {role_slug}")

        existing = self.user_role_repo.find_pair(user_id, role.id)
        if existing:
            if existing.is_active:
                return False
            self.user_role_repo.update(existing, {"is_active": True, "notes": notes})
        else:
            self.user_role_repo.create(models.UserRole(user_id=user_id, role_id=role.id, notes=notes))
        logger.info("Assigned role '%s' to user %s", role_slug, user_id)
        return True

    def remove_role_from_user(self, user_id: int, role_slug: str) -> bool:
        role = self.role_repo.find_by_slug(role_slug)
        if not role:
            raise RoleNotFoundError(f"Role '{role_slug}' not found")
        existing = self.user_role_repo.find_pair(user_id, role.id)
        if not existing:
            return False
        self.user_role_repo.delete(existing)
        logger.info("Removed role '%s' from user %s", role_slug, user_id)
        return True

    def can_manage_role(self, actor_role_slug: str, target_role_slug: str) -> bool:
        """actor 역할의 level이 target 역할보다 엄격하게 높을 때만 True."""
        actor = self.role_repo.find_by_slug(actor_role_slug)
        target = self.role_repo.find_by_slug(target_role_slug)
        if not actor or not target:
            return False
        return actor.is_higher_than(target)
