# rbac_admin/controllers/resource_controller.py
import logging
from typing import Any, Dict, List, Optional

from rbac_admin.config import Settings
from rbac_admin.contracts.controller_contracts import ResourceControllerContract
from rbac_admin.contracts.service_contracts import CompleteCrudService
from rbac_admin.contracts.types import ControllerMetadata
from rbac_admin.controllers.base_controller import BaseCrudController, Request, Response
from rbac_admin.permissions.registry import PermissionRegistry, generate_permission_slug
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.exceptions import (
    InvalidArgumentError, NotFoundError, PermissionDeniedError, UnauthenticatedError
)

logger = logging.getLogger(__name__)

# 핸들러 -> 게이트 권한 동작
ACTION_PERMISSIONS = {
    "index": "viewAny",
    "show": "view",
    "store": "create",
    "update": "update",
    "delete": "delete",
    "bulk_destroy": "delete",
}


class ResourceController(BaseCrudController, ResourceControllerContract):
    """
    CompleteCrudService 하나를 감싸는 CRUD 컨트롤러.

    모든 핸들러는 행위자를 확인하고 '<resource>.<action>' 권한을 검사한 뒤 서비스를 호출합니다.
    """

    def __init__(
        self,
        resource_type: str,
        permission_resource: str,
        service: CompleteCrudService,
        authorization: AuthorizationService,
        permission_registry: Optional[PermissionRegistry] = None,
        settings: Settings = None,
    ):
        """
        Args:
            resource_type: 응답 메시지에 쓰이는 단수형 이름 (예: 'book').
            permission_resource: 권한 slug의 리소스 부분 (예: 'books').
            service: 위임할 리소스 서비스.
            authorization: 권한 판정 서비스.
            permission_registry: 메타데이터에 노출할 리소스 권한 선언.
        """
        super().__init__(resource_type, settings)
        self.permission_resource = permission_resource
        self.service = service
        self.authorization = authorization
        self.permission_registry = permission_registry

    # --- 인가 ---
    def require_authentication(self, request: Request) -> int:
        if request.user_id is None:
            raise UnauthenticatedError("authentication required")
        return request.user_id

    def get_current_user(self, request: Request) -> Optional[Dict[str, Any]]:
        if request.user_id is None:
            return None
        return self.authorization.get_user(request.user_id)

    def check_permission(self, request: Request, action: str) -> bool:
        if request.user_id is None:
            return False
        slug = generate_permission_slug(self.permission_resource, action)
        return self.authorization.has_permission(request.user_id, slug)

    def build_permissions_map(self, request: Request) -> Dict[str, bool]:
        return {
            "canView": self.check_permission(request, "viewAny"),
            "canCreate": self.check_permission(request, "create"),
            "canEdit": self.check_permission(request, "update"),
            "canDelete": self.check_permission(request, "delete"),
            "canManage": self.check_permission(request, "manage"),
            "canExport": self.check_permission(request, "export"),
        }

    def _authorize(self, request: Request, handler: str):
        self.require_authentication(request)
        action = ACTION_PERMISSIONS[handler]
        if not self.check_permission(request, action):
            raise PermissionDeniedError(
                f"permission '{generate_permission_slug(self.permission_resource, action)}' required"
            )

    # --- 검증 ---
    def get_validation_rules(self) -> Dict[str, Any]:
        return self.service.get_validation_rules()

    def _required_fields(self) -> List[str]:
        return [
            field for field, rule in self.get_validation_rules().items()
            if "required" in str(rule).split("|")
        ]

    def validate_create_request(self, request: Request) -> Dict[str, Any]:
        """필드 이름 -> 오류 메시지 목록. 비어 있으면 유효한 요청입니다."""
        body = request.body
        if not isinstance(body, dict):
            return {"body": ["request body must be a JSON object"]}
        errors = {}
        for field in self._required_fields():
            value = body.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field] = [f"The {field} field is required."]
        return errors

    def validate_update_request(self, request: Request) -> Dict[str, Any]:
        body = request.body
        if not isinstance(body, dict):
            return {"body": ["request body must be a JSON object"]}
        if not body:
            return {"body": ["at least one field is required"]}
        return {}

    # --- CRUD 핸들러 ---
    def index(self, request: Request) -> Response:
        try:
            self._authorize(request, "index")
            req = self.validate_pagination_request(request)
            result = self.service.get_list(req)
            return self.build_paginated_response(result, req)
        except Exception as e:
            return self.handle_exception(e)

    def show(self, request: Request) -> Response:
        try:
            self._authorize(request, "show")
            entity_id = self.validate_id(request)
        except Exception as e:
            return self.handle_exception(e)
        try:
            return self.success_response(self.service.get_by_id(entity_id))
        except NotFoundError:
            return self.resource_not_found_response(entity_id)
        except Exception as e:
            return self.handle_exception(e)

    def store(self, request: Request) -> Response:
        try:
            self._authorize(request, "store")
            errors = self.validate_create_request(request)
            if errors:
                return self.validation_error_response(errors)
            return self.resource_created_response(self.service.create(request.body))
        except InvalidArgumentError as e:
            return self.validation_error_response({e.field or "body": [str(e)]})
        except Exception as e:
            return self.handle_exception(e)

    def update(self, request: Request) -> Response:
        try:
            self._authorize(request, "update")
            entity_id = self.validate_id(request)
        except Exception as e:
            return self.handle_exception(e)
        try:
            errors = self.validate_update_request(request)
            if errors:
                return self.validation_error_response(errors)
            return self.resource_updated_response(self.service.update(entity_id, request.body))
        except NotFoundError:
            return self.resource_not_found_response(entity_id)
        except InvalidArgumentError as e:
            return self.validation_error_response({e.field or "body": [str(e)]})
        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: Request) -> Response:
        try:
            self._authorize(request, "delete")
            entity_id = self.validate_id(request)
        except Exception as e:
            return self.handle_exception(e)
        try:
            self.service.delete(entity_id)
            return self.resource_deleted_response(entity_id)
        except NotFoundError:
            return self.resource_not_found_response(entity_id)
        except Exception as e:
            return self.handle_exception(e)

    def bulk_destroy(self, request: Request) -> Response:
        """body의 'ids' 목록을 순서대로 삭제합니다. 중간 실패 시 처리된 개수를 함께 응답합니다."""
        try:
            self._authorize(request, "bulk_destroy")
            ids = (request.body or {}).get("ids") if isinstance(request.body, dict) else None
            if not isinstance(ids, list):
                raise InvalidArgumentError("ids must be a list of integers", field="ids")
            deleted = self.service.bulk_delete(ids)
            return self.success_response({"deleted": deleted}, f"{deleted} {self.permission_resource} deleted successfully")
        except Exception as e:
            return self.handle_exception(e)

    # --- 메타데이터 ---
    def get_metadata(self) -> ControllerMetadata:
        if self.permission_registry is not None:
            permissions = self.permission_registry.permission_slugs(self.permission_resource)
        else:
            permissions = []
        return self.generate_metadata(list(ACTION_PERMISSIONS), permissions, self.get_validation_rules())
