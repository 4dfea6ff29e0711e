# rbac_admin/contracts/controller_contracts.py
"""
컨트롤러 계약. 각 핸들러는 Request를 받아 (상태 줄, 응답 봉투) 튜플을 반환합니다.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from .types import ListRequest, PaginatedResult, PaginationConfig

Response = Tuple[str, Dict[str, Any]]


class CrudControllerContract(ABC):
    @abstractmethod
    def index(self, request) -> Response:
        pass

    @abstractmethod
    def show(self, request) -> Response:
        pass

    @abstractmethod
    def store(self, request) -> Response:
        pass

    @abstractmethod
    def update(self, request) -> Response:
        pass

    @abstractmethod
    def delete(self, request) -> Response:
        pass


class PaginationControllerContract(ABC):
    @abstractmethod
    def validate_pagination_request(self, request) -> ListRequest:
        pass

    @abstractmethod
    def get_pagination_defaults(self) -> PaginationConfig:
        pass

    @abstractmethod
    def build_paginated_response(self, result: PaginatedResult, req: ListRequest) -> Response:
        pass


class ValidationControllerContract(ABC):
    @abstractmethod
    def validate_create_request(self, request) -> Dict[str, Any]:
        pass

    @abstractmethod
    def validate_update_request(self, request) -> Dict[str, Any]:
        pass

    @abstractmethod
    def validate_id(self, request, param_name: str = "id") -> int:
        pass

    @abstractmethod
    def get_validation_rules(self) -> Dict[str, Any]:
        pass


class ResponseControllerContract(ABC):
    @abstractmethod
    def success_response(self, data: Any = None, message: Optional[str] = None, meta: Any = None) -> Response:
        pass

    @abstractmethod
    def created_response(self, data: Any = None, message: Optional[str] = None) -> Response:
        pass

    @abstractmethod
    def no_content_response(self) -> Response:
        pass

    @abstractmethod
    def bad_request_response(self, message: str, errors: Any = None) -> Response:
        pass

    @abstractmethod
    def forbidden_response(self, message: str = "Forbidden") -> Response:
        pass

    @abstractmethod
    def not_found_response(self, message: str = "Not found") -> Response:
        pass

    @abstractmethod
    def validation_error_response(self, errors: Dict[str, Any], message: str = "Validation failed") -> Response:
        pass

    @abstractmethod
    def server_error_response(self, message: str = "Internal server error") -> Response:
        pass

    @abstractmethod
    def resource_not_found_response(self, entity_id: Any) -> Response:
        pass

    @abstractmethod
    def resource_created_response(self, data: Any) -> Response:
        pass

    @abstractmethod
    def resource_updated_response(self, data: Any) -> Response:
        pass

    @abstractmethod
    def resource_deleted_response(self, entity_id: Any) -> Response:
        pass


class AuthorizationControllerContract(ABC):
    @abstractmethod
    def check_permission(self, request, action: str) -> bool:
        pass

    @abstractmethod
    def get_current_user(self, request) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def require_authentication(self, request) -> int:
        pass

    @abstractmethod
    def build_permissions_map(self, request) -> Dict[str, bool]:
        pass


class ResourceControllerContract(
    CrudControllerContract,
    PaginationControllerContract,
    ValidationControllerContract,
    ResponseControllerContract,
    AuthorizationControllerContract,
):
    """리소스 컨트롤러가 만족해야 하는 전체 계약."""
    pass
