# rbac_admin/controllers/base_controller.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from rbac_admin.config import Settings, get_settings
from rbac_admin.contracts.types import (
    SORT_DIRECTIONS, ControllerMetadata, ListRequest, PaginatedResult, PaginationConfig, ResponseFormat
)
from rbac_admin.services.exceptions import (
    BulkOperationError, ConflictError, InvalidArgumentError, NotFoundError, PermissionDeniedError,
    TransactionFailureError, UnauthenticatedError
)

logger = logging.getLogger(__name__)

Response = Tuple[str, Dict[str, Any]]


class Request(BaseModel):
    """전송 계층이 넘겨주는 요청. query/route 값은 문자열, body는 디코딩된 JSON입니다."""

    query: Dict[str, Any] = Field(default_factory=dict)
    route: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    user_id: Optional[int] = None


class BaseCrudController:
    """
    요청 파싱, 페이지네이션 기본값, 응답 봉투 생성을 담당하는 공통 컨트롤러.

    모든 응답은 (상태 줄, {success, data?, message?, errors?, meta?}) 튜플입니다.
    """

    def __init__(self, resource_type: str, settings: Settings = None):
        settings = settings or get_settings()
        self.resource_type = resource_type
        self.default_page_size = settings.DEFAULT_PAGE_SIZE
        self.max_page_size = settings.MAX_PAGE_SIZE
        self.allowed_page_sizes = list(settings.ALLOWED_PAGE_SIZES)

    @property
    def resource_label(self) -> str:
        return self.resource_type[:1].upper() + self.resource_type[1:]

    # --- 페이지네이션 ---
    def set_pagination_config(self, default_page_size: int, max_page_size: int, allowed_sizes: List[int]):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.allowed_page_sizes = list(allowed_sizes)

    def get_pagination_defaults(self) -> PaginationConfig:
        return PaginationConfig(
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
            allowed_sizes=list(self.allowed_page_sizes),
        )

    def validate_pagination_request(self, request: Request) -> ListRequest:
        """
        쿼리 파라미터(page, pageSize, search, sort, direction, filter[<key>])를 ListRequest로 변환합니다.

        page가 숫자가 아니거나 0 이하면 오류이고, pageSize는 숫자가 아니거나
        허용된 크기 목록에 없으면 기본값으로 대체합니다.

        Raises:
            InvalidArgumentError: page가 잘못되었을 때.
        """
        query = request.query or {}

        raw_page = query.get("page")
        if raw_page in (None, ""):
            page = 1
        else:
            try:
                page = int(raw_page)
            except (TypeError, ValueError):
                raise InvalidArgumentError("invalid page: must be a positive integer", field="page") from None
        if page <= 0:
            raise InvalidArgumentError("page must be greater than 0", field="page")

        try:
            page_size = int(query.get("pageSize", self.default_page_size))
        except (TypeError, ValueError):
            page_size = self.default_page_size
        if page_size not in self.allowed_page_sizes or page_size > self.max_page_size:
            page_size = self.default_page_size

        direction = str(query.get("direction", "")).strip().upper()
        if direction not in SORT_DIRECTIONS:
            direction = "DESC"

        filters = {}
        for key, value in query.items():
            if key.startswith("filter[") and key.endswith("]") and len(key) > len("filter[]"):
                filters[key[len("filter["):-1]] = value

        req = ListRequest(
            page=page,
            page_size=page_size,
            search=str(query.get("search", "")).strip(),
            sort=str(query.get("sort", "")),
            direction=direction,
            filters=filters,
        )
        return req.set_defaults()

    def build_paginated_response(self, result: PaginatedResult, req: ListRequest) -> Response:
        envelope = ResponseFormat(success=True, data=result.data).to_dict()
        envelope["pagination"] = result.pagination_meta()
        envelope["filters"] = {
            "page": req.page,
            "pageSize": req.page_size,
            "search": req.search,
            "sort": req.sort,
            "direction": req.direction,
            "filters": dict(req.filters),
        }
        return "200 OK", envelope

    # --- 검증 ---
    def validate_id(self, request: Request, param_name: str = "id") -> int:
        """
        Raises:
            InvalidArgumentError: 경로 파라미터가 없거나, 정수가 아니거나, 0일 때.
        """
        raw = (request.route or {}).get(param_name)
        if raw is None or str(raw).strip() == "":
            raise InvalidArgumentError(f"{param_name} parameter is required", field=param_name)
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidArgumentError(f"invalid {param_name}: must be a positive integer", field=param_name)
        value = int(text)
        if value == 0:
            raise InvalidArgumentError(f"invalid {param_name}: must be greater than 0", field=param_name)
        return value

    # --- 응답 봉투 ---
    def _respond(self, status: str, success: bool, data: Any = None, message: Optional[str] = None,
                 errors: Any = None, meta: Any = None) -> Response:
        envelope = ResponseFormat(success=success, data=data, message=message, errors=errors, meta=meta)
        return status, envelope.to_dict()

    def success_response(self, data: Any = None, message: Optional[str] = None, meta: Any = None) -> Response:
        return self._respond("200 OK", True, data=data, message=message, meta=meta)

    def created_response(self, data: Any = None, message: Optional[str] = None) -> Response:
        return self._respond("201 Created", True, data=data, message=message)

    def no_content_response(self) -> Response:
        return self._respond("204 No Content", True)

    def bad_request_response(self, message: str, errors: Any = None) -> Response:
        return self._respond("400 Bad Request", False, message=message, errors=errors)

    def forbidden_response(self, message: str = "Forbidden") -> Response:
        return self._respond("403 Forbidden", False, message=message)

    def not_found_response(self, message: str = "Not found") -> Response:
        return self._respond("404 Not Found", False, message=message)

    def validation_error_response(self, errors: Dict[str, Any], message: str = "Validation failed") -> Response:
        return self._respond("422 Unprocessable Entity", False, message=message, errors=errors)

    def server_error_response(self, message: str = "Internal server error") -> Response:
        return self._respond("500 Internal Server Error", False, message=message)

    def resource_not_found_response(self, entity_id: Any) -> Response:
        return self.not_found_response(f"{self.resource_label} with ID {entity_id} not found")

    def resource_created_response(self, data: Any) -> Response:
        return self.created_response(data, f"{self.resource_label} created successfully")

    def resource_updated_response(self, data: Any) -> Response:
        return self.success_response(data, f"{self.resource_label} updated successfully")

    def resource_deleted_response(self, entity_id: Any) -> Response:
        return self.success_response(message=f"{self.resource_label} with ID {entity_id} deleted successfully")

    def handle_exception(self, e: Exception) -> Response:
        """도메인 예외를 응답 봉투로 변환합니다. 알 수 없는 예외는 로그를 남기고 500으로 응답합니다."""
        if isinstance(e, UnauthenticatedError):
            return self._respond("401 Unauthorized", False, message=str(e))
        if isinstance(e, PermissionDeniedError):
            return self.forbidden_response(str(e))
        if isinstance(e, BulkOperationError):
            return self.bad_request_response(str(e), errors={
                "succeeded": e.succeeded,
                "total": e.total,
                "failed_id": e.failed_id,
            })
        if isinstance(e, InvalidArgumentError):
            errors = {e.field: [str(e)]} if e.field else None
            return self.bad_request_response(str(e), errors=errors)
        if isinstance(e, NotFoundError):
            return self.not_found_response(str(e))
        if isinstance(e, ConflictError):
            return self._respond("409 Conflict", False, message=str(e))
        if isinstance(e, TransactionFailureError):
            logger.error("Transaction failed in %s controller: %s", self.resource_type, e)
            return self.server_error_response(str(e))
        logger.exception("Unhandled error in %s controller", self.resource_type)
        return self.server_error_response()

    # --- 메타데이터 ---
    def generate_metadata(self, actions: List[str], permissions: List[str], rules: Dict[str, Any]) -> ControllerMetadata:
        return ControllerMetadata(
            resource_type=self.resource_type,
            supported_actions=list(actions),
            required_permissions=list(permissions),
            validation_rules=dict(rules),
            pagination_config=self.get_pagination_defaults(),
        )
