# rbac_admin/contracts/types.py
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_SORT = "id"
DEFAULT_DIRECTION = "DESC"
SORT_DIRECTIONS = ("ASC", "DESC")


class ListRequest(BaseModel):
    """목록 조회 요청 (페이지네이션, 정렬, 검색, 필터)."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=False)

    page: int = 0
    page_size: int = Field(default=0, alias="pageSize")
    sort: str = ""
    direction: str = ""
    search: str = ""
    filters: Dict[str, Any] = Field(default_factory=dict)

    def set_defaults(self) -> "ListRequest":
        """비어 있거나 범위를 벗어난 값에 기본값을 채웁니다."""
        if self.page <= 0:
            self.page = DEFAULT_PAGE
        if self.page_size <= 0:
            self.page_size = DEFAULT_PAGE_SIZE
        if self.page_size > MAX_PAGE_SIZE:
            self.page_size = MAX_PAGE_SIZE
        if not self.sort:
            self.sort = DEFAULT_SORT
        if not self.direction:
            self.direction = DEFAULT_DIRECTION
        return self

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.page_size, 0)


class PaginatedResult(BaseModel):
    """
    페이지 단위 조회 결과.

    모든 필드는 build()에서 (data, total, page, per_page)로부터 계산되며,
    개별 필드를 따로 갱신하지 않습니다.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    data: List[Any] = Field(default_factory=list)
    total: int = 0
    per_page: int = Field(default=DEFAULT_PAGE_SIZE, alias="perPage")
    current_page: int = Field(default=1, alias="currentPage")
    last_page: int = Field(default=0, alias="lastPage")
    from_: int = Field(default=0, alias="from")
    to: int = 0
    has_next: bool = Field(default=False, alias="hasNext")
    has_prev: bool = Field(default=False, alias="hasPrev")

    @classmethod
    def build(cls, data: List[Any], total: int, page: int, per_page: int) -> "PaginatedResult":
        """조회된 한 페이지의 데이터와 전체 개수로 결과를 구성합니다."""
        last_page = math.ceil(total / per_page) if per_page > 0 else 0
        offset = (page - 1) * per_page
        return cls(
            data=list(data),
            total=total,
            per_page=per_page,
            current_page=page,
            last_page=last_page,
            from_=offset + 1 if data else 0,
            to=offset + len(data),
            has_next=page < last_page,
            has_prev=page > 1,
        )

    def pagination_meta(self) -> Dict[str, Any]:
        return {
            "current_page": self.current_page,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "total": self.total,
            "from": self.from_,
            "to": self.to,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


class ServiceMetadata(BaseModel):
    name: str
    version: str
    supported_operations: List[str] = Field(default_factory=list)
    sortable_fields: List[str] = Field(default_factory=list)
    filterable_fields: List[str] = Field(default_factory=list)
    searchable_fields: List[str] = Field(default_factory=list)
    max_page_size: int = MAX_PAGE_SIZE
    default_page_size: int = DEFAULT_PAGE_SIZE


class PaginationConfig(BaseModel):
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    allowed_sizes: List[int] = Field(default_factory=list)


class ControllerMetadata(BaseModel):
    """호출자가 리소스의 기능을 탐색할 때 사용하는 컨트롤러 메타데이터. 인가 판단에는 쓰지 않습니다."""

    resource_type: str
    supported_actions: List[str] = Field(default_factory=list)
    required_permissions: List[str] = Field(default_factory=list)
    validation_rules: Dict[str, Any] = Field(default_factory=dict)
    pagination_config: PaginationConfig = Field(default_factory=PaginationConfig)
    response_formats: List[str] = Field(default_factory=lambda: ["json"])


class ValidationResult(BaseModel):
    """레지스트리 적합성 검사 결과."""

    valid: bool = True
    errors: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list, alias="missing_methods")

    model_config = ConfigDict(populate_by_name=True)


class ResponseFormat(BaseModel):
    """표준 응답 봉투: {success, data?, message?, errors?, meta?}"""

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    errors: Optional[Any] = None
    meta: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BulkAssignmentRequest(BaseModel):
    """역할 하나에 여러 권한을 일괄 부여('assign')하거나 회수('revoke')하는 요청."""

    role_id: int
    permission_ids: List[int] = Field(default_factory=list)
    action: str = "assign"


class MatrixStats(BaseModel):
    total_roles: int = 0
    total_permissions: int = 0
    total_assignments: int = 0
    active_roles: int = 0
    active_permissions: int = 0


class PermissionGroup(BaseModel):
    category: str
    permissions: List[Dict[str, Any]] = Field(default_factory=list)


class PermissionMatrix(BaseModel):
    """역할 x 권한 격자. matrix는 역할 ID -> 할당된 활성 권한 ID 목록입니다."""

    roles: List[Dict[str, Any]] = Field(default_factory=list)
    permissions: List[PermissionGroup] = Field(default_factory=list)
    matrix: Dict[int, List[int]] = Field(default_factory=dict)
    stats: MatrixStats = Field(default_factory=MatrixStats)
