# rbac_admin/services/base_service.py
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from rbac_admin.config import Settings, get_settings
from rbac_admin.contracts.types import SORT_DIRECTIONS, ListRequest, PaginatedResult, ServiceMetadata
from rbac_admin.services.exceptions import DuplicateIdError, InvalidArgumentError


class BaseCrudService:
    """
    모든 리소스 서비스가 공유하는 페이지네이션/정렬/필터/벌크 검증 로직을 제공합니다.

    리소스 서비스는 이 클래스를 상속하지 않고 self.base로 보유(composition)하여 위임합니다.
    """

    def __init__(self, table_name: str, primary_key: str = "id", settings: Settings = None):
        """
        BaseCrudService를 초기화합니다.

        Args:
            table_name: 서비스가 다루는 테이블 이름.
            primary_key: 기본 키 컬럼 이름. 기본 정렬 필드로도 사용됩니다.
            settings: 페이지 크기/벌크 한도 기본값을 담은 설정. 없으면 get_settings()를 사용합니다.
        """
        settings = settings or get_settings()
        self.table_name = table_name
        self.primary_key = primary_key
        self.max_page_size = settings.MAX_PAGE_SIZE
        self.default_page_size = settings.DEFAULT_PAGE_SIZE
        self.allowed_page_sizes = list(settings.ALLOWED_PAGE_SIZES)
        self.bulk_limit = settings.BULK_OPERATION_LIMIT

    # --- 설정 ---
    def set_max_page_size(self, size: int):
        if size <= 0:
            raise InvalidArgumentError("max page size must be greater than 0", field="maxPageSize")
        self.max_page_size = size

    def set_default_page_size(self, size: int):
        if size <= 0 or size > self.max_page_size:
            raise InvalidArgumentError(
                f"default page size must be between 1 and {self.max_page_size}", field="defaultPageSize"
            )
        self.default_page_size = size

    def get_max_page_size(self) -> int:
        return self.max_page_size

    def get_default_page_size(self) -> int:
        return self.default_page_size

    def get_default_sort(self) -> Tuple[str, str]:
        return self.primary_key, "DESC"

    # --- 페이지네이션 ---
    def validate_pagination_params(self, page: int, page_size: int):
        """
        Raises:
            InvalidArgumentError: page 또는 page_size가 0 이하이거나 page_size가 최대값을 넘을 때.
        """
        if page <= 0:
            raise InvalidArgumentError("page must be greater than 0", field="page")
        if page_size <= 0:
            raise InvalidArgumentError("pageSize must be greater than 0", field="pageSize")
        if page_size > self.max_page_size:
            raise InvalidArgumentError(f"pageSize cannot exceed {self.max_page_size}", field="pageSize")

    def validate_sort_direction(self, direction: str):
        if direction.upper() not in SORT_DIRECTIONS:
            raise InvalidArgumentError(f"invalid sort direction: {direction}", field="direction")

    def validate_list_request(self, req: ListRequest) -> ListRequest:
        """
        기본값을 채운 뒤 페이지네이션 값과 정렬 방향을 검증합니다.

        Raises:
            InvalidArgumentError: 'pagination validation failed: ...' 또는 'invalid sort direction: ...'.
        """
        req.set_defaults()
        try:
            self.validate_pagination_params(req.page, req.page_size)
        except InvalidArgumentError as e:
            raise InvalidArgumentError(f"pagination validation failed: {e}", field=e.field) from e
        self.validate_sort_direction(req.direction)
        return req

    def sanitize_list_request(self, req: ListRequest) -> ListRequest:
        """
        요청 값을 허용 범위로 보정합니다. 오류를 발생시키지 않습니다.

        최대값을 넘는 page_size는 먼저 최대값으로 줄이고, 그 결과가 허용된 크기 목록에
        없을 때만 기본값으로 바꿉니다.
        """
        if req.page <= 0:
            req.page = 1
        if req.page_size <= 0:
            req.page_size = self.default_page_size
        elif req.page_size > self.max_page_size:
            req.page_size = self.max_page_size
        if req.page_size not in self.allowed_page_sizes:
            req.page_size = self.default_page_size

        direction = (req.direction or "").strip().upper()
        req.direction = direction if direction in SORT_DIRECTIONS else "DESC"
        req.search = (req.search or "").strip()
        return req

    def paginate(self, items: List[Any], total: int, req: ListRequest) -> PaginatedResult:
        return PaginatedResult.build(items, total, req.page, req.page_size)

    # --- 정렬 ---
    def resolve_sort(self, sort: str, sortable_fields: List[str], column_mapping: Dict[str, str]) -> str:
        """허용된 정렬 필드면 대응 컬럼을, 아니면 기본 정렬 컬럼을 반환합니다."""
        if sort and sort in sortable_fields:
            return column_mapping.get(sort, sort)
        default_field, _ = self.get_default_sort()
        return column_mapping.get(default_field, default_field)

    # --- 필터 ---
    def validate_filter_value(self, field: str, value: Any) -> bool:
        """
        필터 값이 사용 가능한지 확인합니다.

        None은 거부하고, 공백을 제외한 길이가 1 이상인 문자열과 숫자, bool은 허용합니다.
        그 외의 타입(리스트, 딕셔너리 등)은 거부합니다.
        """
        if value is None:
            return False
        if isinstance(value, bool):
            return True
        if isinstance(value, str):
            return len(value.strip()) > 0
        return isinstance(value, (int, float, Decimal))

    # --- 벌크 ---
    def validate_bulk_operation(self, ids: List[int]):
        """
        Raises:
            InvalidArgumentError: 목록이 비었거나, 한도를 넘었거나, 양의 정수가 아닌 ID가 있을 때.
            DuplicateIdError: 같은 ID가 두 번 이상 나올 때.
        """
        if not ids:
            raise InvalidArgumentError("no IDs provided for bulk operation", field="ids")
        if len(ids) > self.bulk_limit:
            raise InvalidArgumentError(f"bulk operation cannot exceed {self.bulk_limit} items", field="ids")

        seen = set()
        for entity_id in ids:
            # True/False도 ID로 받지 않음
            if isinstance(entity_id, bool) or not isinstance(entity_id, int) or entity_id <= 0:
                raise InvalidArgumentError(f"invalid ID ({entity_id}) in bulk operation", field="ids")
            if entity_id in seen:
                raise DuplicateIdError(entity_id)
            seen.add(entity_id)

    # --- 메타데이터 ---
    def generate_metadata(
        self,
        name: str,
        version: str,
        operations: List[str],
        sortable_fields: Optional[List[str]] = None,
        filterable_fields: Optional[List[str]] = None,
        searchable_fields: Optional[List[str]] = None,
    ) -> ServiceMetadata:
        return ServiceMetadata(
            name=name,
            version=version,
            supported_operations=list(operations),
            sortable_fields=list(sortable_fields or []),
            filterable_fields=list(filterable_fields or []),
            searchable_fields=list(searchable_fields or []),
            max_page_size=self.max_page_size,
            default_page_size=self.default_page_size,
        )
