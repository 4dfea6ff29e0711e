# rbac_admin/services/resource_service.py
import logging
from abc import abstractmethod
from typing import Any, Dict, List, Tuple, Type

from rbac_admin.config import Settings, get_settings
from rbac_admin.contracts.service_contracts import CompleteCrudService
from rbac_admin.contracts.types import ListRequest, PaginatedResult, ServiceMetadata
from rbac_admin.repositories.interfaces import IPageableRepository
from rbac_admin.services.base_service import BaseCrudService
from rbac_admin.services.exceptions import BulkOperationError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off")


class ResourceService(CompleteCrudService):
    """
    CompleteCrudService 계약의 공통 구현입니다.

    리소스별 서비스는 필드 카탈로그(정렬/필터/검색/컬럼 매핑/검증 규칙)와
    _validate, _build_entity, _serialize만 정의합니다.
    공통 검증은 self.base(BaseCrudService)에 위임합니다.
    """
    MODEL = None
    RESOURCE_TYPE = "Resource"
    NOT_FOUND_ERROR: Type[NotFoundError] = NotFoundError
    VERSION = "1.0"

    SORTABLE_FIELDS: List[str] = ["id"]
    FILTERABLE_FIELDS: List[str] = []
    SEARCHABLE_FIELDS: List[str] = []
    COLUMN_MAPPING: Dict[str, str] = {"id": "id"}
    FILTER_TYPES: Dict[str, type] = {}
    WRITABLE_FIELDS: List[str] = []
    VALIDATION_RULES: Dict[str, str] = {}

    def __init__(self, repo: IPageableRepository, table_name: str, settings: Settings = None):
        self.settings = settings or get_settings()
        self.repo = repo
        self.base = BaseCrudService(table_name, "id", self.settings)

    # --- 리소스별 확장 지점 ---
    def _validate(self, data: Dict[str, Any], entity: Any = None):
        """entity가 None이면 생성, 아니면 갱신 요청으로 검증합니다."""
        pass

    def _build_entity(self, data: Dict[str, Any]) -> Any:
        return self.MODEL(**self._to_column_values(data))

    @abstractmethod
    def _serialize(self, entity: Any) -> Dict[str, Any]:
        """엔티티를 API 응답용 딕셔너리로 변환합니다."""
        pass

    def _to_column_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """쓰기 가능한 API 필드만 골라 컬럼 이름으로 바꿉니다."""
        return {
            self.COLUMN_MAPPING.get(field, field): value
            for field, value in data.items()
            if field in self.WRITABLE_FIELDS
        }

    def _find_or_raise(self, entity_id: int) -> Any:
        entity = self.repo.find(entity_id)
        if not entity:
            raise self.NOT_FOUND_ERROR(f"{self.RESOURCE_TYPE} with ID {entity_id} not found")
        return entity

    def _fetch(self, req: ListRequest, strict: bool) -> PaginatedResult:
        column = self.base.resolve_sort(req.sort, self.SORTABLE_FIELDS, self.COLUMN_MAPPING)
        filters = self.build_filter_query(req.filters, strict=strict)
        items, total = self.repo.list_page(req.search, filters, column, req.direction, req.offset, req.page_size)
        return self.base.paginate([self._serialize(item) for item in items], total, req)

    # --- CrudContract ---
    def get_list(self, req: ListRequest) -> PaginatedResult:
        req = self.base.sanitize_list_request(req)
        self.base.validate_list_request(req)
        return self._fetch(req, strict=False)

    def get_list_advanced(self, req: ListRequest) -> PaginatedResult:
        """
        정렬 필드, 필터, 검색어를 모두 엄격하게 검증한 뒤 목록을 조회합니다.

        Raises:
            InvalidArgumentError: 페이지네이션, 정렬, 필터, 검색어 중 하나라도 잘못되었을 때.
        """
        self.base.validate_list_request(req)
        req.direction = req.direction.upper()
        if not self.validate_sort_field(req.sort):
            raise InvalidArgumentError(f"invalid sort field: {req.sort}", field="sort")
        if req.search:
            self.validate_search_query(req.search)
            req.search = req.search.strip()
        return self._fetch(req, strict=True)

    def get_by_id(self, entity_id: int) -> Dict[str, Any]:
        return self._serialize(self._find_or_raise(entity_id))

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._validate(data)
        created = self.repo.create(self._build_entity(data))
        logger.info("Created %s id=%s", self.base.table_name, created.id)
        return self._serialize(created)

    def update(self, entity_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        entity = self._find_or_raise(entity_id)
        self._validate(data, entity=entity)
        updated = self.repo.update(entity, self._to_column_values(data))
        logger.info("Updated %s id=%s", self.base.table_name, entity_id)
        return self._serialize(updated)

    def delete(self, entity_id: int) -> bool:
        entity = self._find_or_raise(entity_id)
        self.repo.delete(entity)
        logger.info("Deleted %s id=%s", self.base.table_name, entity_id)
        return True

    # --- PaginationContract ---
    def get_paginated_list(self, req: ListRequest) -> PaginatedResult:
        return self.get_list(req)

    def validate_pagination_params(self, page: int, page_size: int):
        self.base.validate_pagination_params(page, page_size)

    def get_max_page_size(self) -> int:
        return self.base.get_max_page_size()

    def get_default_page_size(self) -> int:
        return self.base.get_default_page_size()

    # --- SortableContract ---
    def get_sortable_fields(self) -> List[str]:
        return list(self.SORTABLE_FIELDS)

    def validate_sort_field(self, field: str) -> bool:
        return field in self.SORTABLE_FIELDS

    def validate_sort_direction(self, direction: str):
        self.base.validate_sort_direction(direction)

    def get_default_sort(self) -> Tuple[str, str]:
        return self.base.get_default_sort()

    def map_sort_field(self, field: str) -> str:
        return self.base.resolve_sort(field, self.SORTABLE_FIELDS, self.COLUMN_MAPPING)

    # --- FilterableContract ---
    def get_filterable_fields(self) -> List[str]:
        return list(self.FILTERABLE_FIELDS)

    def validate_filter_field(self, field: str) -> bool:
        return field in self.FILTERABLE_FIELDS

    def validate_filter_value(self, field: str, value: Any) -> bool:
        return self.base.validate_filter_value(field, value)

    def get_searchable_fields(self) -> List[str]:
        return list(self.SEARCHABLE_FIELDS)

    def _coerce_filter_value(self, field: str, value: Any) -> Any:
        """쿼리 문자열로 들어온 bool/숫자 필터를 실제 타입으로 바꿉니다."""
        expected = self.FILTER_TYPES.get(field)
        if expected is None or not isinstance(value, str):
            return value.strip() if isinstance(value, str) else value
        text = value.strip().lower()
        if expected is bool:
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            raise ValueError(f"not a boolean: {value}")
        return expected(text)

    def build_filter_query(self, filters: Dict[str, Any], strict: bool = False) -> Dict[str, Any]:
        """
        API 필터를 컬럼 조건으로 변환합니다.

        strict가 False면 알 수 없는 필드와 잘못된 값은 조용히 건너뛰고,
        True면 InvalidArgumentError를 발생시킵니다.
        """
        conditions = {}
        for field, value in (filters or {}).items():
            if not self.validate_filter_field(field):
                if strict:
                    raise InvalidArgumentError(f"invalid filter field: {field}", field=field)
                continue
            if not self.validate_filter_value(field, value):
                if strict:
                    raise InvalidArgumentError(f"invalid filter value for {field}", field=field)
                continue
            try:
                coerced = self._coerce_filter_value(field, value)
            except ValueError as e:
                if strict:
                    raise InvalidArgumentError(f"invalid filter value for {field}", field=field) from e
                continue
            conditions[self.COLUMN_MAPPING.get(field, field)] = coerced
        return conditions

    # --- SearchableContract ---
    def search(self, query: str, req: ListRequest) -> PaginatedResult:
        self.validate_search_query(query)
        req.search = query.strip()
        return self.get_list(req)

    def validate_search_query(self, query: str):
        text = (query or "").strip()
        if len(text) < self.settings.SEARCH_MIN_LENGTH:
            raise InvalidArgumentError(
                f"search query must be at least {self.settings.SEARCH_MIN_LENGTH} characters", field="search"
            )
        if len(text) > self.settings.SEARCH_MAX_LENGTH:
            raise InvalidArgumentError(
                f"search query cannot exceed {self.settings.SEARCH_MAX_LENGTH} characters", field="search"
            )

    # --- BulkOperationsContract ---
    def bulk_create(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        항목을 하나씩 순서대로 생성합니다. 트랜잭션으로 묶지 않습니다.

        Raises:
            BulkOperationError: 중간에 실패했을 때. 이미 생성된 항목은 그대로 남습니다.
        """
        if not items:
            raise InvalidArgumentError("no items provided for bulk operation", field="items")
        if len(items) > self.base.bulk_limit:
            raise InvalidArgumentError(f"bulk operation cannot exceed {self.base.bulk_limit} items", field="items")

        created = []
        for item in items:
            try:
                created.append(self.create(item))
            except Exception as e:
                logger.warning("bulk create on %s stopped after %d of %d", self.base.table_name, len(created), len(items))
                raise BulkOperationError("create", len(created), len(items), cause=e) from e
        return created

    def bulk_update(self, ids: List[int], data: Dict[str, Any]) -> int:
        """
        Raises:
            InvalidArgumentError, DuplicateIdError: ID 목록 검증 실패 시 (아무 것도 변경하지 않음).
            BulkOperationError: 중간에 실패했을 때. 앞선 갱신은 그대로 남습니다.
        """
        self.validate_bulk_operation(ids)
        succeeded = 0
        for entity_id in ids:
            try:
                self.update(entity_id, data)
            except Exception as e:
                logger.warning("bulk update on %s failed at id=%s (%d of %d done)",
                               self.base.table_name, entity_id, succeeded, len(ids))
                raise BulkOperationError("update", succeeded, len(ids), failed_id=entity_id, cause=e) from e
            succeeded += 1
        return succeeded

    def bulk_delete(self, ids: List[int]) -> int:
        self.validate_bulk_operation(ids)
        succeeded = 0
        for entity_id in ids:
            try:
                self.delete(entity_id)
            except Exception as e:
                logger.warning("bulk delete on %s failed at id=%s (%d of %d done)",
                               self.base.table_name, entity_id, succeeded, len(ids))
                raise BulkOperationError("delete", succeeded, len(ids), failed_id=entity_id, cause=e) from e
            succeeded += 1
        return succeeded

    def validate_bulk_operation(self, ids: List[int]):
        self.base.validate_bulk_operation(ids)

    # --- ServiceConfigurationContract ---
    def get_table_name(self) -> str:
        return self.base.table_name

    def get_primary_key(self) -> str:
        return self.base.primary_key

    def get_model(self) -> Any:
        return self.MODEL

    def get_validation_rules(self) -> Dict[str, Any]:
        return dict(self.VALIDATION_RULES)

    def get_column_mapping(self) -> Dict[str, str]:
        return dict(self.COLUMN_MAPPING)

    def get_metadata(self) -> ServiceMetadata:
        operations = sorted(CompleteCrudService.__abstractmethods__)
        return self.base.generate_metadata(
            self.base.table_name,
            self.VERSION,
            operations,
            self.SORTABLE_FIELDS,
            self.FILTERABLE_FIELDS,
            self.SEARCHABLE_FIELDS,
        )
