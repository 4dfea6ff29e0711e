# rbac_admin/contracts/service_contracts.py
"""
리소스 서비스가 구현해야 하는 기능 계약(capability contract) 모음.

각 계약은 추상 메서드 집합으로 정의되며, ContractRegistry는 이 집합을
기준으로 등록 후보를 구조적으로 검사합니다.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from .types import BulkAssignmentRequest, ListRequest, PaginatedResult, PermissionMatrix


class CrudContract(ABC):
    @abstractmethod
    def get_list(self, req: ListRequest) -> PaginatedResult:
        """기본값을 채우고 알 수 없는 정렬/필터는 무시하며 목록을 조회합니다."""
        pass

    @abstractmethod
    def get_list_advanced(self, req: ListRequest) -> PaginatedResult:
        """get_list와 같지만 알 수 없는 정렬/필터 필드를 오류로 처리합니다."""
        pass

    @abstractmethod
    def get_by_id(self, entity_id: int) -> Dict[str, Any]:
        pass

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def update(self, entity_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def delete(self, entity_id: int) -> bool:
        pass


class PaginationContract(ABC):
    @abstractmethod
    def get_paginated_list(self, req: ListRequest) -> PaginatedResult:
        pass

    @abstractmethod
    def validate_pagination_params(self, page: int, page_size: int) -> None:
        pass

    @abstractmethod
    def get_max_page_size(self) -> int:
        pass

    @abstractmethod
    def get_default_page_size(self) -> int:
        pass


class SortableContract(ABC):
    @abstractmethod
    def get_sortable_fields(self) -> List[str]:
        pass

    @abstractmethod
    def validate_sort_field(self, field: str) -> bool:
        pass

    @abstractmethod
    def validate_sort_direction(self, direction: str) -> None:
        pass

    @abstractmethod
    def get_default_sort(self) -> Tuple[str, str]:
        """(필드, 방향)"""
        pass

    @abstractmethod
    def map_sort_field(self, field: str) -> str:
        """API 필드 이름을 저장소 컬럼 이름으로 변환합니다."""
        pass


class FilterableContract(ABC):
    @abstractmethod
    def get_filterable_fields(self) -> List[str]:
        pass

    @abstractmethod
    def validate_filter_field(self, field: str) -> bool:
        pass

    @abstractmethod
    def validate_filter_value(self, field: str, value: Any) -> bool:
        pass

    @abstractmethod
    def get_searchable_fields(self) -> List[str]:
        pass

    @abstractmethod
    def build_filter_query(self, filters: Dict[str, Any]) -> Dict[str, Any]:
        """API 필터를 컬럼 이름 -> 값 조건으로 변환합니다."""
        pass


class SearchableContract(ABC):
    @abstractmethod
    def search(self, query: str, req: ListRequest) -> PaginatedResult:
        pass

    @abstractmethod
    def validate_search_query(self, query: str) -> None:
        pass


class BulkOperationsContract(ABC):
    @abstractmethod
    def bulk_create(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def bulk_update(self, ids: List[int], data: Dict[str, Any]) -> int:
        pass

    @abstractmethod
    def bulk_delete(self, ids: List[int]) -> int:
        pass

    @abstractmethod
    def validate_bulk_operation(self, ids: List[int]) -> None:
        pass


class ServiceConfigurationContract(ABC):
    @abstractmethod
    def get_table_name(self) -> str:
        pass

    @abstractmethod
    def get_primary_key(self) -> str:
        pass

    @abstractmethod
    def get_model(self) -> Any:
        pass

    @abstractmethod
    def get_validation_rules(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_column_mapping(self) -> Dict[str, str]:
        pass


class CompleteCrudService(
    CrudContract,
    PaginationContract,
    SortableContract,
    FilterableContract,
    SearchableContract,
    BulkOperationsContract,
    ServiceConfigurationContract,
):
    """모든 리소스 서비스가 만족해야 하는 전체 계약."""
    pass


class PermissionMatrixContract(ABC):
    """역할 x 권한 행렬 엔진의 계약."""

    @abstractmethod
    def get_permission_matrix(self) -> PermissionMatrix:
        pass

    @abstractmethod
    def assign_permission_to_role(self, role_id: int, permission_id: int) -> bool:
        pass

    @abstractmethod
    def revoke_permission_from_role(self, role_id: int, permission_id: int) -> bool:
        pass

    @abstractmethod
    def bulk_assign_permissions(self, request: BulkAssignmentRequest) -> Dict[str, Any]:
        pass

    @abstractmethod
    def sync_role_permissions(self, role_id: int, permission_ids: List[int]) -> List[int]:
        pass

    @abstractmethod
    def sync_permissions_from_gates(self) -> Dict[str, int]:
        pass

    @abstractmethod
    def validate_permission_assignment(self, role_id: int, permission_id: int) -> None:
        pass

    @abstractmethod
    def get_role_permissions(self, role_id: int) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_permissions_by_category(self) -> Dict[str, List[Dict[str, Any]]]:
        pass
