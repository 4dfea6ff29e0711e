from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class IRepository(ABC):
    """
    모든 리포지토리가 공유하는 영속성 계약입니다.

    find/find_many/create/update/delete/count/exists 및 벌크 연산과
    begin/commit/rollback 트랜잭션 기본 연산을 제공합니다.
    begin()을 호출한 뒤에는 commit() 또는 rollback()을 호출할 때까지
    쓰기 연산이 확정(commit)되지 않습니다.
    """

    @abstractmethod
    def find(self, entity_id: int) -> Optional[Any]:
        """기본 키로 엔티티 하나를 조회합니다."""
        pass

    @abstractmethod
    def find_many(self, ids: List[int]) -> List[Any]:
        """여러 기본 키에 해당하는 엔티티를 조회합니다."""
        pass

    @abstractmethod
    def create(self, entity: Any) -> Any:
        """새 엔티티를 저장하고 ID가 채워진 엔티티를 반환합니다."""
        pass

    @abstractmethod
    def update(self, entity: Any, values: Dict[str, Any]) -> Any:
        """엔티티의 속성을 values로 갱신합니다."""
        pass

    @abstractmethod
    def delete(self, entity: Any) -> bool:
        """엔티티를 삭제합니다."""
        pass

    @abstractmethod
    def count(self, **criteria: Any) -> int:
        """조건(컬럼=값)에 맞는 행 수를 반환합니다."""
        pass

    @abstractmethod
    def exists(self, entity_id: int) -> bool:
        pass

    @abstractmethod
    def bulk_create(self, entities: List[Any]) -> List[Any]:
        pass

    @abstractmethod
    def bulk_update(self, ids: List[int], values: Dict[str, Any]) -> int:
        """여러 행을 한 번의 쿼리로 갱신하고 영향받은 행 수를 반환합니다."""
        pass

    @abstractmethod
    def bulk_delete(self, ids: List[int]) -> int:
        """여러 행을 한 번의 쿼리로 삭제하고 영향받은 행 수를 반환합니다."""
        pass

    @abstractmethod
    def begin(self) -> None:
        """작업 단위(unit of work)를 시작합니다."""
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass


class IPageableRepository(IRepository):
    """검색/필터/정렬/페이지 조회를 지원하는 리소스 리포지토리 계약입니다."""

    @abstractmethod
    def list_page(
        self,
        search: str,
        filters: Dict[str, Any],
        sort_column: str,
        direction: str,
        offset: int,
        limit: int,
    ) -> Tuple[List[Any], int]:
        """
        한 페이지 분량의 엔티티와 조건에 맞는 전체 개수를 조회합니다.

        Args:
            search: 검색 대상 컬럼들에 부분 일치로 적용할 검색어. 빈 문자열이면 적용하지 않습니다.
            filters: 컬럼 이름 -> 값. 리포지토리가 알지 못하는 키는 무시됩니다.
            sort_column: 정렬할 컬럼 이름.
            direction: 'ASC' 또는 'DESC'.
            offset: 건너뛸 행 수.
            limit: 반환할 최대 행 수.

        Returns:
            (엔티티 목록, 전체 개수) 튜플.
        """
        pass
