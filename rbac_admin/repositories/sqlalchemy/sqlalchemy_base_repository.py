from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from rbac_admin.repositories.interfaces import IPageableRepository

# 세션 단위로 공유되는 작업 단위 플래그. 같은 세션을 쓰는 모든 리포지토리에 적용됩니다.
UNIT_OF_WORK_KEY = "rbac_admin.unit_of_work"

class SqlalchemyBaseRepository(IPageableRepository):
    """
    IRepository의 SQLAlchemy 공통 구현입니다.

    하위 클래스는 model, search_columns, filter_columns만 지정하면 됩니다.
    begin()으로 작업 단위가 열려 있는 동안에는 쓰기 연산이 flush만 하고,
    commit()/rollback() 호출 시에 확정 또는 취소됩니다.
    """
    model = None
    search_columns: Tuple[str, ...] = ()
    filter_columns: Tuple[str, ...] = ()

    def __init__(self, db_session: Session):
        self.db = db_session

    # --- 내부 유틸리티 ---
    def _in_unit_of_work(self) -> bool:
        return bool(self.db.info.get(UNIT_OF_WORK_KEY))

    def _save(self):
        if self._in_unit_of_work():
            self.db.flush()
            return
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _apply_filter(self, query: Query, key: str, value: Any) -> Query:
        if key in self.filter_columns:
            return query.filter(getattr(self.model, key) == value)
        return query

    # --- 기본 CRUD ---
    def find(self, entity_id: int) -> Optional[Any]:
        return self.db.get(self.model, entity_id)

    def find_many(self, ids: List[int]) -> List[Any]:
        if not ids:
            return []
        return self.db.query(self.model).filter(self.model.id.in_(ids)).order_by(self.model.id.asc()).all()

    def create(self, entity: Any) -> Any:
        self.db.add(entity)
        self._save()
        self.db.refresh(entity)
        return entity

    def update(self, entity: Any, values: Dict[str, Any]) -> Any:
        for key, value in values.items():
            setattr(entity, key, value)
        self._save()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: Any) -> bool:
        if entity:
            self.db.delete(entity)
            self._save()
            return True
        return False

    def count(self, **criteria: Any) -> int:
        return self.db.query(self.model).filter_by(**criteria).count()

    def exists(self, entity_id: int) -> bool:
        return self.db.query(self.model.id).filter(self.model.id == entity_id).first() is not None

    # --- 벌크 연산 ---
    def bulk_create(self, entities: List[Any]) -> List[Any]:
        self.db.add_all(entities)
        self._save()
        for entity in entities:
            self.db.refresh(entity)
        return entities

    def bulk_update(self, ids: List[int], values: Dict[str, Any]) -> int:
        if not ids:
            return 0
        affected = self.db.query(self.model).filter(self.model.id.in_(ids)).update(values, synchronize_session="fetch")
        self._save()
        return affected

    def bulk_delete(self, ids: List[int]) -> int:
        if not ids:
            return 0
        affected = self.db.query(self.model).filter(self.model.id.in_(ids)).delete(synchronize_session="fetch")
        self._save()
        return affected

    # --- 트랜잭션 ---
    def begin(self) -> None:
        self.db.info[UNIT_OF_WORK_KEY] = True
        if not self.db.in_transaction():
            self.db.begin()

    def commit(self) -> None:
        self.db.info.pop(UNIT_OF_WORK_KEY, None)
        self.db.commit()

    def rollback(self) -> None:
        self.db.info.pop(UNIT_OF_WORK_KEY, None)
        self.db.rollback()

    # --- 목록 조회 ---
    def list_page(
        self,
        search: str,
        filters: Dict[str, Any],
        sort_column: str,
        direction: str,
        offset: int,
        limit: int,
    ) -> Tuple[List[Any], int]:
        query = self.db.query(self.model)
        if search and self.search_columns:
            pattern = f"%{search}%"
            query = query.filter(or_(*[getattr(self.model, c).ilike(pattern) for c in self.search_columns]))
        for key, value in (filters or {}).items():
            query = self._apply_filter(query, key, value)

        total = query.count()

        column = getattr(self.model, sort_column, None)
        if column is None:
            column = self.model.id
        order = column.asc() if direction == "ASC" else column.desc()
        items = query.order_by(order).offset(offset).limit(limit).all()
        return items, total
