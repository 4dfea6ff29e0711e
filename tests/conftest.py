# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rbac_admin.config import Settings
from rbac_admin.database import models
from rbac_admin.database.database import Base


@pytest.fixture
def settings() -> Settings:
    """환경 변수와 .env 파일의 영향을 받지 않는 기본 설정."""
    return Settings(_env_file=None)


@pytest.fixture
def engine():
    """테스트마다 새로 만드는 SQLite 인메모리 엔진. 모든 커넥션이 같은 DB를 공유합니다."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Session:
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def role_factory(db_session: Session):
    def _create(slug: str, level: int = 10, is_active: bool = True, name: str = None):
        role = models.Role(slug=slug, name=name or slug.title(), level=level, is_active=is_active)
        db_session.add(role)
        db_session.commit()
        db_session.refresh(role)
        return role
    return _create


@pytest.fixture
def permission_factory(db_session: Session):
    def _create(slug: str, category: str = None, is_active: bool = True):
        resource, _, action = slug.replace("_", ".", 1).partition(".")
        permission = models.Permission(
            name=slug,
            slug=slug,
            category=category or resource,
            resource=resource,
            action=action or slug,
            is_active=is_active,
        )
        db_session.add(permission)
        db_session.commit()
        db_session.refresh(permission)
        return permission
    return _create


@pytest.fixture
def user_factory(db_session: Session):
    def _create(email: str, is_super_admin: bool = False, is_active: bool = True):
        user = models.User(
            name=email.split("@")[0],
            email=email,
            password_hash="x",
            is_super_admin=is_super_admin,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create
