# tests/services/test_user_service.py
import hashlib

import pytest
from unittest.mock import MagicMock

from rbac_admin.contracts.types import ListRequest
from rbac_admin.database import models
from rbac_admin.repositories.interfaces import IUserRepository
from rbac_admin.services.exceptions import *
from rbac_admin.services.user_service import UserService

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_user_repo() -> MagicMock:
    """IUserRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IUserRepository)

@pytest.fixture
def user_service(mock_user_repo: MagicMock, settings) -> UserService:
    return UserService(mock_user_repo, settings)

# ===================================================================
#  사용자 생성(Create) 테스트
# ===================================================================
class TestCreateUser:
    def test_create_user_hashes_password(self, user_service: UserService, mock_user_repo: MagicMock):
        """비밀번호가 해시로 저장되고 응답에는 포함되지 않는지 테스트합니다."""
        # === Arrange ===
        mock_user_repo.find_by_email.return_value = None
        mock_user_repo.create.side_effect = lambda user: user

        # === Act ===
        user = user_service.create({"name": "Kim", "email": "kim@example.com", "password": "password123"})

        # === Assert ===
        created = mock_user_repo.create.call_args.args[0]
        assert created.password_hash == hashlib.sha256(b"password123").hexdigest()
        assert "password" not in user
        assert "password_hash" not in user
        assert user["email"] == "kim@example.com"

    def test_create_user_rejects_duplicate_email(self, user_service: UserService, mock_user_repo: MagicMock):
        # 시나리오: 같은 이메일의 사용자가 이미 존재함
        mock_user_repo.find_by_email.return_value = models.User(id=1, email="kim@example.com")

        with pytest.raises(ResourceAlreadyExistsError, match="email already exists"):
            user_service.create({"name": "Kim", "email": "kim@example.com", "password": "password123"})
        mock_user_repo.create.assert_not_called()

    @pytest.mark.parametrize("data, message", [
        ({"name": "Kim", "email": "not-an-email", "password": "password123"}, "invalid email format"),
        ({"name": "K", "email": "kim@example.com", "password": "password123"}, "between 2 and 255"),
        ({"name": "Kim", "email": "kim@example.com", "password": "short"}, "at least 8 characters"),
        ({"name": "Kim", "email": "kim@example.com"}, "password is required"),
    ])
    def test_create_user_validation(self, user_service: UserService, mock_user_repo: MagicMock, data, message):
        mock_user_repo.find_by_email.return_value = None

        with pytest.raises(InvalidArgumentError, match=message):
            user_service.create(data)

# ===================================================================
#  사용자 수정/조회 테스트
# ===================================================================
class TestUpdateUser:
    def test_update_without_password_keeps_hash(self, user_service: UserService, mock_user_repo: MagicMock):
        # === Arrange ===
        user = models.User(id=2, name="Lee", email="lee@example.com", password_hash="old", is_active=True)
        mock_user_repo.find.return_value = user
        mock_user_repo.update.return_value = user

        # === Act ===
        user_service.update(2, {"isActive": False})

        # === Assert ===
        mock_user_repo.update.assert_called_once_with(user, {"is_active": False})

    def test_get_by_email_not_found(self, user_service: UserService, mock_user_repo: MagicMock):
        mock_user_repo.find_by_email.return_value = None

        with pytest.raises(UserNotFoundError):
            user_service.get_by_email("ghost@example.com")

def test_list_coerces_boolean_filter(user_service: UserService, mock_user_repo: MagicMock):
    """쿼리 문자열 'true'가 is_active=True 조건으로 변환되는지 테스트합니다."""
    mock_user_repo.list_page.return_value = ([], 0)

    user_service.get_list(ListRequest(filters={"isActive": "true", "isSuperAdmin": "maybe"}))

    # 검증: 변환할 수 없는 값은 관대한 조회에서 조용히 버려짐
    assert mock_user_repo.list_page.call_args.args[1] == {"is_active": True}
