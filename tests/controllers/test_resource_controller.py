# tests/controllers/test_resource_controller.py
import pytest
from unittest.mock import MagicMock

from rbac_admin.contracts.service_contracts import CompleteCrudService
from rbac_admin.contracts.types import PaginatedResult
from rbac_admin.controllers.base_controller import Request
from rbac_admin.controllers.resource_controller import ResourceController
from rbac_admin.permissions.registry import build_default_permission_registry
from rbac_admin.services.authorization_service import AuthorizationService
from rbac_admin.services.exceptions import *

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_service() -> MagicMock:
    """CompleteCrudService에 대한 모의 객체를 생성합니다."""
    service = MagicMock(spec=CompleteCrudService)
    service.get_validation_rules.return_value = {
        "title": "required|string|max:255",
        "isbn": "required|string",
        "price": "numeric|min:0",
    }
    return service

@pytest.fixture
def mock_authorization() -> MagicMock:
    authorization = MagicMock(spec=AuthorizationService)
    authorization.has_permission.return_value = True
    return authorization

@pytest.fixture
def controller(mock_service, mock_authorization, settings) -> ResourceController:
    return ResourceController("book", "books", mock_service, mock_authorization,
                              build_default_permission_registry(), settings)

# ===================================================================
#  요청 파싱(Request Parsing) 테스트
# ===================================================================
class TestRequestParsing:
    def test_pagination_request_defaults(self, controller: ResourceController):
        req = controller.validate_pagination_request(Request())

        assert (req.page, req.page_size, req.sort, req.direction) == (1, 20, "id", "DESC")

    @pytest.mark.parametrize("raw_size", ["7", "abc", "500", "0"])
    def test_page_size_outside_whitelist_becomes_default(self, controller: ResourceController, raw_size: str):
        """허용 목록에 없거나 숫자가 아닌 pageSize는 기본값(20)으로 대체되는지 테스트합니다."""
        req = controller.validate_pagination_request(Request(query={"pageSize": raw_size}))
        assert req.page_size == 20

    def test_query_parameters_are_parsed(self, controller: ResourceController):
        # === Act ===
        req = controller.validate_pagination_request(Request(query={
            "page": "3", "pageSize": "50", "search": "  dune ", "sort": "title", "direction": "asc",
            "filter[status]": "AVAILABLE", "filter[]": "ignored",
        }))

        # === Assert ===
        assert req.page == 3
        assert req.page_size == 50
        assert req.search == "dune"
        assert req.direction == "ASC"
        assert req.filters == {"status": "AVAILABLE"}

    @pytest.mark.parametrize("raw_page, message", [
        ("abc", "invalid page: must be a positive integer"),
        ("0", "page must be greater than 0"),
        ("-2", "page must be greater than 0"),
    ])
    def test_invalid_page_is_rejected(self, controller: ResourceController, raw_page: str, message: str):
        with pytest.raises(InvalidArgumentError, match=message):
            controller.validate_pagination_request(Request(query={"page": raw_page}))

    @pytest.mark.parametrize("route, message", [
        ({}, "id parameter is required"),
        ({"id": "abc"}, "invalid id: must be a positive integer"),
        ({"id": "-3"}, "invalid id: must be a positive integer"),
        ({"id": "²"}, "invalid id: must be a positive integer"),
        ({"id": "٥"}, "invalid id: must be a positive integer"),
        ({"id": "0"}, "invalid id: must be greater than 0"),
    ])
    def test_validate_id(self, controller: ResourceController, route, message: str):
        with pytest.raises(InvalidArgumentError, match=message):
            controller.validate_id(Request(route=route))

    def test_validate_create_request_reports_required_fields(self, controller: ResourceController):
        errors = controller.validate_create_request(Request(body={"title": "Dune"}))
        assert errors == {"isbn": ["The isbn field is required."]}

# ===================================================================
#  핸들러(Handler) 테스트
# ===================================================================
class TestHandlers:
    def test_index_returns_paginated_envelope(self, controller, mock_service, mock_authorization):
        """목록 응답에 data, pagination, filters가 포함되는지 테스트합니다."""
        # === Arrange ===
        mock_service.get_list.return_value = PaginatedResult.build([{"id": 1}], total=1, page=1, per_page=20)

        # === Act ===
        status, body = controller.index(Request(user_id=1, query={"filter[status]": "AVAILABLE"}))

        # === Assert ===
        assert status == "200 OK"
        assert body["success"] is True
        assert body["data"] == [{"id": 1}]
        assert body["pagination"]["total"] == 1
        assert body["filters"]["filters"] == {"status": "AVAILABLE"}
        mock_authorization.has_permission.assert_called_once_with(1, "books.viewAny")

    def test_unauthenticated_request_gets_401(self, controller, mock_service):
        status, body = controller.index(Request())

        assert status == "401 Unauthorized"
        assert body["success"] is False
        mock_service.get_list.assert_not_called()

    def test_missing_permission_gets_403(self, controller, mock_service, mock_authorization):
        mock_authorization.has_permission.return_value = False

        status, body = controller.delete(Request(user_id=2, route={"id": "5"}))

        assert status == "403 Forbidden"
        assert "books.delete" in body["message"]
        mock_service.delete.assert_not_called()

    def test_show_not_found_gets_404(self, controller, mock_service):
        mock_service.get_by_id.side_effect = BookNotFoundError("Book with ID 5 not found")

        status, body = controller.show(Request(user_id=1, route={"id": "5"}))

        assert status == "404 Not Found"
        assert body["message"] == "Book with ID 5 not found"

    def test_show_invalid_id_gets_400(self, controller, mock_service):
        status, body = controller.show(Request(user_id=1, route={"id": "x"}))

        assert status == "400 Bad Request"
        assert body["errors"] == {"id": ["invalid id: must be a positive integer"]}
        mock_service.get_by_id.assert_not_called()

    def test_show_unicode_digit_id_gets_400(self, controller, mock_service):
        """int()가 읽지 못하는 유니코드 숫자 ID도 400으로 거부됩니다."""
        status, body = controller.show(Request(user_id=1, route={"id": "²"}))

        assert status == "400 Bad Request"
        assert body["errors"] == {"id": ["invalid id: must be a positive integer"]}
        mock_service.get_by_id.assert_not_called()

    def test_store_missing_field_gets_422(self, controller, mock_service):
        status, body = controller.store(Request(user_id=1, body={"title": "Dune"}))

        assert status == "422 Unprocessable Entity"
        assert "isbn" in body["errors"]
        mock_service.create.assert_not_called()

    def test_store_service_validation_gets_422(self, controller, mock_service):
        mock_service.create.side_effect = InvalidArgumentError("invalid ISBN format", field="isbn")

        status, body = controller.store(Request(user_id=1, body={"title": "Dune", "isbn": "1"}))

        assert status == "422 Unprocessable Entity"
        assert body["errors"] == {"isbn": ["invalid ISBN format"]}

    def test_store_duplicate_gets_409(self, controller, mock_service):
        mock_service.create.side_effect = ResourceAlreadyExistsError("Book with ISBN '1234567890' already exists")

        status, _ = controller.store(Request(user_id=1, body={"title": "Dune", "isbn": "1234567890"}))

        assert status == "409 Conflict"

    def test_store_success_gets_201(self, controller, mock_service, mock_authorization):
        mock_service.create.return_value = {"id": 9, "title": "Dune"}

        status, body = controller.store(Request(user_id=1, body={"title": "Dune", "isbn": "1234567890"}))

        assert status == "201 Created"
        assert body["message"] == "Book created successfully"
        mock_authorization.has_permission.assert_called_once_with(1, "books.create")

    def test_update_empty_body_gets_422(self, controller, mock_service):
        status, body = controller.update(Request(user_id=1, route={"id": "3"}, body={}))

        assert status == "422 Unprocessable Entity"
        mock_service.update.assert_not_called()

    def test_delete_success(self, controller, mock_service):
        status, body = controller.delete(Request(user_id=1, route={"id": "3"}))

        assert status == "200 OK"
        assert body["message"] == "Book with ID 3 deleted successfully"
        mock_service.delete.assert_called_once_with(3)

    def test_bulk_destroy_partial_failure_gets_400(self, controller, mock_service):
        """벌크 삭제가 중간에 실패하면 처리 현황이 errors에 담기는지 테스트합니다."""
        mock_service.bulk_delete.side_effect = BulkOperationError("delete", 1, 3, failed_id=2)

        status, body = controller.bulk_destroy(Request(user_id=1, body={"ids": [1, 2, 3]}))

        assert status == "400 Bad Request"
        assert body["errors"] == {"succeeded": 1, "total": 3, "failed_id": 2}

    def test_unexpected_error_gets_500(self, controller, mock_service):
        mock_service.get_by_id.side_effect = RuntimeError("boom")

        status, body = controller.show(Request(user_id=1, route={"id": "1"}))

        assert status == "500 Internal Server Error"
        assert body["message"] == "Internal server error"

# ===================================================================
#  인가 / 메타데이터 테스트
# ===================================================================
def test_build_permissions_map(controller, mock_authorization):
    mock_authorization.has_permission.side_effect = lambda user_id, slug: slug in ("books.viewAny", "books.export")

    permissions = controller.build_permissions_map(Request(user_id=1))

    assert permissions == {
        "canView": True, "canCreate": False, "canEdit": False,
        "canDelete": False, "canManage": False, "canExport": True,
    }

def test_metadata(controller):
    meta = controller.get_metadata()

    assert meta.resource_type == "book"
    assert "bulk_destroy" in meta.supported_actions
    assert "books.borrow" in meta.required_permissions
    assert meta.pagination_config.allowed_sizes == [5, 10, 20, 30, 50, 100]
