# rbac_admin/services/exceptions.py
from typing import List, Optional


class RbacAdminError(Exception):
    """이 패키지에서 발생하는 모든 도메인 예외의 기반 클래스"""
    pass

# --- Validation Exceptions ---
class InvalidArgumentError(RbacAdminError):
    """페이지네이션/정렬/필터/벌크 입력값이 잘못되었을 때"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

# --- Not Found Exceptions ---
class NotFoundError(RbacAdminError):
    """요청한 대상을 찾을 수 없을 때"""
    pass

class ServiceNotFoundError(NotFoundError):
    """레지스트리에 등록되지 않은 서비스/컨트롤러를 조회할 때"""
    pass

class RoleNotFoundError(NotFoundError):
    """역할을 찾을 수 없거나 비활성 상태일 때"""
    pass

class PermissionNotFoundError(NotFoundError):
    """권한을 찾을 수 없거나 비활성 상태일 때"""
    pass

class UserNotFoundError(NotFoundError):
    """사용자를 찾을 수 없을 때"""
    pass

class BookNotFoundError(NotFoundError):
    """도서를 찾을 수 없을 때"""
    pass

# --- Conflict Exceptions ---
class ConflictError(RbacAdminError):
    """요청이 현재 상태와 충돌할 때"""
    pass

class DuplicateIdError(InvalidArgumentError, ConflictError):
    """벌크 요청에 같은 ID가 두 번 이상 들어 있을 때"""

    def __init__(self, duplicate_id: int):
        super().__init__(f"duplicate ID {duplicate_id} in bulk operation", field="ids")
        self.id = duplicate_id

class ResourceAlreadyExistsError(ConflictError):
    """고유해야 하는 값(slug, email, isbn 등)이 이미 존재할 때"""
    pass

class InvalidStateError(ConflictError):
    """현재 상태에서 허용되지 않는 전이(예: 대출 중인 도서 재대출)일 때"""
    pass

# --- Contract / Transaction Exceptions ---
class ContractViolationError(RbacAdminError):
    """등록 시점에 필수 연산이 구현되지 않은 후보를 등록하려 할 때"""

    def __init__(self, name: str, missing: List[str], kind: str = "service"):
        self.name = name
        self.kind = kind
        self.missing = list(missing)
        super().__init__(
            f"{kind} '{name}' validation failed: {kind} is missing required methods: {self.missing}"
        )

class TransactionFailureError(RbacAdminError):
    """트랜잭션이 실패하여 롤백되었을 때"""
    pass

class BulkOperationError(RbacAdminError):
    """순차 벌크 작업이 중간에 실패했을 때. 앞서 처리된 항목은 이미 반영된 상태입니다."""

    def __init__(self, operation: str, succeeded: int, total: int, failed_id=None, cause: Exception = None):
        self.operation = operation
        self.succeeded = succeeded
        self.total = total
        self.failed_id = failed_id
        self.cause = cause
        detail = ""
        if failed_id is not None:
            detail = f" (failed at ID {failed_id}: {cause})"
        elif cause is not None:
            detail = f" ({cause})"
        super().__init__(f"bulk {operation} failed: {succeeded} of {total} succeeded{detail}")

# --- Auth Exceptions ---
class UnauthenticatedError(RbacAdminError):
    """요청에 행위자(actor) 정보가 없을 때"""
    pass

class PermissionDeniedError(RbacAdminError):
    """행위자에게 필요한 권한이 없을 때"""
    pass
