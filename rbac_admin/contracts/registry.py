# rbac_admin/contracts/registry.py
import logging
from typing import Any, Dict, List, Type

from rbac_admin.services.exceptions import ContractViolationError, ServiceNotFoundError
from .types import ValidationResult

logger = logging.getLogger(__name__)


class ContractRegistry:
    """
    이름 -> 구현체 조회 테이블. 등록 시점에 계약 적합성을 검사합니다.

    필수 연산은 계약 ABC의 추상 메서드 집합이며, 후보가 계약을 상속했는지와
    관계없이 같은 이름의 호출 가능한 속성이 모두 있으면 등록을 허용합니다.
    시작 시 채우고 이후에는 읽기만 하는 것을 전제로 하며, 잠금은 사용하지 않습니다.
    """

    def __init__(self, contract: Type, kind: str = "service"):
        self.contract = contract
        self.kind = kind
        self._entries: Dict[str, Any] = {}
        self._validation_enabled = True

    @property
    def required_operations(self) -> List[str]:
        return sorted(getattr(self.contract, "__abstractmethods__", ()))

    def enable_validation(self, enabled: bool = True):
        """등록 시 적합성 검사를 켜거나 끕니다. validate_all()에는 영향을 주지 않습니다."""
        self._validation_enabled = enabled

    def validate(self, candidate: Any) -> ValidationResult:
        missing = [name for name in self.required_operations if not callable(getattr(candidate, name, None))]
        if not missing:
            return ValidationResult(valid=True)
        return ValidationResult(
            valid=False,
            errors=[f"{self.kind} is missing required methods: {missing}"],
            missing=missing,
        )

    def register(self, name: str, candidate: Any):
        """
        후보를 검사한 뒤 name으로 등록합니다. 같은 이름의 기존 항목은 덮어씁니다.

        Raises:
            ContractViolationError: 필수 연산이 하나라도 없을 때. 누락된 연산 이름을 모두 포함합니다.
        """
        if self._validation_enabled:
            result = self.validate(candidate)
            if not result.valid:
                logger.error("Rejected %s '%s': missing %s", self.kind, name, result.missing)
                raise ContractViolationError(name, result.missing, kind=self.kind)

        if name in self._entries:
            logger.debug("Overwriting registered %s '%s'", self.kind, name)
        self._entries[name] = candidate
        logger.info("Registered %s '%s' (%s)", self.kind, name, type(candidate).__name__)

    def must_register(self, name: str, candidate: Any):
        """register와 같지만 계약 위반 시 프로세스를 종료합니다. 시작 시 배선에서만 사용합니다."""
        try:
            self.register(name, candidate)
        except ContractViolationError as e:
            logger.critical("Failed to register %s '%s': %s", self.kind, name, e)
            raise SystemExit(str(e)) from e

    def get(self, name: str) -> Any:
        """
        Raises:
            ServiceNotFoundError: name으로 등록된 항목이 없을 때.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise ServiceNotFoundError(f"{self.kind} '{name}' not found in registry") from None

    def list(self) -> List[str]:
        return sorted(self._entries)

    def validate_all(self) -> Dict[str, ValidationResult]:
        """등록된 모든 항목을 다시 검사합니다."""
        return {name: self.validate(candidate) for name, candidate in self._entries.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
