from .types import (
    ListRequest, PaginatedResult, ServiceMetadata, ControllerMetadata, PaginationConfig,
    ValidationResult, ResponseFormat, BulkAssignmentRequest, MatrixStats, PermissionGroup,
    PermissionMatrix,
)
from .service_contracts import (
    CrudContract, PaginationContract, SortableContract, FilterableContract, SearchableContract,
    BulkOperationsContract, ServiceConfigurationContract, CompleteCrudService, PermissionMatrixContract,
)
from .controller_contracts import (
    CrudControllerContract, PaginationControllerContract, ValidationControllerContract,
    ResponseControllerContract, AuthorizationControllerContract, ResourceControllerContract,
)
from .registry import ContractRegistry
