from .registry import (
    StandardPermission, CorePermissionAction, ServiceName,
    CustomPermissionDefinition, ResourcePermissionConfig, PermissionRegistry,
    generate_permission_slug, build_permission_slug, parse_permission_slug,
    slug_aliases, wildcard_matches, build_default_permission_registry,
)
from .catalog import GatePermission, GATE_CATALOG
