# rbac_admin/permissions/catalog.py
from typing import List, NamedTuple


class GatePermission(NamedTuple):
    name: str
    slug: str
    category: str
    resource: str
    action: str
    description: str


# 애플리케이션이 인가 판정에 사용하는 게이트 권한 목록. 행렬 조회 시 slug 기준으로 DB와 동기화됩니다.
GATE_CATALOG: List[GatePermission] = [
    GatePermission("View Any Books", "books.viewAny", "books", "books", "viewAny", "View any books in the system"),
    GatePermission("View Books", "books.view", "books", "books", "view", "View specific books"),
    GatePermission("Create Books", "books.create", "books", "books", "create", "Create new books"),
    GatePermission("Update Books", "books.update", "books", "books", "update", "Update existing books"),
    GatePermission("Delete Books", "books.delete", "books", "books", "delete", "Delete books"),
    GatePermission("Borrow Books", "books.borrow", "books", "books", "borrow", "Borrow books"),
    GatePermission("Return Books", "books.return", "books", "books", "return", "Return books"),
    GatePermission("Manage Books", "books.manage", "books", "books", "manage", "Full book management"),
    GatePermission("Export Books", "books.export", "books", "books", "export", "Export book data"),

    GatePermission("View Any Users", "users.viewAny", "users", "users", "viewAny", "View any users in the system"),
    GatePermission("View Users", "users.view", "users", "users", "view", "View specific users"),
    GatePermission("Create Users", "users.create", "users", "users", "create", "Create new users"),
    GatePermission("Update Users", "users.update", "users", "users", "update", "Update existing users"),
    GatePermission("Delete Users", "users.delete", "users", "users", "delete", "Delete users"),
    GatePermission("Impersonate Users", "users.impersonate", "users", "users", "impersonate", "Impersonate other users"),
    GatePermission("Manage Users", "users.manage", "users", "users", "manage", "Full user management"),

    GatePermission("Manage System", "system.manage", "system", "system", "manage", "Full system management"),
    GatePermission("Backup System", "system.backup", "system", "system", "backup", "Create system backups"),
    GatePermission("Configure System", "system.configure", "system", "system", "configure", "Configure system settings"),

    GatePermission("View Reports", "reports.view", "reports", "reports", "view", "View reports and analytics"),
    GatePermission("Export Reports", "reports.export", "reports", "reports", "export", "Export reports"),
]
