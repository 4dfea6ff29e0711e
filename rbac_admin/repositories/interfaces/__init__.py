from .base import IRepository, IPageableRepository
from .book import IBookRepository
from .user import IUserRepository
from .role import IRoleRepository
from .permission import IPermissionRepository
from .role_permission import IRolePermissionRepository
from .user_role import IUserRoleRepository
