from .sqlalchemy_base_repository import SqlalchemyBaseRepository, UNIT_OF_WORK_KEY
from .sqlalchemy_book_repository import SqlalchemyBookRepository
from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_role_repository import SqlalchemyRoleRepository
from .sqlalchemy_permission_repository import SqlalchemyPermissionRepository
from .sqlalchemy_role_permission_repository import SqlalchemyRolePermissionRepository
from .sqlalchemy_user_role_repository import SqlalchemyUserRoleRepository
