from .base_controller import BaseCrudController, Request, Response
from .resource_controller import ResourceController, ACTION_PERMISSIONS
from .permissions_controller import PermissionsController
