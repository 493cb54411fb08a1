from .role import IRoleRepository
from .permission import IPermissionRepository
from .grant import IGrantRepository
