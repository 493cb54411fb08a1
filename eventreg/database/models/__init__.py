from .user import User
from .role import Role
from .permission import Permission
from .association import UserRole, UserPermission, RolePermission
