from typing import List
from sqlalchemy.orm import Session
from eventreg.database import models
from eventreg.repositories.interfaces import IGrantRepository
from eventreg.repositories.sqlalchemy.insert_ignore import insert_or_ignore

class SqlalchemyGrantRepository(IGrantRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def _insert_link(self, model, **values):
        # 연결 테이블의 기본 키는 두 외래 키 컬럼 전체입니다.
        insert_or_ignore(self.db, model, values, index_elements=list(values))

    def _delete_first(self, query) -> bool:
        association = query.first()
        if association:
            self.db.delete(association)
            self.db.flush()
            return True
        return False

    def assign_role_to_user(self, user_id: str, role_id: int):
        self._insert_link(models.UserRole, user_id=user_id, role_id=role_id)

    def revoke_role_from_user(self, user_id: str, role_id: int) -> bool:
        return self._delete_first(self.db.query(models.UserRole).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.role_id == role_id
        ))

    def grant_permission_to_role(self, role_id: int, permission_id: int):
        self._insert_link(models.RolePermission, role_id=role_id, permission_id=permission_id)

    def revoke_permission_from_role(self, role_id: int, permission_id: int) -> bool:
        return self._delete_first(self.db.query(models.RolePermission).filter(
            models.RolePermission.role_id == role_id,
            models.RolePermission.permission_id == permission_id
        ))

    def grant_permission_to_user(self, user_id: str, permission_id: int):
        self._insert_link(models.UserPermission, user_id=user_id, permission_id=permission_id)

    def revoke_permission_from_user(self, user_id: str, permission_id: int) -> bool:
        return self._delete_first(self.db.query(models.UserPermission).filter(
            models.UserPermission.user_id == user_id,
            models.UserPermission.permission_id == permission_id
        ))

    def list_direct_permission_slugs(self, user_id: str) -> List[str]:
        rows = self.db.query(models.Permission.slug).join(
            models.UserPermission, models.UserPermission.permission_id == models.Permission.id
        ).filter(models.UserPermission.user_id == user_id).all()
        return [row[0] for row in rows]

    def list_role_permission_slugs(self, user_id: str) -> List[str]:
        rows = self.db.query(models.Permission.slug).join(
            models.RolePermission, models.RolePermission.permission_id == models.Permission.id
        ).join(
            models.Role, models.Role.id == models.RolePermission.role_id
        ).join(
            models.UserRole, models.UserRole.role_id == models.Role.id
        ).filter(models.UserRole.user_id == user_id).all()
        return [row[0] for row in rows]

    def list_permission_slugs_for_role(self, role_id: int) -> List[str]:
        rows = self.db.query(models.Permission.slug).join(
            models.RolePermission, models.RolePermission.permission_id == models.Permission.id
        ).filter(models.RolePermission.role_id == role_id).order_by(models.Permission.slug.asc()).all()
        return [row[0] for row in rows]

    def list_role_slugs_for_user(self, user_id: str) -> List[str]:
        rows = self.db.query(models.Role.slug).join(
            models.UserRole, models.UserRole.role_id == models.Role.id
        ).filter(models.UserRole.user_id == user_id).order_by(models.Role.slug.asc()).all()
        return [row[0] for row in rows]

    def clear_catalog(self):
        # ORM 삭제를 사용해야 cascade로 연결 행도 지워지고, 세션의 identity map에서도 제거됩니다.
        for model in (models.Role, models.Permission):
            for row in self.db.query(model).all():
                self.db.delete(row)
        self.db.flush()
