from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from eventreg.database import models
from eventreg.repositories.interfaces import IPermissionRepository
from eventreg.repositories.sqlalchemy.insert_ignore import insert_slug_or_ignore

class SqlalchemyPermissionRepository(IPermissionRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create_if_absent(self, slug: str, description: Optional[str] = None) -> Tuple[models.Permission, bool]:
        return insert_slug_or_ignore(self.db, models.Permission, slug, description)

    def find_by_id(self, permission_id: int) -> Optional[models.Permission]:
        return self.db.query(models.Permission).filter(models.Permission.id == permission_id).first()

    def list_all(self) -> List[models.Permission]:
        return self.db.query(models.Permission).order_by(models.Permission.slug.asc()).all()

    def delete_by_id(self, permission_id: int) -> bool:
        permission = self.find_by_id(permission_id)
        if permission:
            self.db.delete(permission)
            self.db.flush()
            return True
        return False
