from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from eventreg.database import models
from eventreg.repositories.interfaces import IRoleRepository
from eventreg.repositories.sqlalchemy.insert_ignore import insert_slug_or_ignore

class SqlalchemyRoleRepository(IRoleRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create_if_absent(self, slug: str, description: Optional[str] = None) -> Tuple[models.Role, bool]:
        return insert_slug_or_ignore(self.db, models.Role, slug, description)

    def find_by_id(self, role_id: int) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(models.Role.id == role_id).first()

    def find_by_slug(self, slug: str) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(models.Role.slug == slug).first()

    def list_all(self) -> List[models.Role]:
        return self.db.query(models.Role).order_by(models.Role.slug.asc()).all()

    def delete_by_id(self, role_id: int) -> bool:
        role = self.find_by_id(role_id)
        if role:
            self.db.delete(role)
            self.db.flush()
            return True
        return False
