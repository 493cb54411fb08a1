import logging
from typing import Optional

from eventreg.config import Settings, get_settings
from eventreg.config.permissions_config import PERMISSION_MATRIX
from eventreg.database.database import Base, SessionLocal, init_engine
from eventreg.database.models import User
from eventreg.repositories.sqlalchemy import (
    SqlalchemyRoleRepository, SqlalchemyPermissionRepository, SqlalchemyGrantRepository
)
from eventreg.services.grant_service import GrantService
from eventreg.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def initialize_db(settings: Optional[Settings] = None, engine=None) -> bool:
    """
    테이블을 생성하고, 역할/권한 카탈로그가 비어 있으면 기본 카탈로그를 삽입합니다.

    settings.bootstrap_admin_user_id가 지정되어 있으면 해당 사용자에게 'admin' 역할을 부여합니다.
    사용자는 이미 존재해야 합니다.

    Returns:
        초기화가 성공했으면 True. 관리자로 지정된 사용자나 'admin' 역할이 없으면 False.
    """
    settings = settings or get_settings()
    if engine is None:
        engine = init_engine(settings.get_database_url())
    else:
        SessionLocal.configure(bind=engine)

    logger.info("Creating tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        role_repo = SqlalchemyRoleRepository(db)
        grant_service = GrantService(db, role_repo, SqlalchemyPermissionRepository(db), SqlalchemyGrantRepository(db))

        if role_repo.list_all():
            logger.info("Role/permission catalog already present, skipping seed.")
        else:
            result = grant_service.replace_catalog(PERMISSION_MATRIX)
            if not result.success:
                logger.error("Seeding catalog failed: %s", result.error)
                return False
            logger.info("Seeded catalog: %s", result.data)

        admin_user_id = settings.bootstrap_admin_user_id
        if admin_user_id:
            # 사용자 행은 외부 신원 저장소가 소유하므로 여기서 만들지 않습니다.
            if db.get(User, admin_user_id) is None:
                logger.error("User %s not found, cannot bootstrap admin user.", admin_user_id)
                return False
            admin_role = role_repo.find_by_slug(ADMIN_ROLE)
            if admin_role is None:
                logger.error("Role '%s' not found, cannot bootstrap admin user.", ADMIN_ROLE)
                return False
            result = grant_service.assign_role_to_user(admin_user_id, admin_role.id)
            if not result.success:
                logger.error("Assigning admin role failed: %s", result.error)
                return False
            logger.info("User %s holds the '%s' role.", admin_user_id, ADMIN_ROLE)
        return True
    finally:
        db.close()


if __name__ == '__main__':
    configure_logging(get_settings().log_level)
    initialize_db()
