# tests/database/test_db_init.py
import pytest
from sqlalchemy.orm import sessionmaker

from eventreg.config import Settings
from eventreg.config.permissions_config import PERMISSION_MATRIX
from eventreg.database import models
from eventreg.database.db_init import initialize_db
from eventreg.repositories.sqlalchemy import SqlalchemyGrantRepository

ADMIN_ID = "00000000-0000-4000-8000-000000000001"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="sqlite://", bootstrap_admin_user_id=ADMIN_ID)


def test_initialize_db_seeds_catalog_and_admin(engine, settings, make_user):
    # === Arrange ===
    make_user("admin", user_id=ADMIN_ID)

    # === Act ===
    assert initialize_db(settings, engine=engine) is True

    # === Assert ===
    session = sessionmaker(bind=engine)()
    try:
        assert session.query(models.Role).count() == len(PERMISSION_MATRIX["roles"])
        assert session.query(models.Permission).count() == len(PERMISSION_MATRIX["permissions"])
        assert SqlalchemyGrantRepository(session).list_role_slugs_for_user(ADMIN_ID) == ["admin"]
    finally:
        session.close()

def test_initialize_db_is_idempotent(engine, settings, make_user):
    make_user("admin", user_id=ADMIN_ID)

    assert initialize_db(settings, engine=engine) is True
    assert initialize_db(settings, engine=engine) is True

    session = sessionmaker(bind=engine)()
    try:
        assert session.query(models.Role).count() == len(PERMISSION_MATRIX["roles"])
        assert session.query(models.UserRole).count() == 1
    finally:
        session.close()

def test_initialize_db_does_not_create_missing_admin_user(engine, settings):
    """관리자로 지정된 사용자가 없으면 사용자 행을 만들지 않고 실패를 반환하는지 테스트합니다."""
    # === Act ===
    assert initialize_db(settings, engine=engine) is False

    # === Assert ===
    session = sessionmaker(bind=engine)()
    try:
        # 카탈로그는 시드되지만 users 테이블은 건드리지 않습니다.
        assert session.query(models.Role).count() == len(PERMISSION_MATRIX["roles"])
        assert session.query(models.User).count() == 0
        assert session.query(models.UserRole).count() == 0
    finally:
        session.close()
