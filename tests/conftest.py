# tests/conftest.py
import pytest
from sqlalchemy.pool import StaticPool

from eventreg.database.database import Base, create_db_engine
from eventreg.database import models
from eventreg.repositories.sqlalchemy import (
    SqlalchemyRoleRepository, SqlalchemyPermissionRepository, SqlalchemyGrantRepository
)
from eventreg.services.authorization_service import AuthorizationService
from eventreg.services.grant_service import GrantService
from sqlalchemy.orm import sessionmaker


@pytest.fixture
def engine():
    """외래 키 제약이 켜진 인메모리 SQLite 엔진을 생성합니다."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()

@pytest.fixture
def make_user(db_session):
    """외부 신원 저장소를 대신하여 사용자 행을 삽입합니다."""
    def _make_user(name: str, user_id: str = None) -> str:
        user = models.User(name=name, email=f"{name}@test.com")
        if user_id:
            user.id = user_id
        db_session.add(user)
        db_session.commit()
        return user.id
    return _make_user

@pytest.fixture
def grant_service(db_session) -> GrantService:
    return GrantService(
        db_session,
        SqlalchemyRoleRepository(db_session),
        SqlalchemyPermissionRepository(db_session),
        SqlalchemyGrantRepository(db_session),
    )

@pytest.fixture
def authz_service(db_session) -> AuthorizationService:
    return AuthorizationService(SqlalchemyGrantRepository(db_session))
