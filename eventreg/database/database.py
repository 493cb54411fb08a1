from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# 세션 팩토리는 엔진 없이 먼저 만들어 두고, init_engine()에서 바인딩합니다.
# autoflush=False로 설정하여, 서비스가 명시적으로 commit을 호출해야 DB에 반영됩니다.
SessionLocal = sessionmaker(autoflush=False)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite는 연결마다 외래 키 제약을 켜야 ON DELETE CASCADE가 동작합니다.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """
    연결 문자열로 SQLAlchemy 엔진을 생성합니다.

    SQLite의 경우 스레드 검사 옵션을 끄고, 외래 키 제약을 활성화합니다.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


def init_engine(database_url: str, **kwargs) -> Engine:
    """엔진을 생성하고 SessionLocal에 바인딩합니다."""
    engine = create_db_engine(database_url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine
