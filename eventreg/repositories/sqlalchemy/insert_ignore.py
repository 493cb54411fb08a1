from typing import Any, Dict, Optional, Sequence, Tuple

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

# INSERT ... ON CONFLICT DO NOTHING을 지원하는 방언
_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_or_ignore(db: Session, model, values: Dict[str, Any], index_elements: Sequence[str]) -> bool:
    """
    index_elements가 가리키는 유일 키(연결 테이블의 복합 기본 키 등)가 충돌하면 아무 일도 하지 않는 INSERT.

    조회 후 삽입하지 않고 한 문장으로 처리하므로, 같은 행을 동시에 삽입하는 요청도 오류 없이 끝납니다.
    외래 키 위반은 IntegrityError로 그대로 전파됩니다.

    Returns:
        새 행이 삽입되었으면 True.
    """
    dialect_insert = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if dialect_insert is None:
        db.merge(model(**values))
        db.flush()
        return True

    stmt = dialect_insert(model).values(**values).on_conflict_do_nothing(index_elements=list(index_elements))
    return db.execute(stmt).rowcount > 0


def insert_slug_or_ignore(db: Session, model, slug: str, description: Optional[str]) -> Tuple[object, bool]:
    """
    slug가 유일한 모델(Role, Permission)에 행을 삽입합니다.

    slug 충돌은 오류가 아니며, 기존 행을 돌려줍니다. 그 밖의 제약 위반
    (소문자 검사 등)은 IntegrityError로 그대로 전파됩니다.

    Returns:
        (모델 객체, 새로 생성되었는지 여부) 튜플.
    """
    dialect_insert = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if dialect_insert is None:
        existing = db.query(model).filter(model.slug == slug).first()
        if existing:
            return existing, False
        obj = model(slug=slug, description=description)
        db.add(obj)
        db.flush()
        return obj, True

    stmt = (
        dialect_insert(model)
        .values(slug=slug, description=description)
        .on_conflict_do_nothing(index_elements=["slug"])
        .returning(model.id)
    )
    new_id = db.execute(stmt).scalar_one_or_none()
    if new_id is not None:
        return db.get(model, new_id), True
    return db.query(model).filter(model.slug == slug).one(), False
