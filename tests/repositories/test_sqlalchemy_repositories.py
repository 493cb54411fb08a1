# tests/repositories/test_sqlalchemy_repositories.py
import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from eventreg.database import models
from eventreg.repositories.sqlalchemy import (
    SqlalchemyRoleRepository, SqlalchemyPermissionRepository, SqlalchemyGrantRepository
)

# ===================================================================
#  Fixture 설정 (인메모리 SQLite)
# ===================================================================

@pytest.fixture
def role_repo(db_session) -> SqlalchemyRoleRepository:
    return SqlalchemyRoleRepository(db_session)

@pytest.fixture
def permission_repo(db_session) -> SqlalchemyPermissionRepository:
    return SqlalchemyPermissionRepository(db_session)

@pytest.fixture
def grant_repo(db_session) -> SqlalchemyGrantRepository:
    return SqlalchemyGrantRepository(db_session)

# ===================================================================
#  역할/권한 생성 테스트
# ===================================================================
class TestCreateIfAbsent:
    def test_create_role_twice_keeps_one_row(self, db_session, role_repo):
        """같은 slug로 두 번 생성해도 행이 하나만 남는지 테스트합니다."""
        # === Act ===
        first, first_created = role_repo.create_if_absent("organizer", "Runs events")
        second, second_created = role_repo.create_if_absent("organizer", "ignored")
        db_session.commit()

        # === Assert ===
        assert first_created is True
        assert second_created is False
        assert first.id == second.id
        assert db_session.query(models.Role).count() == 1
        assert role_repo.find_by_slug("organizer").description == "Runs events"

    def test_create_permission_twice_keeps_one_row(self, db_session, permission_repo):
        permission_repo.create_if_absent("event:manage:all")
        _, created = permission_repo.create_if_absent("event:manage:all")
        db_session.commit()

        assert created is False
        assert db_session.query(models.Permission).count() == 1

    def test_check_constraint_rejects_upper_case(self, db_session, role_repo):
        """소문자가 아닌 slug는 DB의 CHECK 제약으로 거부되는지 테스트합니다."""
        with pytest.raises(IntegrityError):
            role_repo.create_if_absent("Organizer")
        db_session.rollback()

    def test_list_all_ordered_by_slug(self, db_session, role_repo):
        for slug in ("participant", "admin", "judge"):
            role_repo.create_if_absent(slug)
        db_session.commit()

        assert [role.slug for role in role_repo.list_all()] == ["admin", "judge", "participant"]

    def test_delete_missing_returns_false(self, role_repo, permission_repo):
        assert role_repo.delete_by_id(404) is False
        assert permission_repo.delete_by_id(404) is False

# ===================================================================
#  연결 테이블 및 권한 조회 테스트
# ===================================================================
class TestGrants:
    @pytest.fixture
    def catalog(self, db_session, make_user, role_repo, permission_repo):
        user_id = make_user("alice")
        organizer, _ = role_repo.create_if_absent("organizer")
        judge, _ = role_repo.create_if_absent("judge")
        manage, _ = permission_repo.create_if_absent("event:manage:all")
        review, _ = permission_repo.create_if_absent("submission:review:any")
        read, _ = permission_repo.create_if_absent("event:read:all")
        db_session.commit()
        return {
            "user": user_id, "organizer": organizer.id, "judge": judge.id,
            "manage": manage.id, "review": review.id, "read": read.id,
        }

    def test_duplicate_assignment_is_ignored(self, db_session, grant_repo, catalog):
        grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
        grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
        db_session.commit()

        assert db_session.query(models.UserRole).count() == 1

    def test_link_insert_is_single_conflict_ignoring_statement(self, engine, grant_repo, catalog):
        """연결 행은 사전 조회 없이 ON CONFLICT DO NOTHING 한 문장으로 삽입되는지 테스트합니다."""
        # === Arrange ===
        statements = []
        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)
        event.listen(engine, "before_cursor_execute", capture)

        # === Act ===
        try:
            grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
            grant_repo.grant_permission_to_role(catalog["organizer"], catalog["manage"])
            grant_repo.grant_permission_to_user(catalog["user"], catalog["read"])
        finally:
            event.remove(engine, "before_cursor_execute", capture)

        # === Assert ===
        assert len(statements) == 3
        for statement in statements:
            assert statement.lstrip().upper().startswith("INSERT")
            assert "ON CONFLICT" in statement.upper()
            assert "DO NOTHING" in statement.upper()

    def test_link_committed_by_another_session_is_ignored(self, engine, db_session, grant_service, catalog):
        """다른 요청이 먼저 같은 연결 행을 커밋해도 중복 삽입이 성공으로 끝나는지 테스트합니다."""
        # === Arrange ===
        other = sessionmaker(bind=engine)()
        try:
            other.add(models.UserRole(user_id=catalog["user"], role_id=catalog["judge"]))
            other.add(models.RolePermission(role_id=catalog["judge"], permission_id=catalog["review"]))
            other.add(models.UserPermission(user_id=catalog["user"], permission_id=catalog["review"]))
            other.commit()
        finally:
            other.close()

        # === Act ===
        results = [
            grant_service.assign_role_to_user(catalog["user"], catalog["judge"]),
            grant_service.grant_permission_to_role(catalog["judge"], catalog["review"]),
            grant_service.grant_permission_to_user(catalog["user"], catalog["review"]),
        ]

        # === Assert ===
        assert all(result.success for result in results)
        assert db_session.query(models.UserRole).count() == 1
        assert db_session.query(models.RolePermission).count() == 1
        assert db_session.query(models.UserPermission).count() == 1

    def test_unknown_role_violates_foreign_key(self, db_session, grant_repo, catalog):
        with pytest.raises(IntegrityError):
            grant_repo.assign_role_to_user(catalog["user"], 999)
        db_session.rollback()

    def test_direct_and_role_permission_slugs(self, db_session, grant_repo, catalog):
        # === Arrange ===
        grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
        grant_repo.assign_role_to_user(catalog["user"], catalog["judge"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["manage"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["read"])
        grant_repo.grant_permission_to_role(catalog["judge"], catalog["read"])
        grant_repo.grant_permission_to_user(catalog["user"], catalog["review"])
        db_session.commit()

        # === Act ===
        direct = grant_repo.list_direct_permission_slugs(catalog["user"])
        via_roles = grant_repo.list_role_permission_slugs(catalog["user"])

        # === Assert ===
        assert direct == ["submission:review:any"]
        assert sorted(via_roles) == ["event:manage:all", "event:read:all", "event:read:all"]
        assert grant_repo.list_role_slugs_for_user(catalog["user"]) == ["judge", "organizer"]
        assert grant_repo.list_permission_slugs_for_role(catalog["organizer"]) == ["event:manage:all", "event:read:all"]

    def test_revoke_returns_whether_row_existed(self, db_session, grant_repo, catalog):
        grant_repo.grant_permission_to_user(catalog["user"], catalog["review"])
        db_session.commit()

        assert grant_repo.revoke_permission_from_user(catalog["user"], catalog["review"]) is True
        assert grant_repo.revoke_permission_from_user(catalog["user"], catalog["review"]) is False
        assert grant_repo.revoke_role_from_user(catalog["user"], catalog["judge"]) is False
        assert grant_repo.revoke_permission_from_role(catalog["judge"], catalog["read"]) is False

    def test_delete_role_cascades_to_links(self, db_session, role_repo, grant_repo, catalog):
        """역할 삭제 시 사용자-역할, 역할-권한 행이 함께 삭제되는지 테스트합니다."""
        # === Arrange ===
        grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["manage"])
        grant_repo.grant_permission_to_role(catalog["judge"], catalog["read"])
        db_session.commit()

        # === Act ===
        assert role_repo.delete_by_id(catalog["organizer"]) is True
        db_session.commit()

        # === Assert ===
        assert db_session.query(models.UserRole).count() == 0
        assert db_session.query(models.RolePermission).count() == 1
        assert db_session.query(models.Permission).count() == 3
        assert grant_repo.list_role_permission_slugs(catalog["user"]) == []

    def test_delete_permission_cascades_to_links(self, db_session, permission_repo, grant_repo, catalog):
        grant_repo.grant_permission_to_user(catalog["user"], catalog["manage"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["manage"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["read"])
        db_session.commit()

        permission_repo.delete_by_id(catalog["manage"])
        db_session.commit()

        assert db_session.query(models.UserPermission).count() == 0
        assert grant_repo.list_permission_slugs_for_role(catalog["organizer"]) == ["event:read:all"]

    def test_clear_catalog(self, db_session, grant_repo, catalog):
        grant_repo.assign_role_to_user(catalog["user"], catalog["organizer"])
        grant_repo.grant_permission_to_role(catalog["organizer"], catalog["manage"])
        grant_repo.grant_permission_to_user(catalog["user"], catalog["read"])
        db_session.commit()

        grant_repo.clear_catalog()
        db_session.commit()

        for model in (models.Role, models.Permission, models.UserRole, models.UserPermission, models.RolePermission):
            assert db_session.query(model).count() == 0
        # 사용자 자체는 외부 신원 저장소 소유이므로 남아 있어야 함
        assert db_session.query(models.User).count() == 1
