import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventreg.repositories.interfaces import (
    IRoleRepository, IPermissionRepository, IGrantRepository
)
from eventreg.services.exceptions import InvalidSlugError, UnknownPermissionError
from eventreg.services.permissions import normalize_slug, normalize_permission_slug
from eventreg.services.results import ActionResult, CreateOutcome, CreateStatus, ErrorKind

logger = logging.getLogger(__name__)


class GrantService:
    """역할, 권한과 그 연결(사용자-역할, 역할-권한, 사용자-권한)을 관리하는 서비스입니다."""

    def __init__(self, db_session: Session, role_repo: IRoleRepository, permission_repo: IPermissionRepository, grant_repo: IGrantRepository):
        """
        GrantService를 초기화합니다.

        Args:
            db_session: 트랜잭션 경계(commit/rollback)를 관리할 세션.
            role_repo: 역할 데이터에 접근하기 위한 리포지토리.
            permission_repo: 권한 데이터에 접근하기 위한 리포지토리.
            grant_repo: 연결 테이블에 접근하기 위한 리포지토리.
        """
        self.db = db_session
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.grant_repo = grant_repo

    def _execute(self, failure_message: str, operation: Callable[[], Any], write: bool = True) -> ActionResult:
        """
        operation을 하나의 트랜잭션으로 실행하고 결과를 ActionResult로 감쌉니다.

        검증 오류와 저장소 오류는 모두 롤백된 뒤 실패 결과로 반환되며, 호출자에게 예외로 전파되지 않습니다.
        """
        try:
            data = operation()
            if write:
                self.db.commit()
        except (InvalidSlugError, UnknownPermissionError) as e:
            self.db.rollback()
            return ActionResult.fail(str(e), ErrorKind.VALIDATION)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("%s: %s", failure_message, e)
            return ActionResult.fail(f"{failure_message}: {e}", ErrorKind.STORAGE)
        return ActionResult.ok(data)

    @staticmethod
    def _outcome(row, created: bool, kind: str) -> CreateOutcome:
        if not created:
            logger.debug("%s '%s' already exists (id=%s)", kind, row.slug, row.id)
        return CreateOutcome(
            id=row.id,
            status=CreateStatus.CREATED if created else CreateStatus.ALREADY_EXISTED
        )

    # --- Roles ---

    def create_role(self, slug: str, description: Optional[str] = None) -> ActionResult[CreateOutcome]:
        """
        새 역할을 생성합니다.

        Args:
            slug: 역할의 고유 이름 (예: 'organizer'). 소문자로 정규화됩니다.
            description: 역할 설명.

        Returns:
            성공 시 CreateOutcome. 같은 slug의 역할이 이미 있으면 그 id와 ALREADY_EXISTED 상태를 담습니다.
        """
        def operation():
            role, created = self.role_repo.create_if_absent(normalize_slug(slug), description)
            return self._outcome(role, created, "Role")
        return self._execute("Failed to create role", operation)

    def delete_role(self, role_id: int) -> ActionResult[None]:
        """역할을 삭제합니다. 연결된 사용자-역할, 역할-권한 행도 함께 삭제됩니다. 역할이 없어도 성공입니다."""
        def operation():
            if not self.role_repo.delete_by_id(role_id):
                logger.debug("Role %s not found, nothing to delete", role_id)
        return self._execute("Failed to delete role", operation)

    def list_roles(self) -> ActionResult[List[Dict[str, Any]]]:
        """모든 역할의 목록을 조회합니다."""
        return self._execute(
            "Failed to list roles",
            lambda: [{"id": r.id, "slug": r.slug, "description": r.description} for r in self.role_repo.list_all()],
            write=False
        )

    # --- Permissions ---

    def add_permission(self, slug: str, description: Optional[str] = None) -> ActionResult[CreateOutcome]:
        """
        새 권한을 등록합니다.

        Args:
            slug: 'entity:action:scope' 형식의 권한 문자열 (예: 'submission:review:self').
            description: 권한 설명.

        Returns:
            성공 시 CreateOutcome. 형식이 잘못된 slug는 검증 실패 결과로 거부됩니다.
        """
        def operation():
            permission, created = self.permission_repo.create_if_absent(normalize_permission_slug(slug), description)
            return self._outcome(permission, created, "Permission")
        return self._execute("Failed to add permission", operation)

    def delete_permission(self, permission_id: int) -> ActionResult[None]:
        """권한을 삭제합니다. 연결된 역할-권한, 사용자-권한 행도 함께 삭제됩니다."""
        def operation():
            if not self.permission_repo.delete_by_id(permission_id):
                logger.debug("Permission %s not found, nothing to delete", permission_id)
        return self._execute("Failed to delete permission", operation)

    def list_permissions(self) -> ActionResult[List[Dict[str, Any]]]:
        """모든 권한의 목록을 조회합니다."""
        return self._execute(
            "Failed to list permissions",
            lambda: [{"id": p.id, "slug": p.slug, "description": p.description} for p in self.permission_repo.list_all()],
            write=False
        )

    # --- Links ---

    def assign_role_to_user(self, user_id: str, role_id: int) -> ActionResult[None]:
        return self._execute("Failed to assign role", lambda: self.grant_repo.assign_role_to_user(user_id, role_id))

    def revoke_role_from_user(self, user_id: str, role_id: int) -> ActionResult[None]:
        return self._execute("Failed to revoke role", lambda: self._revoke(self.grant_repo.revoke_role_from_user(user_id, role_id)))

    def grant_permission_to_role(self, role_id: int, permission_id: int) -> ActionResult[None]:
        return self._execute("Failed to grant permission", lambda: self.grant_repo.grant_permission_to_role(role_id, permission_id))

    def revoke_permission_from_role(self, role_id: int, permission_id: int) -> ActionResult[None]:
        return self._execute("Failed to revoke permission", lambda: self._revoke(self.grant_repo.revoke_permission_from_role(role_id, permission_id)))

    def grant_permission_to_user(self, user_id: str, permission_id: int) -> ActionResult[None]:
        """역할 멤버십을 거치지 않고 사용자에게 권한을 직접 부여합니다."""
        return self._execute("Failed to grant permission", lambda: self.grant_repo.grant_permission_to_user(user_id, permission_id))

    def revoke_permission_from_user(self, user_id: str, permission_id: int) -> ActionResult[None]:
        return self._execute("Failed to revoke permission", lambda: self._revoke(self.grant_repo.revoke_permission_from_user(user_id, permission_id)))

    @staticmethod
    def _revoke(removed: bool):
        if not removed:
            logger.debug("Grant was already absent")

    def list_role_permissions(self, role_id: int) -> ActionResult[List[str]]:
        """역할에 연결된 권한 slug 목록을 조회합니다."""
        return self._execute("Failed to list role permissions", lambda: self.grant_repo.list_permission_slugs_for_role(role_id), write=False)

    def list_user_roles(self, user_id: str) -> ActionResult[List[str]]:
        """사용자가 가진 역할 slug 목록을 조회합니다."""
        return self._execute("Failed to list user roles", lambda: self.grant_repo.list_role_slugs_for_user(user_id), write=False)

    # --- Catalog ---

    def replace_catalog(self, matrix: Dict[str, List[Dict[str, Any]]]) -> ActionResult[Dict[str, int]]:
        """
        역할/권한 카탈로그 전체를 하나의 트랜잭션 안에서 교체합니다.

        기존의 모든 역할, 권한, 연결 행을 삭제한 뒤 matrix의 권한, 역할, 역할-권한 연결을 삽입합니다.
        중간에 실패하면 전체가 롤백됩니다.

        Args:
            matrix: {"permissions": [{"slug", "description"}], "roles": [{"slug", "description", "permissions"}]}
                    형식의 카탈로그. (config.permissions_config.PERMISSION_MATRIX 참고)

        Returns:
            성공 시 {"roles": 역할 수, "permissions": 권한 수, "links": 역할-권한 연결 수}.
        """
        def operation():
            permissions = {}
            for perm in matrix.get("permissions", []):
                permissions.setdefault(normalize_permission_slug(perm["slug"]), perm.get("description"))

            roles = {}
            for role in matrix.get("roles", []):
                role_slug = normalize_slug(role["slug"])
                entry = roles.setdefault(role_slug, {"description": role.get("description"), "permissions": set()})
                for perm_slug in role.get("permissions", []):
                    perm_slug = normalize_permission_slug(perm_slug)
                    if perm_slug not in permissions:
                        raise UnknownPermissionError(
                            f"Role '{role_slug}' references unknown permission '{perm_slug}'."
                        )
                    entry["permissions"].add(perm_slug)

            self.grant_repo.clear_catalog()

            permission_ids = {}
            for perm_slug, description in permissions.items():
                permission, _ = self.permission_repo.create_if_absent(perm_slug, description)
                permission_ids[perm_slug] = permission.id

            links = 0
            for role_slug, entry in roles.items():
                role, _ = self.role_repo.create_if_absent(role_slug, entry["description"])
                for perm_slug in sorted(entry["permissions"]):
                    self.grant_repo.grant_permission_to_role(role.id, permission_ids[perm_slug])
                    links += 1

            logger.info("Catalog replaced: %d roles, %d permissions, %d links", len(roles), len(permissions), links)
            return {"roles": len(roles), "permissions": len(permissions), "links": links}

        return self._execute("Failed to replace role/permission catalog", operation)
