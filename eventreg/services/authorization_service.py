import logging
from typing import Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from eventreg.repositories.interfaces import IGrantRepository
from eventreg.services.permissions import permission_matches
from eventreg.services.results import AccessDecision, ActionResult, Allowed, Denied, ErrorKind

logger = logging.getLogger(__name__)


class AuthorizationService:
    """사용자의 유효 권한을 계산하고, 요구 권한을 만족하는지 판정합니다."""

    def __init__(self, grant_repo: IGrantRepository):
        self.grant_repo = grant_repo

    def get_user_permissions(self, user_id: Optional[str]) -> ActionResult[Set[str]]:
        """
        사용자가 가진 모든 권한 문자열을 조회합니다.

        직접 부여된 권한과 역할을 통해 얻는 권한의 합집합이며, 매번 DB에서 새로 읽습니다.
        user_id가 None(인증되지 않은 호출자)이면 빈 집합입니다.

        Returns:
            성공 시 권한 slug의 집합. 저장소 오류 시 실패 결과.
        """
        if user_id is None:
            return ActionResult.ok(set())
        try:
            permissions = set(self.grant_repo.list_direct_permission_slugs(user_id))
            permissions.update(self.grant_repo.list_role_permission_slugs(user_id))
        except SQLAlchemyError as e:
            logger.error("Failed to get user permissions for %s: %s", user_id, e)
            return ActionResult.fail(f"Failed to get user permissions: {e}", ErrorKind.STORAGE)
        return ActionResult.ok(permissions)

    def has_permission(self, user_id: Optional[str], required: str) -> bool:
        """
        사용자가 required 권한을 정확히, 또는 'entity:all:all'을 통해 가지고 있는지 확인합니다.

        권한 조회에 실패하면 권한이 없는 것으로 판정합니다.
        """
        result = self.get_user_permissions(user_id)
        if not result.success:
            logger.warning("Permission check for %s denied: %s", user_id, result.error)
            return False
        return any(permission_matches(held, required) for held in result.data)

    def require_permission(self, user_id: Optional[str], required: str) -> AccessDecision:
        """
        required 권한을 요구합니다.

        Returns:
            권한이 있으면 Allowed, 없으면 reason='missing_permission'과 거부된 권한을 담은 Denied.
            Denied를 받은 호출자는 Denied.location(접근 거부 화면)으로 이동해야 합니다.
        """
        if self.has_permission(user_id, required):
            return Allowed(permission=required)
        logger.info("Access denied: user=%s permission=%s", user_id, required)
        return Denied(permission=required)
