from abc import ABC, abstractmethod
from typing import List

class IGrantRepository(ABC):
    """사용자-역할, 역할-권한, 사용자-권한 연결을 다루는 리포지토리입니다."""

    @abstractmethod
    def assign_role_to_user(self, user_id: str, role_id: int):
        """사용자에게 역할을 부여합니다. 이미 부여되어 있으면 무시합니다."""
        pass

    @abstractmethod
    def revoke_role_from_user(self, user_id: str, role_id: int) -> bool:
        """사용자의 역할을 회수합니다."""
        pass

    @abstractmethod
    def grant_permission_to_role(self, role_id: int, permission_id: int):
        """역할에 권한을 연결합니다. 이미 연결되어 있으면 무시합니다."""
        pass

    @abstractmethod
    def revoke_permission_from_role(self, role_id: int, permission_id: int) -> bool:
        """역할에서 권한 연결을 제거합니다."""
        pass

    @abstractmethod
    def grant_permission_to_user(self, user_id: str, permission_id: int):
        """사용자에게 권한을 직접 부여합니다. 이미 부여되어 있으면 무시합니다."""
        pass

    @abstractmethod
    def revoke_permission_from_user(self, user_id: str, permission_id: int) -> bool:
        """사용자에게 직접 부여된 권한을 회수합니다."""
        pass

    @abstractmethod
    def list_direct_permission_slugs(self, user_id: str) -> List[str]:
        """사용자에게 직접 부여된 권한의 slug 목록을 조회합니다."""
        pass

    @abstractmethod
    def list_role_permission_slugs(self, user_id: str) -> List[str]:
        """사용자가 가진 역할들을 통해 얻는 권한의 slug 목록을 조회합니다."""
        pass

    @abstractmethod
    def list_permission_slugs_for_role(self, role_id: int) -> List[str]:
        """특정 역할에 연결된 권한의 slug 목록을 조회합니다."""
        pass

    @abstractmethod
    def list_role_slugs_for_user(self, user_id: str) -> List[str]:
        """사용자가 가진 역할의 slug 목록을 조회합니다."""
        pass

    @abstractmethod
    def clear_catalog(self):
        """모든 역할, 권한과 세 연결 테이블의 행을 삭제합니다."""
        pass
