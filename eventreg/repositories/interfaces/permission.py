from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from eventreg.database import models

class IPermissionRepository(ABC):
    @abstractmethod
    def create_if_absent(self, slug: str, description: Optional[str] = None) -> Tuple[models.Permission, bool]:
        """
        권한을 등록합니다. 같은 slug의 권한이 이미 있으면 새로 만들지 않습니다.

        Returns:
            (권한 모델, 새로 생성되었는지 여부) 튜플.
        """
        pass

    @abstractmethod
    def find_by_id(self, permission_id: int) -> Optional[models.Permission]:
        """고유 ID로 특정 권한을 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Permission]:
        """모든 권한의 목록을 slug 순으로 조회합니다."""
        pass

    @abstractmethod
    def delete_by_id(self, permission_id: int) -> bool:
        """권한을 삭제합니다. 권한이 없었으면 False를 반환합니다."""
        pass
