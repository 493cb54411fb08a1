from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from eventreg.database import models

class IRoleRepository(ABC):
    @abstractmethod
    def create_if_absent(self, slug: str, description: Optional[str] = None) -> Tuple[models.Role, bool]:
        """
        역할을 생성합니다. 같은 slug의 역할이 이미 있으면 새로 만들지 않습니다.

        Returns:
            (역할 모델, 새로 생성되었는지 여부) 튜플.
        """
        pass

    @abstractmethod
    def find_by_id(self, role_id: int) -> Optional[models.Role]:
        """고유 ID로 특정 역할을 조회합니다."""
        pass

    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[models.Role]:
        """slug로 특정 역할을 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Role]:
        """모든 역할의 목록을 slug 순으로 조회합니다."""
        pass

    @abstractmethod
    def delete_by_id(self, role_id: int) -> bool:
        """역할을 삭제합니다. 역할이 없었으면 False를 반환합니다."""
        pass
