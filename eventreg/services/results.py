"""
서비스 경계에서 돌려주는 결과 타입.

저장소 오류는 예외로 전파되지 않고 ActionResult.fail로 변환됩니다.
접근 판정은 Allowed / Denied 중 하나로 표현되며, 호출자가 직접 응답을 만듭니다.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union
from urllib.parse import urlencode

T = TypeVar("T")

FORBIDDEN_PATH = "/forbidden"
MISSING_PERMISSION = "missing_permission"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    STORAGE = "storage"


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.STORAGE) -> "ActionResult[T]":
        return cls(success=False, error=error, kind=kind)


class CreateStatus(str, Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"


@dataclass(frozen=True)
class CreateOutcome:
    """생성 요청의 결과. 이미 있던 행이면 그 행의 id와 ALREADY_EXISTED를 담습니다."""
    id: int
    status: CreateStatus

    @property
    def created(self) -> bool:
        return self.status is CreateStatus.CREATED

    def to_dict(self) -> dict:
        return {"id": self.id, "status": self.status.value}


@dataclass(frozen=True)
class Allowed:
    permission: str

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    permission: str
    reason: str = MISSING_PERMISSION

    @property
    def allowed(self) -> bool:
        return False

    @property
    def location(self) -> str:
        """접근 거부 화면으로 이동할 URL (예: '/forbidden?reason=missing_permission&permission=...')."""
        return f"{FORBIDDEN_PATH}?{urlencode({'reason': self.reason, 'permission': self.permission})}"

    def to_dict(self) -> dict:
        return {"reason": self.reason, "permission": self.permission}


AccessDecision = Union[Allowed, Denied]
