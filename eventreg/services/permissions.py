"""
권한 문자열('entity:action:scope')을 다루는 값 타입과 매칭 규칙.

DB에는 권한이 불투명한 slug로 저장되고, 판정 시점에 PermissionString으로
해석됩니다. 'entity:all:all' 형태의 권한만 해당 엔티티의 모든 권한을 포함합니다.
"""
import re
from dataclasses import dataclass
from typing import Optional

from eventreg.services.exceptions import InvalidSlugError, InvalidPermissionError

WILDCARD = "all"
SEPARATOR = ":"

_PART_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")


def normalize_slug(slug: str) -> str:
    """
    slug의 앞뒤 공백을 제거하고 소문자로 바꿉니다.

    Raises:
        InvalidSlugError: 문자열이 아니거나, 정규화한 결과가 빈 문자열이거나 공백을 포함할 때.
    """
    if slug is None:
        raise InvalidSlugError("Slug must not be empty.")
    if not isinstance(slug, str):
        raise InvalidSlugError(f"Slug must be a string, got {type(slug).__name__}.")
    normalized = slug.strip().lower()
    if not normalized:
        raise InvalidSlugError("Slug must not be empty.")
    if any(ch.isspace() for ch in normalized):
        raise InvalidSlugError(f"Slug '{normalized}' must not contain whitespace.")
    return normalized


@dataclass(frozen=True)
class PermissionString:
    entity: str
    action: str
    scope: str

    @classmethod
    def parse(cls, slug: str, strict: bool = False) -> "PermissionString":
        """
        'entity:action:scope' 문자열을 해석합니다.

        scope에는 인스턴스 ID(UUID 등)가 올 수 있으므로 첫 두 구분자만 기준으로 나눕니다.
        판정 시에는 세 부분으로 나뉘기만 하면 되고, 빈 부분도 허용합니다.

        Args:
            slug: 해석할 권한 문자열.
            strict: True이면 각 부분이 비어 있지 않고 소문자, 숫자, '_', '.', '-'로만
                    이루어졌는지도 검사합니다. 권한을 새로 등록할 때 사용합니다.

        Raises:
            InvalidPermissionError: 세 부분으로 나뉘지 않거나, strict 모드에서 형식이 잘못되었을 때.
        """
        parts = slug.split(SEPARATOR, 2) if slug else []
        if len(parts) != 3:
            raise InvalidPermissionError(
                f"Permission '{slug}' must have the form 'entity:action:scope'."
            )
        if strict:
            for part in parts:
                if not _PART_PATTERN.match(part):
                    raise InvalidPermissionError(
                        f"Permission '{slug}' has an invalid segment '{part}'."
                    )
        return cls(*parts)

    @classmethod
    def try_parse(cls, slug: str) -> Optional["PermissionString"]:
        try:
            return cls.parse(slug)
        except InvalidPermissionError:
            return None

    @property
    def is_blanket(self) -> bool:
        return self.action == WILDCARD and self.scope == WILDCARD

    def covers(self, required: "PermissionString") -> bool:
        """이 권한을 가진 사용자가 required 권한도 가진 것으로 볼 수 있는지 판정합니다."""
        if self == required:
            return True
        if self.entity != required.entity:
            return False
        # 'entity:all:self'나 'entity:write:all' 같은 부분 와일드카드는 지원하지 않습니다.
        return self.is_blanket

    def __str__(self) -> str:
        return SEPARATOR.join((self.entity, self.action, self.scope))


def normalize_permission_slug(slug: str) -> str:
    """권한 slug를 정규화하고 형식을 검증한 뒤 저장할 문자열을 반환합니다."""
    return str(PermissionString.parse(normalize_slug(slug), strict=True))


def permission_matches(held: str, required: str) -> bool:
    """
    보유한 권한 문자열이 요구되는 권한 문자열을 만족하는지 판정합니다.

    1. 두 문자열이 정확히 같으면 일치합니다.
    2. 어느 한쪽이라도 세 부분으로 나뉘지 않으면 일치하지 않습니다.
    3. 엔티티가 같고 보유 권한이 'entity:all:all'이면 일치합니다.
    """
    if held == required:
        return True
    held_permission = PermissionString.try_parse(held)
    required_permission = PermissionString.try_parse(required)
    if held_permission is None or required_permission is None:
        return False
    return held_permission.covers(required_permission)
