# eventreg/services/exceptions.py

# --- Validation Exceptions ---
class InvalidSlugError(ValueError):
    """역할/권한 slug가 비어 있거나 허용되지 않는 문자를 포함할 때"""
    pass

class InvalidPermissionError(InvalidSlugError):
    """권한 문자열이 'entity:action:scope' 형식이 아닐 때"""
    pass

class UnknownPermissionError(Exception):
    """카탈로그의 역할이 정의되지 않은 권한을 참조할 때"""
    pass
