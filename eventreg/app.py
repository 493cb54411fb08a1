# eventreg/app.py
from wsgiref.simple_server import make_server
from functools import wraps
from urllib.parse import parse_qs
import json
import logging
import re

from eventreg.config import get_settings
from eventreg.config.permissions_config import GRANT_ADMIN_PERMISSION
from eventreg.database.database import SessionLocal, init_engine
from eventreg.repositories.sqlalchemy import (
    SqlalchemyRoleRepository, SqlalchemyPermissionRepository, SqlalchemyGrantRepository
)
from eventreg.services.authorization_service import AuthorizationService
from eventreg.services.grant_service import GrantService
from eventreg.services.results import Denied, ErrorKind, MISSING_PERMISSION
from eventreg.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        return json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")

def get_query_param(environ, name):
    values = parse_qs(environ.get("QUERY_STRING", "")).get(name)
    return values[0] if values else None

def get_current_user_id(environ):
    """외부 신원 제공자가 넣어 주는 X-User-Id 헤더. 없으면 인증되지 않은 호출자입니다."""
    return environ.get("HTTP_X_USER_ID") or None

def forbidden_redirect(decision: Denied):
    return '303 See Other', json.dumps(decision.to_dict()), [('Location', decision.location)]

def result_response(result, status='200 OK', render=None):
    """서비스의 ActionResult를 (status, body)로 변환합니다."""
    if not result.success:
        if result.kind is ErrorKind.VALIDATION:
            return '400 Bad Request', json.dumps({"error": result.error})
        return '500 Internal Server Error', json.dumps({"error": result.error})
    if status.startswith('204'):
        return status, ''
    data = render(result.data) if render else result.data
    return status, json.dumps(data)

def create_response(result):
    if result.success and not result.data.created:
        return result_response(result, '200 OK', lambda outcome: outcome.to_dict())
    return result_response(result, '201 Created', lambda outcome: outcome.to_dict())

def handle_exception(e):
    error_map = {
        ValueError: "400 Bad Request",
        KeyError: "400 Bad Request",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request")
        status = "500 Internal Server Error"
    return status, json.dumps({"error": str(e)})

def requires(permission):
    """핸들러 실행 전에 현재 사용자의 권한을 확인하고, 없으면 접근 거부 화면으로 보냅니다."""
    def decorator(handler):
        @wraps(handler)
        def wrapper(environ, *args):
            decision = environ['services']['authz'].require_permission(get_current_user_id(environ), permission)
            if isinstance(decision, Denied):
                return forbidden_redirect(decision)
            return handler(environ, *args)
        return wrapper
    return decorator

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def application(environ, start_response):
    db_session = SessionLocal()
    headers = [("Content-Type", "application/json")]
    try:
        # 1. 의존성 생성 (Repositories -> Services)
        role_repo = SqlalchemyRoleRepository(db_session)
        permission_repo = SqlalchemyPermissionRepository(db_session)
        grant_repo = SqlalchemyGrantRepository(db_session)

        # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
        environ['services'] = {
            'grants': GrantService(db_session, role_repo, permission_repo, grant_repo),
            'authz': AuthorizationService(grant_repo),
        }

        # 3. 라우팅 및 핸들러 실행
        path = environ.get("PATH_INFO", "")
        method = environ.get("REQUEST_METHOD", "")

        handler, path_args = None, []
        for route_method, pattern, route_handler in ROUTES:
            if method == route_method and (match := re.match(pattern, path)):
                handler, path_args = route_handler, match.groups()
                break

        if handler:
            status, response_body, *extra = handler(environ, *path_args)
            if extra:
                headers.extend(extra[0])
        else:
            status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

    except Exception as e:
        status, response_body = handle_exception(e)
    finally:
        db_session.close()

    start_response(status, headers)
    return [response_body.encode("utf-8")]

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def forbidden_handler(environ, *args):
    body = {
        "error": "Forbidden",
        "reason": get_query_param(environ, "reason") or MISSING_PERMISSION,
        "permission": get_query_param(environ, "permission"),
    }
    return '403 Forbidden', json.dumps(body)

def check_permission_handler(environ, *args):
    permission = get_query_param(environ, "permission")
    if not permission:
        raise ValueError("Missing 'permission' query parameter.")
    allowed = environ['services']['authz'].has_permission(get_current_user_id(environ), permission)
    return '200 OK', json.dumps({"permission": permission, "allowed": allowed})

@requires(GRANT_ADMIN_PERMISSION)
def list_user_permissions_handler(environ, user_id):
    result = environ['services']['authz'].get_user_permissions(user_id)
    return result_response(result, render=lambda perms: {"permissions": sorted(perms)})

@requires(GRANT_ADMIN_PERMISSION)
def list_roles_handler(environ, *args):
    return result_response(environ['services']['grants'].list_roles(), render=lambda roles: {"roles": roles})

@requires(GRANT_ADMIN_PERMISSION)
def create_role_handler(environ, *args):
    data = get_request_data(environ)
    return create_response(environ['services']['grants'].create_role(data['slug'], data.get('description')))

@requires(GRANT_ADMIN_PERMISSION)
def delete_role_handler(environ, role_id):
    return result_response(environ['services']['grants'].delete_role(int(role_id)), '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def list_role_permissions_handler(environ, role_id):
    result = environ['services']['grants'].list_role_permissions(int(role_id))
    return result_response(result, render=lambda perms: {"permissions": perms})

@requires(GRANT_ADMIN_PERMISSION)
def grant_permission_to_role_handler(environ, role_id, permission_id):
    result = environ['services']['grants'].grant_permission_to_role(int(role_id), int(permission_id))
    return result_response(result, '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def revoke_permission_from_role_handler(environ, role_id, permission_id):
    result = environ['services']['grants'].revoke_permission_from_role(int(role_id), int(permission_id))
    return result_response(result, '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def list_permissions_handler(environ, *args):
    return result_response(environ['services']['grants'].list_permissions(), render=lambda perms: {"permissions": perms})

@requires(GRANT_ADMIN_PERMISSION)
def add_permission_handler(environ, *args):
    data = get_request_data(environ)
    return create_response(environ['services']['grants'].add_permission(data['slug'], data.get('description')))

@requires(GRANT_ADMIN_PERMISSION)
def delete_permission_handler(environ, permission_id):
    return result_response(environ['services']['grants'].delete_permission(int(permission_id)), '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def list_user_roles_handler(environ, user_id):
    result = environ['services']['grants'].list_user_roles(user_id)
    return result_response(result, render=lambda roles: {"roles": roles})

@requires(GRANT_ADMIN_PERMISSION)
def assign_role_handler(environ, user_id, role_id):
    return result_response(environ['services']['grants'].assign_role_to_user(user_id, int(role_id)), '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def revoke_role_handler(environ, user_id, role_id):
    return result_response(environ['services']['grants'].revoke_role_from_user(user_id, int(role_id)), '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def grant_permission_to_user_handler(environ, user_id, permission_id):
    result = environ['services']['grants'].grant_permission_to_user(user_id, int(permission_id))
    return result_response(result, '204 No Content')

@requires(GRANT_ADMIN_PERMISSION)
def revoke_permission_from_user_handler(environ, user_id, permission_id):
    result = environ['services']['grants'].revoke_permission_from_user(user_id, int(permission_id))
    return result_response(result, '204 No Content')


USER_ID = r'([0-9a-zA-Z-]+)'

ROUTES = [
    ('GET', r'^/forbidden$', forbidden_handler),
    ('GET', r'^/v1/me/permissions/check$', check_permission_handler),
    ('GET', r'^/v1/roles$', list_roles_handler),
    ('POST', r'^/v1/roles$', create_role_handler),
    ('DELETE', r'^/v1/roles/([0-9]+)$', delete_role_handler),
    ('GET', r'^/v1/roles/([0-9]+)/permissions$', list_role_permissions_handler),
    ('PUT', r'^/v1/roles/([0-9]+)/permissions/([0-9]+)$', grant_permission_to_role_handler),
    ('DELETE', r'^/v1/roles/([0-9]+)/permissions/([0-9]+)$', revoke_permission_from_role_handler),
    ('GET', r'^/v1/permissions$', list_permissions_handler),
    ('POST', r'^/v1/permissions$', add_permission_handler),
    ('DELETE', r'^/v1/permissions/([0-9]+)$', delete_permission_handler),
    ('GET', rf'^/v1/users/{USER_ID}/permissions$', list_user_permissions_handler),
    ('PUT', rf'^/v1/users/{USER_ID}/permissions/([0-9]+)$', grant_permission_to_user_handler),
    ('DELETE', rf'^/v1/users/{USER_ID}/permissions/([0-9]+)$', revoke_permission_from_user_handler),
    ('GET', rf'^/v1/users/{USER_ID}/roles$', list_user_roles_handler),
    ('PUT', rf'^/v1/users/{USER_ID}/roles/([0-9]+)$', assign_role_handler),
    ('DELETE', rf'^/v1/users/{USER_ID}/roles/([0-9]+)$', revoke_role_handler),
]

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    init_engine(settings.get_database_url())
    try:
        with make_server(settings.server_host, settings.server_port, application) as httpd:
            logger.info("Serving event registration authz API on port %d...", settings.server_port)
            httpd.serve_forever()
    except OSError as e:
        logger.error("Error starting server: %s", e)
