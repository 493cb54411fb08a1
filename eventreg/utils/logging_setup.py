import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    """프로세스 진입점에서 한 번 호출하여 루트 로거를 설정합니다."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL 로그는 DEBUG에서도 기본적으로 숨깁니다.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
