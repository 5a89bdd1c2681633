"""로깅 설정

콘솔 출력과 선택적인 일 단위 롤링 파일 로그를 구성합니다.
각 모듈은 logging.getLogger(__name__)으로 로거를 가져옵니다.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s %(levelname)s] %(message)s (Thread: %(threadName)s)"
FILE_LOG_FORMAT = "[%(asctime)s %(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handlers = []


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """루트 로거 설정

    여러 번 호출해도 핸들러를 중복 추가하지 않습니다.

    Args:
        level: 로그 레벨 이름
        log_file: 파일 경로 (자정마다 롤링, 없으면 콘솔만)
    """
    root = logging.getLogger()
    root.setLevel(level)
    if _handlers:
        return

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=14, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, DATE_FORMAT))
        _handlers.append(file_handler)

    _handlers.append(console)
    for handler in _handlers:
        root.addHandler(handler)


def reset_logging() -> None:
    """설정한 핸들러 제거 (주로 테스트용)"""
    root = logging.getLogger()
    while _handlers:
        handler = _handlers.pop()
        root.removeHandler(handler)
        handler.close()
