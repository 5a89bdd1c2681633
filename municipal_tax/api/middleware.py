"""요청 로깅 미들웨어"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """API 요청/응답 로깅

    모든 요청의 메서드, 경로, 상태 코드, 처리 시간을 기록합니다.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.1fms (client=%s)",
                request.method,
                request.url.path,
                (time.time() - start_time) * 1000,
                client,
            )
            raise

        logger.info(
            "%s %s -> %d (%.1fms, client=%s)",
            request.method,
            request.url.path,
            response.status_code,
            (time.time() - start_time) * 1000,
            client,
        )
        return response
