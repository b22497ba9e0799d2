# app/core/middleware.py
import logging
import time
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SLOW_REQUEST_THRESHOLD_MS = 3000
MAX_SLOW_REQUESTS = 50
RESPONSE_TIME_WINDOW = 100


class RequestMetrics:
    """Process-wide request counters shared by the middleware and the system routes."""

    def __init__(self):
        self.started_at = time.time()
        self.reset()

    def reset(self) -> None:
        self.total_requests = 0
        self.active_connections = 0
        self.error_count = 0
        self.response_times: Deque[float] = deque(maxlen=RESPONSE_TIME_WINDOW)
        self.slow_requests: Deque[Dict] = deque(maxlen=MAX_SLOW_REQUESTS)

    @property
    def uptime(self) -> float:
        return time.time() - self.started_at

    @property
    def average_response_time(self) -> int:
        if not self.response_times:
            return 0
        return round(sum(self.response_times) / len(self.response_times))

    def request_started(self) -> None:
        self.total_requests += 1
        self.active_connections += 1

    def request_finished(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        self.active_connections -= 1
        self.response_times.append(duration_ms)
        if status_code >= 400:
            self.error_count += 1
        if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
            self.slow_requests.append(
                {
                    "path": path,
                    "method": method,
                    "duration": round(duration_ms),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            )
            logger.warning(f"[SLOW REQUEST] {method} {path} took {duration_ms:.0f}ms")

    def snapshot(self) -> Dict:
        return {
            "activeConnections": self.active_connections,
            "totalRequests": self.total_requests,
            "errorCount": self.error_count,
            "averageResponseTime": self.average_response_time,
        }

    def recent_slow_requests(self) -> List[Dict]:
        return list(self.slow_requests)


request_metrics = RequestMetrics()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an X-Request-ID, logs it on the way in and out, adds
    X-Response-Time and feeds the request metrics.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id
        method, path = request.method, request.url.path

        logger.info(f"Incoming request {request_id}: {method} {path}")
        request_metrics.request_started()
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            request_metrics.request_finished(method, path, 500, duration_ms)
            logger.exception(f"Request {request_id} failed after {duration_ms:.0f}ms")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        request_metrics.request_finished(method, path, response.status_code, duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.0f}ms"

        log = logger.warning if response.status_code >= 400 else logger.info
        log(f"Request completed {request_id}: {method} {path} {response.status_code} in {duration_ms:.0f}ms")
        return response
