import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("roster_service")
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(message)s"))
logger.addHandler(handler)
logger.setLevel(logging.INFO)

SECRET_FIELDS = {"pin", "adminPin"}


def mask_secrets(payload):
    """Подменяет значения PIN на *** в JSON-теле запроса/ответа."""
    if isinstance(payload, dict):
        return {
            k: "***" if k in SECRET_FIELDS else mask_secrets(v)
            for k, v in payload.items()
        }
    if isinstance(payload, list):
        return [mask_secrets(v) for v in payload]
    return payload


def decode_body(body_bytes: bytes | None):
    if not body_bytes:
        return None
    text = body_bytes.decode("utf-8", errors="replace")
    try:
        return mask_secrets(json.loads(text))
    except ValueError:
        # не-JSON тело в лог не пишем
        return "<non-json body>"


class JsonLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        request_body = decode_body(await request.body())

        response = await call_next(request)

        response_body = None

        if hasattr(response, "body_iterator"):
            body_chunks = []
            async for chunk in response.body_iterator:
                body_chunks.append(chunk)
            response_body_bytes = b"".join(body_chunks)

            async def async_iterator(data: bytes):
                yield data

            response.body_iterator = async_iterator(response_body_bytes)
            response_body = decode_body(response_body_bytes)

        elif hasattr(response, "body"):
            response_body = decode_body(response.body)

        duration_ms = (time.time() - start_time) * 1000

        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "request_body": request_body,
            "response_body": response_body,
        }

        logger.info(json.dumps(log_data))

        response.headers["X-Request-ID"] = request_id
        return response
