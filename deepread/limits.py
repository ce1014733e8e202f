from loguru import logger
from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from deepread.functions import MAX_JSON_BODY_BYTES, MAX_UPLOAD_BYTES, MULTIPART_OVERHEAD_BYTES

UPLOAD_TOO_LARGE = "File too large. Maximum size is 5MB"
BODY_TOO_LARGE = "Request body too large. Maximum size is 10MB"

DEFAULT_LIMITS = {
    "/api/upload": (MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES, UPLOAD_TOO_LARGE),
}


class BodySizeLimitMiddleware:
    """Отклоняет слишком большие тела запросов до того, как их начнут разбирать.

    Сначала проверяется Content-Length. Если его нет (chunked), байты
    считаются по мере чтения, и при превышении лимита приложение получает
    http.disconnect, а клиенту уходит ответ 400.
    """

    def __init__(self, app, limits=None, default_limit=MAX_JSON_BODY_BYTES, default_message=BODY_TOO_LARGE):
        self.app = app
        self.limits = DEFAULT_LIMITS if limits is None else limits
        self.default = (default_limit, default_message)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit, error = self.limits.get(scope["path"], self.default)
        content_length = Headers(scope=scope).get("content-length", "")
        if content_length.isdigit() and int(content_length) > limit:
            logger.error(f"Тело запроса {scope['path']} отклонено: {content_length} байт")
            await JSONResponse({"error": error}, status_code=400)(scope, receive, send)
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive():
            nonlocal received, exceeded
            if exceeded:
                return {"type": "http.disconnect"}
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    exceeded = True
                    return {"type": "http.disconnect"}
            return message

        async def guarded_send(message):
            nonlocal response_started
            # Ответ приложения на оборванное тело заменяется нашим
            if exceeded:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise

        if exceeded and not response_started:
            logger.error(f"Тело запроса {scope['path']} отклонено: больше {limit} байт")
            await JSONResponse({"error": error}, status_code=400)(scope, receive, send)
