from contextlib import asynccontextmanager
from typing import Optional
import os

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from deepread import __version__
from deepread.config import Settings
from deepread.functions import (
    MAX_UPLOAD_BYTES,
    ExtractionError,
    build_prompt,
    calculate_metrics,
    extract_text,
    normalize_provider_error,
    validate_content_type,
    validate_extracted_text,
    validate_file_size,
    validate_summarize_request,
)
from deepread.limits import BodySizeLimitMiddleware
from deepread.provider import GeminiModel
from deepread.schemas import (
    HealthResponse,
    SummarizationRequest,
    SummarizationResponse,
    ErrorResponse,
    UploadResponse,
)


def create_app(settings: Optional[Settings] = None, model=None) -> FastAPI:
    """Собирает приложение. Настройки читаются один раз, здесь."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.log_dir:
            os.makedirs(settings.log_dir, exist_ok=True)
            sink_id = logger.add(os.path.join(settings.log_dir, "app.log"), rotation="1 day")
        else:
            sink_id = None
        logger.info(f"DeepRead запущен, модель {settings.model_name}")

        yield

        logger.info("DeepRead остановлен")
        if sink_id is not None:
            logger.remove(sink_id)

    app = FastAPI(
        title="DeepRead Summarization API",
        description="API для суммаризации текстов и документов через Gemini",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.model = model if model is not None else GeminiModel(settings)

    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Некорректное тело запроса {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Проверка работоспособности сервиса"""
        return HealthResponse()

    @app.post(
        "/api/upload",
        response_model=UploadResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def upload_file(file: Optional[UploadFile] = File(None)):
        """Извлекает текст из .txt или .pdf файла"""
        if file is None:
            raise HTTPException(status_code=400, detail="No file uploaded")

        try:
            media_type = validate_content_type(file.content_type)
            # Запрос уже ограничен BodySizeLimitMiddleware, здесь проверяется сам файл
            content = await file.read(MAX_UPLOAD_BYTES + 1)
            validate_file_size(len(content))
        except ValueError as e:
            logger.error(f"Файл {file.filename} отклонен: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        logger.info(f"Получен файл {file.filename} ({media_type}, {len(content)} байт)")

        try:
            text = await run_in_threadpool(extract_text, content, media_type)
        except ExtractionError as e:
            raise HTTPException(status_code=500, detail=str(e))

        try:
            validate_extracted_text(text)
        except ValueError as e:
            logger.error(f"Файл {file.filename} отклонен: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        return UploadResponse(text=text, filename=file.filename or "")

    @app.post(
        "/api/summarize",
        response_model=SummarizationResponse,
        responses={code: {"model": ErrorResponse} for code in (400, 401, 429, 500)},
    )
    def summarize(request: SummarizationRequest):
        """Суммаризирует текст в выбранном стиле"""
        try:
            style = validate_summarize_request(request.text, request.style)
        except ValueError as e:
            logger.error(f"Запрос на суммаризацию отклонен: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        logger.info(f"Суммаризация: стиль={style.value}, длина текста={len(request.text)}")
        prompt = build_prompt(request.text, style)

        try:
            summary = app.state.model.summarize(prompt)
        except Exception as e:
            logger.exception(f"Ошибка при суммаризации: {e}")
            status_code, message = normalize_provider_error(e)
            raise HTTPException(status_code=status_code, detail=message)

        metrics = calculate_metrics(original=request.text, summary=summary)
        logger.info(f"Суммаризация завершена: {metrics['summary_length']} символов")
        return SummarizationResponse(summary=summary, style=style.value, **metrics)

    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
