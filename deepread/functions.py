from enum import Enum
from typing import Any, Optional, Tuple
import io
import math

import PyPDF2
from loguru import logger

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 50_000
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
# Запас на заголовки multipart поверх размера самого файла
MULTIPART_OVERHEAD_BYTES = 64 * 1024
MAX_JSON_BODY_BYTES = 10 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("text/plain", "application/pdf")


class Style(str, Enum):
    BRIEF = "brief"
    DETAILED = "detailed"
    BULLETS = "bullets"


PROMPT_TEMPLATES = {
    Style.BRIEF: (
        "Provide a brief, concise summary of the following text in 2-3 sentences. "
        "Do not use asterisks or special formatting characters:\n\n{text}"
    ),
    Style.DETAILED: (
        "Provide a comprehensive and detailed summary of the following text, covering all key points "
        "and important details. Write in plain text without using asterisks, bold formatting, "
        "or any special characters:\n\n{text}"
    ),
    Style.BULLETS: (
        "Summarize the following text as clear, concise bullet points. Use bullet points (•) to list "
        "the main ideas. Do not use asterisks or any markdown formatting:\n\n{text}"
    ),
}


class ExtractionError(RuntimeError):
    """Не удалось извлечь текст из загруженного файла"""


def validate_summarize_request(text: Optional[str], style: Any) -> Style:
    """Проверяет запрос на суммаризацию и возвращает выбранный стиль.

    Проверки идут строго по порядку, первая неудачная прерывает остальные:
    пустой текст, слишком короткий, слишком длинный, неизвестный стиль.
    """
    if not text or not text.strip():
        raise ValueError("Text input is required")
    if len(text) < MIN_TEXT_LENGTH:
        raise ValueError(f"Text must be at least {MIN_TEXT_LENGTH} characters long")
    if len(text) > MAX_TEXT_LENGTH:
        raise ValueError(f"Text exceeds maximum length of {MAX_TEXT_LENGTH:,} characters")

    if style is None:
        style = Style.BRIEF.value
    if not isinstance(style, str):
        raise ValueError("Invalid summarization style")
    try:
        return Style(style)
    except ValueError:
        raise ValueError("Invalid summarization style") from None


def build_prompt(text: str, style: Style) -> str:
    """Оборачивает текст в инструкцию для модели"""
    return PROMPT_TEMPLATES[style].format(text=text)


def validate_content_type(content_type: Optional[str]) -> str:
    """Возвращает тип файла без параметров или отклоняет неподдерживаемый"""
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type not in ALLOWED_CONTENT_TYPES:
        raise ValueError("Only .txt and .pdf files are allowed")
    return media_type


def validate_file_size(size: int) -> None:
    if size > MAX_UPLOAD_BYTES:
        raise ValueError("File too large. Maximum size is 5MB")


def validate_extracted_text(text: str) -> None:
    if len(text) < MIN_TEXT_LENGTH:
        raise ValueError(f"File content must be at least {MIN_TEXT_LENGTH} characters long")


def extract_text_from_pdf(file_content: bytes) -> str:
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_content))
        text = ""
        for page in pdf_reader.pages:
            text += page.extract_text() or ""
        return text
    except Exception as e:
        logger.error(f"Ошибка при извлечении текста из PDF: {e}")
        raise ExtractionError(str(e) or "Failed to process file") from e


def extract_text_from_txt(file_content: bytes) -> str:
    # Невалидные байты заменяются на U+FFFD, а не роняют запрос
    return file_content.decode("utf-8", errors="replace")


def extract_text(file_content: bytes, content_type: str) -> str:
    """Извлекает текст из файла в зависимости от заявленного типа"""
    if content_type == "application/pdf":
        return extract_text_from_pdf(file_content)
    return extract_text_from_txt(file_content)


def reduction_percent(original_length: int, summary_length: int) -> int:
    """Процент сокращения текста: 1000 -> 250 символов дает 75"""
    if original_length <= 0:
        return 0
    # Округление половин вверх, как в браузерном клиенте
    return math.floor((1 - summary_length / original_length) * 100 + 0.5)


def calculate_metrics(original: str, summary: str) -> dict:
    """Вычисляет метрики суммаризации"""
    orig_len = len(original)
    summ_len = len(summary)

    return {
        "original_length": orig_len,
        "summary_length": summ_len,
        "reduction_percent": reduction_percent(orig_len, summ_len),
    }


def normalize_provider_error(error: Exception) -> Tuple[int, str]:
    """Сопоставляет ошибку провайдера с HTTP-статусом и сообщением"""
    message = str(error)
    if "API key" in message:
        return 401, "Invalid API key. Please check your Gemini API configuration."
    if "quota" in message:
        return 429, "API quota exceeded. Please try again later."
    return 500, f"Failed to generate summary: {message}"
