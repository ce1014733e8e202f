from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class SummarizationRequest(BaseModel):
    # Строгие проверки (длина, стиль) выполняются вручную, чтобы сохранить порядок ошибок
    text: Optional[str] = None
    # Любое значение, не совпадающее со стилем, отклоняется при валидации
    style: Any = "brief"


class SummarizationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    style: str
    original_length: int = Field(..., alias="originalLength", description="Количество символов в исходном тексте")
    summary_length: int = Field(..., alias="summaryLength", description="Количество символов в суммаризации")
    reduction_percent: int = Field(..., alias="reductionPercent", description="Сокращение текста, %")


class UploadResponse(BaseModel):
    text: str
    filename: str


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Server is running"


class ErrorResponse(BaseModel):
    error: str
