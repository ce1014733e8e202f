import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")


class Settings(BaseModel):
    """Настройки процесса. Загружаются один раз при старте."""

    gemini_api_key: Optional[str] = None
    model_name: str = "models/gemini-2.5-flash"
    host: str = "0.0.0.0"
    port: int = Field(5000, gt=0, lt=65536)
    provider_timeout: float = Field(60.0, gt=0, description="Таймаут запроса к модели, секунды")
    cors_origins: List[str] = ["*"]
    log_dir: Optional[str] = DEFAULT_LOG_DIR

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            model_name=os.getenv("GEMINI_MODEL", "models/gemini-2.5-flash"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", "60")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_dir=os.getenv("LOG_DIR", DEFAULT_LOG_DIR) or None,
        )
