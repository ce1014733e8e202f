import google.generativeai as genai
from loguru import logger

from deepread.config import Settings


class ProviderError(RuntimeError):
    pass


class GeminiModel:
    """Обертка над Gemini: один промпт на входе, одна строка на выходе.

    Ровно одна попытка на запрос, без повторов и без стриминга.
    """

    def __init__(self, settings: Settings):
        self.api_key = settings.gemini_api_key
        self.model_name = settings.model_name
        self.timeout = settings.provider_timeout
        self._model = None
        if self.api_key:
            genai.configure(api_key=self.api_key)
        else:
            logger.warning("GEMINI_API_KEY не задан, запросы к модели будут отклонены")

    def load_model(self):
        if self._model is None:
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def summarize(self, prompt: str) -> str:
        if not self.api_key:
            raise ProviderError("API key is not configured")

        model = self.load_model()
        response = model.generate_content(prompt, request_options={"timeout": self.timeout})
        try:
            text = response.text
        except ValueError as e:
            # Ответ без текста (например, заблокирован фильтрами)
            raise ProviderError(f"Model returned no text: {e}") from e
        if not text:
            raise ProviderError("Model returned an empty response")
        return text
