"""DeepRead: релей-сервис суммаризации текста через Gemini."""

__version__ = "1.0.0"
