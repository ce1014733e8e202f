"""Клиент для DeepRead API.

Повторяет логику браузерного клиента: загрузка файла, запрос суммаризации
и подсчет статистики сокращения текста.
"""
from dataclasses import dataclass
import asyncio
import mimetypes
import os
import sys

import aiofiles
import aiohttp

from deepread.functions import ALLOWED_CONTENT_TYPES, reduction_percent

API_URL = os.getenv("DEEPREAD_API_URL", "http://localhost:5000")


class RelayClientError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass
class SummaryStats:
    original_length: int
    summary_length: int
    reduction: int

    @classmethod
    def from_response(cls, data: dict) -> "SummaryStats":
        original_length = data["originalLength"]
        summary_length = data["summaryLength"]
        return cls(
            original_length=original_length,
            summary_length=summary_length,
            reduction=reduction_percent(original_length, summary_length),
        )


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


class RelayClient:
    def __init__(self, base_url: str = API_URL, timeout: float = 120):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _request(self, method: str, path: str, fallback: str = "Request failed", **kwargs) -> dict:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, f"{self.base_url}{path}", **kwargs) as resp:
                    try:
                        result = await resp.json(content_type=None)
                    except ValueError:
                        # Не JSON, например текстовая страница ошибки прокси
                        result = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RelayClientError(0, f"{fallback}: {str(e) or 'timeout'}") from e

        if not isinstance(result, dict):
            result = {}
        if resp.status >= 400:
            raise RelayClientError(resp.status, result.get("error") or fallback)
        return result

    async def health(self) -> dict:
        return await self._request("GET", "/api/health")

    async def upload(self, path: str) -> dict:
        """Отправляет .txt или .pdf файл и возвращает {text, filename}"""
        content_type = guess_content_type(path)
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise RelayClientError(0, "Please upload a .txt or .pdf file")

        async with aiofiles.open(path, "rb") as f:
            content = await f.read()

        data = aiohttp.FormData()
        data.add_field("file", content, filename=os.path.basename(path), content_type=content_type)
        return await self._request("POST", "/api/upload", fallback="Failed to upload file", data=data)

    async def summarize(self, text: str, style: str = "brief") -> dict:
        if not text.strip():
            raise RelayClientError(0, "Please enter some text or upload a file")
        return await self._request(
            "POST", "/api/summarize", fallback="Failed to generate summary", json={"text": text, "style": style})


async def main(path: str, style: str = "brief"):
    client = RelayClient()
    try:
        uploaded = await client.upload(path)
        result = await client.summarize(uploaded["text"], style)
    except RelayClientError as e:
        print(f"Ошибка: {e.message}")
        return 1

    stats = SummaryStats.from_response(result)
    print(result["summary"])
    print()
    print(f"{uploaded['filename']}: {stats.original_length} -> {stats.summary_length} символов, "
          f"сокращение {stats.reduction}%")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Использование: python -m deepread.client FILE [brief|detailed|bullets]")
        sys.exit(2)
    sys.exit(asyncio.run(main(*sys.argv[1:3])))
