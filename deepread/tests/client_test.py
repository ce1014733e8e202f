import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from deepread.client import RelayClient, RelayClientError, SummaryStats, guess_content_type

TEXT = "The quick brown fox jumps over the lazy dog. " * 3


async def call_relay(handler, text=TEXT):
    app = web.Application()
    app.router.add_post("/api/summarize", handler)
    async with test_utils.TestServer(app) as server:
        client = RelayClient(str(server.make_url("/")))
        return await client.summarize(text)


def test_summary_stats_reduction():
    stats = SummaryStats.from_response({"originalLength": 1000, "summaryLength": 250})
    assert stats.reduction == 75


@pytest.mark.parametrize(
    "path, expected",
    [("notes.txt", "text/plain"), ("paper.pdf", "application/pdf"), ("photo.png", "image/png")],
)
def test_guess_content_type(path, expected):
    assert guess_content_type(path) == expected


def test_upload_rejects_unsupported_file(tmp_path):
    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG\r\n")

    with pytest.raises(RelayClientError, match="Please upload a .txt or .pdf file"):
        asyncio.run(RelayClient("http://relay.invalid").upload(str(image)))


def test_summarize_rejects_blank_text():
    with pytest.raises(RelayClientError, match="Please enter some text"):
        asyncio.run(RelayClient("http://relay.invalid").summarize("   "))


def test_summarize_returns_relay_json():
    async def handler(request):
        return web.json_response({"summary": "Fox.", "style": "brief", "originalLength": 135, "summaryLength": 4})

    assert asyncio.run(call_relay(handler))["summary"] == "Fox."


def test_relay_error_message_is_used():
    async def handler(request):
        return web.json_response({"error": "API quota exceeded. Please try again later."}, status=429)

    with pytest.raises(RelayClientError) as exc_info:
        asyncio.run(call_relay(handler))
    assert exc_info.value.status == 429
    assert exc_info.value.message == "API quota exceeded. Please try again later."


# Текстовая страница ошибки вместо JSON
def test_plain_text_error_falls_back_to_default_message():
    async def handler(request):
        return web.Response(status=500, text="Internal Server Error")

    with pytest.raises(RelayClientError) as exc_info:
        asyncio.run(call_relay(handler))
    assert exc_info.value.status == 500
    assert exc_info.value.message == "Failed to generate summary"


def test_connection_error_is_wrapped():
    # Порт свободен, соединение будет отклонено
    client = RelayClient(f"http://127.0.0.1:{test_utils.unused_port()}")
    with pytest.raises(RelayClientError) as exc_info:
        asyncio.run(client.summarize(TEXT))
    assert exc_info.value.status == 0
    assert exc_info.value.message.startswith("Failed to generate summary")
