import json

import httpx
import pytest

from services import llm_client
from services.llm_client import LLMClient, parse_json_response


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _client(handler, **kwargs) -> LLMClient:
    return LLMClient(
        api_key=kwargs.pop("api_key", "test-key"),
        base_url="https://llm.test/v1",
        model="deepseek-chat",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(llm_client, "RETRY_BACKOFF_S", 0)


class TestParseJsonResponse:
    def test_plain(self):
        assert parse_json_response('{"name": "张三"}') == {"name": "张三"}

    def test_fenced(self):
        assert parse_json_response('```json\n[{"school": "清华大学"}]\n```') == [{"school": "清华大学"}]

    def test_surrounding_prose(self):
        assert parse_json_response('结果如下：{"name": "张三"} 以上。') == {"name": "张三"}

    @pytest.mark.parametrize("text", [None, "", "无法提取", '{"name": ', "}{"])
    def test_unparseable(self, text):
        assert parse_json_response(text) is None

    def test_non_text_reply(self):
        assert parse_json_response({"name": "张三"}) is None


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return _completion('{"ok": true}')

        assert await _client(handler).generate_json("提示词") == {"ok": True}
        assert seen["url"] == "https://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"] == {
            "model": "deepseek-chat",
            "messages": [{"role": "user", "content": "提示词"}],
            "temperature": 0.1,
            "max_tokens": 4000,
        }

    @pytest.mark.asyncio
    async def test_missing_key_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = _client(handler, api_key="")
        assert await client.complete("x") is None
        assert await client.check_availability() is False

    @pytest.mark.asyncio
    async def test_non_2xx_returns_none(self):
        client = _client(lambda request: httpx.Response(401, json={"error": "bad key"}))
        assert await client.complete("x") is None

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_none(self):
        client = _client(lambda request: httpx.Response(200, json={"unexpected": []}))
        assert await client.complete("x") is None

    @pytest.mark.asyncio
    async def test_structured_content_returns_none(self):
        client = _client(lambda request: httpx.Response(
            200, json={"choices": [{"message": {"content": {"name": "张三"}}}]},
        ))
        assert await client.complete("x") is None
        assert await client.generate_json("x") is None

    @pytest.mark.asyncio
    async def test_retries_on_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return _completion("好的")

        assert await _client(handler, max_retries=3).complete("x") == "好的"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        assert await _client(handler, max_retries=2).complete("x") is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_check_availability(self):
        def handler(request):
            assert request.url.path == "/v1/models"
            return httpx.Response(200, json={"data": []})

        assert await _client(handler).check_availability() is True
