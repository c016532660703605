"""OpenAI-compatible chat-completions client (DeepSeek by default) with error handling."""

import asyncio
import json
import logging
import re

import httpx

from config import settings

logger = logging.getLogger(__name__)

RETRY_STATUS = {429, 500, 502, 503, 504}
RETRY_BACKOFF_S = 0.5

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_json_response(text: str | None) -> dict | list | None:
    """Parse a model reply as JSON, tolerating code fences and surrounding prose."""
    if not isinstance(text, str) or not text:
        return None
    text = _FENCE_RE.sub("", text.strip()).strip()
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        logger.error("AI response contains no JSON: %.80s", text)
        return None
    start = min(starts)
    end = max(text.rfind("}"), text.rfind("]"))
    if end < start:
        logger.error("AI response JSON is truncated")
        return None
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.error("Failed to parse AI response as JSON: %s", e)
        return None


class LLMClient:
    """Thin async wrapper over ``POST {base_url}/chat/completions``.

    Every public call returns ``None`` instead of raising: missing API key,
    transport errors, non-2xx replies and malformed payloads are logged.
    Transport errors, 429 and 5xx replies are retried up to ``max_retries``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_retries: int = 3,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = settings.deepseek_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.ai_base_url).rstrip("/")
        self.model = model or settings.ai_model
        self.max_retries = max(1, max_retries)
        self.timeout_s = timeout_s
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response | None:
        async with self._client() as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    response = await client.request(method, path, **kwargs)
                except httpx.HTTPError as e:
                    logger.warning("AI request %s %s failed (attempt %d): %s", method, path, attempt, e)
                else:
                    if response.status_code not in RETRY_STATUS:
                        return response
                    logger.warning(
                        "AI request %s %s returned %d (attempt %d)",
                        method, path, response.status_code, attempt,
                    )
                    if attempt == self.max_retries:
                        return response
                if attempt < self.max_retries:
                    await asyncio.sleep(RETRY_BACKOFF_S * attempt)
        return None

    async def complete(self, prompt: str) -> str | None:
        """Send one user prompt and return the assistant message content."""
        if not self.configured:
            logger.warning("No DEEPSEEK_API_KEY set - AI extraction disabled")
            return None

        response = await self._request("POST", "/chat/completions", json={
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.1,
            "max_tokens": 4000,
        })
        if response is None:
            return None
        if response.status_code >= 400:
            logger.error("AI API error %d: %.200s", response.status_code, response.text)
            return None

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Malformed AI API payload: %s", e)
            return None
        if not isinstance(content, str):
            logger.error("AI message content is %s, expected text", type(content).__name__)
            return None
        return content

    async def generate_json(self, prompt: str) -> dict | list | None:
        return parse_json_response(await self.complete(prompt))

    async def check_availability(self) -> bool:
        if not self.configured:
            return False
        response = await self._request("GET", "/models")
        return response is not None and response.status_code == 200
