"""
Chat-completions client for the AI processing endpoints.

One request, one answer: there are no retries here. Callers decide what a
failure means for their endpoint.
"""

import json
import logging
import re
from typing import Any, Optional

import httpx

from hoa_portal.core.config import get_settings
from hoa_portal.core.errors import ServiceError

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class LLMError(Exception):
    """The LLM API call failed or returned something unusable."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of a model reply.

    Accepts a bare object or an object wrapped in prose / code fences; the
    outermost ``{...}`` span is used in the latter case.
    """
    text = (text or "").strip()
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        match = JSON_OBJECT_RE.search(text)
        if not match:
            raise ValueError("No JSON object found in model response")
        try:
            value = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in model response: {e}") from e
    if not isinstance(value, dict):
        raise ValueError("Model response is not a JSON object")
    return value


class LLMClient:
    """Minimal OpenAI-compatible chat-completions client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        vision_model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.vision_model = vision_model
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Send one chat-completions request and return the first message's content."""
        body: dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        try:
            async with self._client() as client:
                response = await client.post("/chat/completions", json=body)
        except httpx.HTTPError as e:
            logger.error(f"[LLM] Request error: {e}")
            raise LLMError(f"LLM request failed: {e}") from e

        if response.status_code != 200:
            message = self._error_message(response)
            logger.warning(f"[LLM] API error {response.status_code}: {message}")
            raise LLMError(message, status_code=response.status_code)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"[LLM] Unexpected response shape: {e}")
            raise LLMError("Unexpected response from LLM API") from e

        usage = data.get("usage") or {}
        logger.info(
            f"[LLM] {body['model']} ok: prompt={usage.get('prompt_tokens')} "
            f"completion={usage.get('completion_tokens')}"
        )
        return content or ""

    async def chat_json(
        self,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = True,
    ) -> dict[str, Any]:
        """Chat and parse the reply as a JSON object. Raises ValueError on bad JSON."""
        content = await self.chat(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )
        return parse_json_object(content)

    async def read_image_text(self, image_url: str, prompt: str, max_tokens: int = 2000) -> str:
        """Vision call: return the text the model reads from an image."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]
        return await self.chat(messages, model=self.vision_model, max_tokens=max_tokens)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:200] or f"LLM API returned {response.status_code}"
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error
        return f"LLM API returned {response.status_code}"


def get_llm_client() -> LLMClient:
    """FastAPI dependency: configured LLM client, or 500 when no key is set."""
    settings = get_settings()
    if not settings.openai_api_key:
        raise ServiceError("OpenAI API key not configured", status_code=500)
    return LLMClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        vision_model=settings.openai_vision_model,
        timeout=settings.openai_timeout_seconds,
    )
