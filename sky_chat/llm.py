from __future__ import annotations
import logging
from typing import List, Optional

import httpx

from . import config

logger = logging.getLogger("uvicorn.error")

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class UpstreamGenerationError(RuntimeError):
    pass


class OpenAIChat:
    """Chat-completions client used to write the visitor-facing replies."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.model = model or config.OPENAI_MODEL
        self.max_tokens = max_tokens or config.OPENAI_MAX_TOKENS
        self.temperature = temperature if temperature is not None else config.OPENAI_TEMPERATURE
        self.timeout = timeout or config.OPENAI_TIMEOUT
        self.transport = transport

    def __call__(self, messages: List[dict]) -> str:
        return self.generate(messages)

    def generate(self, messages: List[dict]) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        logger.info("LLM: request %s", {"model": self.model, "messages": len(messages)})

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    OPENAI_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise UpstreamGenerationError(f"OpenAI request failed: {e}") from e

        if response.status_code != 200:
            logger.error("LLM: error %s", {"status": response.status_code, "body": response.text[:500]})
            raise UpstreamGenerationError(f"OpenAI API error: {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamGenerationError("OpenAI returned a malformed payload") from e

        if not isinstance(content, str) or not content.strip():
            raise UpstreamGenerationError("OpenAI returned an empty reply")
        return content
