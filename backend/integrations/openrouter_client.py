"""
OpenRouter REST API client.
Wraps POST /chat/completions (OpenAI-compatible) for tool-enabled chat.
No retries here; callers handle GatewayError themselves.
"""
import logging
from typing import Optional, Tuple
import httpx

from config import settings
from core.errors import GatewayError
from models.chat import ChatCompletionRequest, ChatCompletionResponse

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """Stateless gateway to the language-model provider. Safe to share across threads."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.OPENROUTER_BASE_URL).rstrip("/")
        self.model = model or settings.OPENROUTER_MODEL
        self.client = client or httpx.Client(timeout=settings.OPENROUTER_TIMEOUT_SECONDS)
        self._headers = {
            "Authorization": f"Bearer {api_key if api_key is not None else settings.OPENROUTER_API_KEY}",
            "HTTP-Referer": settings.APP_HOST,
            "X-Title": settings.APP_TITLE,
        }

    def is_healthy(self) -> Tuple[bool, Optional[str]]:
        """Returns (True, model_name) if the provider is reachable, (False, error) otherwise."""
        try:
            resp = self.client.get(f"{self.base_url}/models", headers=self._headers, timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)

    def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        payload = request.model_dump(exclude_none=True)
        payload["model"] = request.model or self.model

        try:
            resp = self.client.post(f"{self.base_url}/chat/completions", json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error("OpenRouter request failed: %s", e)
            raise GatewayError(f"OpenRouter request failed: {e}") from e

        if not resp.is_success:
            logger.error("OpenRouter API error: %s %s", resp.status_code, resp.text)
            raise GatewayError(
                f"OpenRouter API error: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            data = ChatCompletionResponse.model_validate(resp.json())
        except ValueError as e:
            raise GatewayError(f"Malformed OpenRouter response: {e}", status_code=resp.status_code, body=resp.text) from e
        if not data.choices:
            logger.error("No response choices from OpenRouter API: %s", resp.text)
            raise GatewayError("No response choices from OpenRouter API", status_code=resp.status_code, body=resp.text)
        return data

    def close(self) -> None:
        self.client.close()
