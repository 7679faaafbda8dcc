from __future__ import annotations

import http.client
import json
import mimetypes
from abc import ABC, abstractmethod
from typing import Any
from urllib import error, request

from a11y_enricher.config.schema import ModelConfig, ProviderConfig
from a11y_enricher.core.exceptions import ConfigurationError, GenerationError


class ChatModelClient(ABC):
    """Provider-neutral single-turn text/vision completion."""

    provider_name = "unknown"

    def __init__(self, api_key: str, model: str, base_url: str | None = None) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/") if base_url else None

    @abstractmethod
    def generate(self, prompt: str, image_url: str | None = None) -> str:
        raise NotImplementedError


class OpenAIChatClient(ChatModelClient):
    provider_name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def generate(self, prompt: str, image_url: str | None = None) -> str:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        if image_url:
            content.append({"type": "image_url", "image_url": {"url": image_url}})
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
        }
        response = _post_json(
            f"{self.base_url or self.default_base_url}/chat/completions",
            body,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            return response["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("OpenAI returned a malformed response") from exc


class AnthropicChatClient(ChatModelClient):
    provider_name = "anthropic"
    default_base_url = "https://api.anthropic.com/v1"

    def generate(self, prompt: str, image_url: str | None = None) -> str:
        content: list[dict[str, Any]] = []
        if image_url:
            if image_url.startswith("data:"):
                media_type, data = split_data_uri(image_url)
                source = {"type": "base64", "media_type": media_type, "data": data}
            else:
                source = {"type": "url", "url": image_url}
            content.append({"type": "image", "source": source})
        content.append({"type": "text", "text": prompt})
        body = {
            "model": self.model,
            "max_tokens": 512,
            "messages": [{"role": "user", "content": content}],
        }
        response = _post_json(
            f"{self.base_url or self.default_base_url}/messages",
            body,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "Content-Type": "application/json",
            },
        )
        blocks = response.get("content") or []
        text_parts = [block.get("text", "") for block in blocks if isinstance(block, dict)]
        if not text_parts:
            raise GenerationError("Anthropic returned no content")
        return "".join(text_parts)


class GeminiChatClient(ChatModelClient):
    provider_name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def generate(self, prompt: str, image_url: str | None = None) -> str:
        parts: list[dict[str, Any]] = [{"text": prompt}]
        if image_url:
            if image_url.startswith("data:"):
                media_type, data = split_data_uri(image_url)
                parts.append({"inline_data": {"mime_type": media_type, "data": data}})
            else:
                parts.append({"file_data": {"mime_type": guess_image_type(image_url), "file_uri": image_url}})
        body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": 0.2},
        }
        response = _post_json(
            f"{self.base_url or self.default_base_url}/models/{self.model}:generateContent",
            body,
            headers={
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json",
            },
        )
        candidates = response.get("candidates", [])
        if not candidates:
            raise GenerationError("Gemini returned no candidates")
        response_parts = candidates[0].get("content", {}).get("parts", [])
        text_parts = [part.get("text", "") for part in response_parts if isinstance(part, dict)]
        content = "".join(text_parts).strip()
        if not content:
            raise GenerationError("Gemini returned an empty response")
        return content


CLIENTS: dict[str, type[ChatModelClient]] = {
    "openai": OpenAIChatClient,
    "anthropic": AnthropicChatClient,
    "gemini": GeminiChatClient,
}


def create_chat_client(provider_config: ProviderConfig, model_config: ModelConfig) -> ChatModelClient:
    client_class = CLIENTS.get(model_config.provider)
    if client_class is None:
        raise ConfigurationError(f"Unsupported LLM provider: {model_config.provider}")
    if not provider_config.api_key:
        raise ConfigurationError(f"{model_config.provider} API key not configured")
    return client_class(provider_config.api_key, model_config.model_name, provider_config.base_url)


def split_data_uri(data_uri: str) -> tuple[str, str]:
    header, _, data = data_uri.partition(",")
    media_type = header[len("data:"):].split(";", 1)[0] or "image/png"
    return media_type, data


def guess_image_type(url: str) -> str:
    guessed, _ = mimetypes.guess_type(url.split("?", 1)[0])
    return guessed if guessed and guessed.startswith("image/") else "image/jpeg"


def _post_json(url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
    encoded = json.dumps(payload).encode("utf-8")
    req = request.Request(url, data=encoded, headers=headers, method="POST")
    try:
        with request.urlopen(req, timeout=60) as response:
            raw = response.read().decode("utf-8")
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        message, code = _provider_error(detail)
        raise GenerationError(
            f"LLM request failed with status {exc.code}: {message}",
            status=exc.code,
            code=code,
            detail=detail,
        ) from exc
    except error.URLError as exc:
        raise GenerationError(f"LLM request could not be completed: {exc.reason}") from exc
    except (TimeoutError, OSError, http.client.HTTPException) as exc:
        raise GenerationError(f"LLM request could not be completed: {exc}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationError("LLM returned invalid JSON") from exc


def _provider_error(detail: str) -> tuple[str, str | None]:
    """Pulls the message and machine-readable code out of a provider error body."""

    try:
        body = json.loads(detail)
    except json.JSONDecodeError:
        return detail[:300], None
    err = body.get("error") if isinstance(body, dict) else None
    if not isinstance(err, dict):
        return detail[:300], None
    code = err.get("code") or err.get("type") or err.get("status")
    return str(err.get("message", ""))[:300], str(code) if code is not None else None
