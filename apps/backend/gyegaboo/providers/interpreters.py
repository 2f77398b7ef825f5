"""OpenAI-compatible interpreters used by the extraction engine.

The engine only sees the ``TextInterpreter`` / ``ImageInterpreter``
protocols. When no API key is configured the null implementations are used;
they always raise ``InterpreterUnavailable`` so the engine falls back to the
rule-based parsers.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..core.config import Settings, settings as default_settings
from ..errors import InterpreterError, InterpreterUnavailable
from ..schemas import ToolCall

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def guess_mime_type(filename: str) -> str:
    ext = PurePath(filename or "").suffix.lstrip(".").lower()
    return MIME_TYPES.get(ext, "image/jpeg")


class TextInterpreter(Protocol):
    def complete(self, prompt: str, text: str, tools: List[Dict[str, Any]]) -> List[ToolCall]:
        """Return the function calls the model chose for ``text``.

        Raises InterpreterUnavailable / InterpreterError on any failure.
        """
        ...


class ImageInterpreter(Protocol):
    def complete_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str,
        tools: List[Dict[str, Any]],
    ) -> List[ToolCall]: ...


class NullTextInterpreter:
    """Used when no model backend is configured."""

    reason = "text interpreter is not configured (GYEGABOO_OPENAI_API_KEY missing)"

    def complete(self, prompt: str, text: str, tools: List[Dict[str, Any]]) -> List[ToolCall]:
        raise InterpreterUnavailable(self.reason)


class NullImageInterpreter:
    reason = "image interpreter is not configured (GYEGABOO_OPENAI_API_KEY missing)"

    def complete_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str,
        tools: List[Dict[str, Any]],
    ) -> List[ToolCall]:
        raise InterpreterUnavailable(self.reason)


class OpenAIChatClient:
    """Minimal synchronous client for ``POST {base}/chat/completions``."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self.base = base_url.rstrip("/")
        self.key = api_key.strip()
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def chat_tools(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
        temperature: float = 0.3,
    ) -> List[ToolCall]:
        headers = {
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "required"

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(f"{self.base}/chat/completions", headers=headers, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as exc:
            raise InterpreterUnavailable(f"interpreter timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise InterpreterUnavailable(f"interpreter returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise InterpreterUnavailable(f"interpreter request failed: {exc}") from exc
        except ValueError as exc:
            raise InterpreterError("interpreter returned a non-JSON body") from exc

        return self._parse_tool_calls(data)

    @staticmethod
    def _parse_tool_calls(data: Any) -> List[ToolCall]:
        try:
            message = data["choices"][0]["message"]
            raw_calls = message.get("tool_calls") or []
            calls: List[ToolCall] = []
            for raw in raw_calls:
                fn = raw["function"]
                args = fn.get("arguments") or "{}"
                parsed = json.loads(args) if isinstance(args, str) else args
                if not isinstance(parsed, dict):
                    raise TypeError("tool arguments must be an object")
                calls.append(ToolCall(name=fn["name"], arguments=parsed))
            return calls
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as exc:
            raise InterpreterError("malformed tool call response") from exc


class OpenAITextInterpreter:
    def __init__(self, client: OpenAIChatClient) -> None:
        self.client = client

    def complete(self, prompt: str, text: str, tools: List[Dict[str, Any]]) -> List[ToolCall]:
        messages = [
            {"role": "system", "content": prompt},
            {"role": "user", "content": text},
        ]
        return self.client.chat_tools(messages, tools)


class OpenAIImageInterpreter:
    def __init__(self, client: OpenAIChatClient) -> None:
        self.client = client

    def complete_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str,
        tools: List[Dict[str, Any]],
    ) -> List[ToolCall]:
        encoded = base64.b64encode(image).decode("ascii")
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                ],
            }
        ]
        return self.client.chat_tools(messages, tools)


def build_text_interpreter(cfg: Settings = default_settings) -> TextInterpreter:
    if not cfg.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; rule-based parsers will be used")
        return NullTextInterpreter()
    client = OpenAIChatClient(
        api_key=cfg.OPENAI_API_KEY,
        model=cfg.OPENAI_MODEL,
        base_url=cfg.OPENAI_BASE_URL,
        timeout=cfg.INTERPRETER_TIMEOUT_SEC,
    )
    return OpenAITextInterpreter(client)


def build_image_interpreter(cfg: Settings = default_settings) -> ImageInterpreter:
    if not cfg.OPENAI_API_KEY:
        return NullImageInterpreter()
    client = OpenAIChatClient(
        api_key=cfg.OPENAI_API_KEY,
        model=cfg.OPENAI_VISION_MODEL,
        base_url=cfg.OPENAI_BASE_URL,
        timeout=cfg.INTERPRETER_TIMEOUT_SEC,
    )
    return OpenAIImageInterpreter(client)
