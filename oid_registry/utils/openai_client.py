"""OpenAI-compatible HTTP client for chat completions."""

from __future__ import annotations

from http.client import IncompleteRead
import json
import logging
import socket
import time
from urllib import error as urlerror
from urllib import request


LOGGER = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class OpenAICompatibleClient:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        retry_backoff_seconds: float = 1.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.retry_backoff_seconds = max(0.0, retry_backoff_seconds)

    def _backoff(self, path: str, attempt: int, reason: str) -> None:
        wait_seconds = self.retry_backoff_seconds * (2 ** (attempt - 1))
        LOGGER.warning(
            "%s on %s, retrying in %.1fs (attempt %d/%d).",
            reason,
            path,
            wait_seconds,
            attempt,
            self.max_retries,
        )
        if wait_seconds > 0:
            time.sleep(wait_seconds)

    def _post_json(self, path: str, payload: dict) -> dict:
        endpoint = f"{self.base_url}{path}"
        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        last_exception: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            req = request.Request(endpoint, data=data, headers=headers, method="POST")
            try:
                with request.urlopen(req, timeout=self.timeout_seconds) as response:
                    body = response.read().decode("utf-8")
            except urlerror.HTTPError as exc:
                details = exc.read().decode("utf-8", errors="ignore")
                if exc.code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    self._backoff(path, attempt, f"HTTP {exc.code}")
                    last_exception = exc
                    continue
                raise RuntimeError(f"HTTP {exc.code}: {details[:300]}") from exc
            except (urlerror.URLError, TimeoutError, socket.timeout, IncompleteRead, ConnectionResetError, OSError) as exc:
                if attempt < self.max_retries:
                    self._backoff(path, attempt, f"Network error ({exc})")
                    last_exception = exc
                    continue
                raise RuntimeError(f"Request failed: {exc}") from exc

            try:
                return json.loads(body)
            except json.JSONDecodeError as exc:
                if attempt < self.max_retries:
                    self._backoff(path, attempt, "Invalid JSON response")
                    last_exception = exc
                    continue
                raise RuntimeError("Response is not valid JSON.") from exc

        if last_exception is not None:
            raise RuntimeError(f"Request failed after {self.max_retries} attempts: {last_exception}") from last_exception
        raise RuntimeError("Request failed for an unknown reason.")

    def chat_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int = 512,
        temperature: float = 0.2,
        response_format: dict | None = None,
    ) -> str:
        payload: dict = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            payload["response_format"] = response_format

        data = self._post_json("/chat/completions", payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, TypeError, IndexError) as exc:
            raise RuntimeError("Invalid chat completion response format.") from exc

        if isinstance(content, list):
            text = "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict)
            )
            return text.strip()

        return str(content).strip()
