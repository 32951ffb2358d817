"""
Ollama REST API client — the default prompting agent.
Wraps POST /api/chat with retry logic.
"""
import logging
import time
from typing import Optional
import httpx

from config import settings
from core.exceptions import PromptAgentError

logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")


class OllamaClient:
    """Thin client for the Ollama local LLM server."""

    def __init__(self, host: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[int] = None, max_retries: Optional[int] = None):
        self.host = (host or settings.OLLAMA_HOST).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout or settings.OLLAMA_TIMEOUT_SECONDS
        self.max_retries = max_retries or settings.OLLAMA_MAX_RETRIES

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        """Returns (True, model_name) if Ollama is reachable, (False, error) otherwise."""
        try:
            resp = httpx.get(f"{self.host}/api/version", timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)

    def chat(self, messages: list[dict], options: Optional[dict] = None) -> str:
        """
        Call Ollama /api/chat with a list of {role, content} messages.
        Returns the assistant's reply as a string.
        Raises PromptAgentError once every attempt has failed.
        """
        for msg in messages:
            if msg.get("role") not in ROLES:
                raise PromptAgentError(f"Unsupported message role: {msg.get('role')!r}")

        opts = {"num_ctx": 4096, "temperature": 0.2}
        opts.update(options or {})
        payload = {
            "model": opts.pop("model", self.model),
            "messages": messages,
            "stream": False,
            "options": opts,
        }
        last_err: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Ollama chat attempt %d", attempt)
                resp = httpx.post(
                    f"{self.host}/api/chat",
                    json=payload,
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                text = resp.json()["message"]["content"].strip()
                logger.debug("Ollama response length: %d chars", len(text))
                return text
            except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
                last_err = e
                logger.warning("Ollama chat attempt %d/%d failed: %s", attempt, self.max_retries, e)
                if attempt < self.max_retries:
                    time.sleep(2 ** attempt)  # exponential back-off: 2s, 4s
        raise PromptAgentError(f"Ollama chat failed after {self.max_retries} attempts: {last_err}")
