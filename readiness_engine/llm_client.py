"""
Text Generation Client
======================
Thin wrapper around the chat-completion providers used for AI-backed
classification and recommendations.

Every call is bounded by a timeout and never retried. Callers treat any
exception raised here as "service unavailable" and switch to their
deterministic fallback.
"""

import json
import os
from typing import Optional, Dict, Any

from .config.settings import LLM_CONFIG
from .config.logging import get_logger

logger = get_logger(__name__)


class TextGenerationError(Exception):
    """Base error for text-generation failures"""


class LLMUnavailableError(TextGenerationError):
    """No client is configured"""


class LLMResponseError(TextGenerationError):
    """The service replied with something that is not a JSON object"""


class TextGenerationClient:
    """
    JSON-in, JSON-out access to an external text-generation service.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key for LLM provider
            provider: LLM provider ("openrouter", "openai", or "anthropic")
            model: Model identifier in the provider's format
            timeout: Request timeout in seconds
        """
        self.api_key = api_key or LLM_CONFIG.get("api_key") or os.getenv("OPENROUTER_API_KEY")
        self.provider = provider or LLM_CONFIG.get("provider", "openrouter")
        self.model = model or LLM_CONFIG.get("model", "openai/gpt-4o-mini")
        self.timeout = timeout or LLM_CONFIG.get("timeout_seconds", 20.0)
        self.base_url = LLM_CONFIG.get("base_url", "https://openrouter.ai/api/v1")
        self.site_url = LLM_CONFIG.get("site_url", "http://localhost:8000")
        self.app_name = LLM_CONFIG.get("app_name", "Readiness Scoring Engine")
        self.max_tokens = LLM_CONFIG.get("max_tokens", 1000)
        self.temperature = LLM_CONFIG.get("temperature", 0.3)
        self.client = None

        self._initialize_client()

    @property
    def available(self) -> bool:
        return self.client is not None

    def _initialize_client(self):
        """Initialize the LLM client based on provider"""
        if not self.api_key:
            logger.info("No LLM API key configured, AI features use fallbacks")
            return

        if self.provider == "openrouter":
            from openai import OpenAI
            self.client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.site_url,
                    "X-Title": self.app_name,
                },
            )
        elif self.provider == "openai":
            from openai import OpenAI
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        elif self.provider == "anthropic":
            from anthropic import Anthropic
            self.client = Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        else:
            logger.warning(f"Unknown LLM provider '{self.provider}', AI features use fallbacks")

    def generate_json(self, system_prompt: str, prompt: str) -> Dict[str, Any]:
        """
        Send a prompt and parse the reply as a JSON object.

        Raises:
            LLMUnavailableError: no client configured
            LLMResponseError: reply is empty or not a JSON object
            Exception: any provider/transport error, unchanged
        """
        if not self.client:
            raise LLMUnavailableError("LLM client not configured")

        return parse_json_reply(self._call_llm(system_prompt, prompt))

    def _call_llm(self, system_prompt: str, prompt: str) -> str:
        """Call the LLM API"""
        if self.provider in ["openrouter", "openai"]:
            # Both OpenRouter and OpenAI use the same SDK interface
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            return response.choices[0].message.content

        elif self.provider == "anthropic":
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
            return response.content[0].text

        raise LLMUnavailableError(f"Unknown provider: {self.provider}")


def parse_json_reply(response: Optional[str]) -> Dict[str, Any]:
    """Parse a model reply, tolerating markdown code fences"""
    if not response:
        raise LLMResponseError("Empty LLM response")

    # Clean response (remove markdown code blocks if present)
    clean = response.strip()
    if clean.startswith("```"):
        clean = clean.split("```")[1]
        if clean.startswith("json"):
            clean = clean[4:]
    clean = clean.strip()

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"LLM response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise LLMResponseError("LLM response is not a JSON object")
    return data
