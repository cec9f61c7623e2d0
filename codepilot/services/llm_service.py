"""
LLM Service - Handles interactions with different LLM providers

The orchestrators only ever see the GenerativeService seam: prompt text in,
response text out, or a TransportError.
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

import aiohttp

from .config_manager import ConfigManager
from .errors import CodePilotError, GatewayTimeoutError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@runtime_checkable
class GenerativeService(Protocol):
    """Opaque text generation collaborator"""

    async def generate(self, prompt: str) -> str: ...


class LLMService:
    """Service for interacting with various LLM providers"""

    def __init__(self, config: dict[str, Any]):
        self.config = config
        self.provider = config.get("provider", "gemini")

    # ========== Config Helpers ==========

    def _get_gemini_config(self) -> tuple[str, str, str]:
        """Get Gemini config: (api_key, model, base_url). Raises if api_key missing."""
        cfg = self.config.get("gemini", {})
        api_key = cfg.get("apiKey") or os.environ.get("GEMINI_API_KEY")
        if not api_key:
            raise TransportError("Gemini API key not configured")
        model = cfg.get("model", "gemini-1.5-flash")
        base_url = f"https://generativelanguage.googleapis.com/v1beta/models/{model}"
        return api_key, model, base_url

    def _get_openai_config(self) -> tuple[str, str, dict[str, str]]:
        """Get OpenAI config: (model, url, headers). Raises if api_key missing."""
        cfg = self.config.get("openai", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise TransportError("OpenAI API key not configured")
        model = cfg.get("model", "gpt-4")
        url = "https://api.openai.com/v1/chat/completions"
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        return model, url, headers

    def _get_vllm_config(self) -> tuple[str, str, dict[str, str]]:
        """Get vLLM config: (model, url, headers)."""
        cfg = self.config.get("vllm", {})
        endpoint = cfg.get("endpoint", "http://localhost:8000")
        model = cfg.get("model", "default")
        url = f"{endpoint}/v1/chat/completions"
        headers = {"Content-Type": "application/json"}
        if cfg.get("apiKey"):
            headers["Authorization"] = f"Bearer {cfg['apiKey']}"
        return model, url, headers

    @property
    def timeout_seconds(self) -> float:
        """Deadline applied to every generate() call"""
        cfg = self.config.get("gateway", {})
        return float(cfg.get("timeoutSeconds", DEFAULT_TIMEOUT_SECONDS))

    # ========== HTTP ==========

    @asynccontextmanager
    async def _request(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        provider: str = "API",
    ):
        """Context manager for HTTP POST requests with automatic session cleanup"""
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.warning("[LLMService] %s API error (%s): %s", provider, response.status, error_text)
                    raise TransportError(f"{provider} API error ({response.status}): {error_text}")
                yield response

    async def _request_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        provider: str = "API",
    ) -> dict[str, Any]:
        """Make request and return JSON response"""
        try:
            async with self._request(url, payload, headers, provider) as response:
                return await response.json()
        except aiohttp.ClientError as e:
            raise TransportError(f"{provider} network error: {e}") from e

    # ========== Response Parsers ==========

    def _parse_openai_response(self, data: dict[str, Any]) -> str:
        """Parse OpenAI-compatible response format"""
        if "choices" in data and len(data["choices"]) > 0:
            choice = data["choices"][0]
            if "message" in choice and "content" in choice["message"]:
                return choice["message"]["content"]
            elif "text" in choice:
                return choice["text"]
        raise TransportError("No valid response from API")

    def _parse_gemini_response(self, data: dict[str, Any]) -> str:
        """Parse Gemini API response format"""
        candidates = data.get("candidates") or []
        if candidates:
            parts = candidates[0].get("content", {}).get("parts") or []
            if parts and "text" in parts[0]:
                return parts[0]["text"]
        raise TransportError("No valid response from Gemini API")

    # ========== Payload Builders ==========

    def _build_openai_payload(
        self,
        model: str,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> dict[str, Any]:
        """Build OpenAI-compatible request payload"""
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }

    def _build_gemini_payload(self, prompt: str, max_output_tokens: int = 8192) -> dict[str, Any]:
        """Build Gemini API request payload"""
        cfg = self.config.get("gemini", {})
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": cfg.get("temperature", 0.2),
                "topP": 0.95,
                "maxOutputTokens": max_output_tokens,
            },
        }

    # ========== Providers ==========

    async def generate(self, prompt: str) -> str:
        """Generate a response from the configured provider within the deadline"""
        timeout = self.timeout_seconds
        try:
            return await asyncio.wait_for(self._dispatch(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning("[LLMService] %s call timed out after %ss", self.provider, timeout)
            raise GatewayTimeoutError(timeout) from e

    async def _dispatch(self, prompt: str) -> str:
        if self.provider == "gemini":
            return await self._call_gemini(prompt)
        elif self.provider == "vllm":
            return await self._call_vllm(prompt)
        elif self.provider == "openai":
            return await self._call_openai(prompt)
        else:
            raise TransportError(f"Unsupported provider: {self.provider}")

    async def _call_gemini(self, prompt: str) -> str:
        """Call Google Gemini API"""
        api_key, model, base_url = self._get_gemini_config()
        logger.info("[LLMService] Calling Gemini API with model: %s", model)

        url = f"{base_url}:generateContent?key={api_key}"
        data = await self._request_json(url, self._build_gemini_payload(prompt), provider="Gemini")
        response_text = self._parse_gemini_response(data)

        logger.info("[LLMService] Received response from %s (length: %d chars)", model, len(response_text))
        return response_text

    async def _call_vllm(self, prompt: str) -> str:
        """Call vLLM endpoint with OpenAI Compatible API"""
        model, url, headers = self._get_vllm_config()
        payload = self._build_openai_payload(model, prompt)

        data = await self._request_json(url, payload, headers, provider="vLLM")
        return self._parse_openai_response(data)

    async def _call_openai(self, prompt: str) -> str:
        """Call OpenAI API"""
        model, url, headers = self._get_openai_config()
        payload = self._build_openai_payload(model, prompt, max_tokens=2000)

        data = await self._request_json(url, payload, headers, provider="OpenAI")
        return self._parse_openai_response(data)


# ═══════════════════════════════════════════════════════════════════════════
# Config-backed gateway
# ═══════════════════════════════════════════════════════════════════════════


class GenerativeGateway:
    """GenerativeService that picks up the latest saved configuration on every call"""

    def __init__(self, config_manager: ConfigManager):
        self._config_manager = config_manager

    async def generate(self, prompt: str) -> str:
        service = LLMService(self._config_manager.get_config())
        return await service.generate(prompt)


async def generate_text(gateway: GenerativeService, prompt: str) -> str:
    """Call any GenerativeService, folding foreign exceptions into TransportError"""
    try:
        return await gateway.generate(prompt)
    except CodePilotError:
        raise
    except Exception as e:
        raise TransportError(f"Generative service failed: {e}") from e


async def call_llm(prompt: str, config: dict[str, Any]) -> str:
    """Convenience function to call LLM with the given config."""
    service = LLMService(config)
    return await service.generate(prompt)
