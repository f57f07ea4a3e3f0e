"""Client for the Gemini generative language REST API."""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config import Settings, get_settings
from core.exceptions import LLMError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Thin async client for ``models/{model}:generateContent``.

    One instance is created per process and shared by every request; it owns
    a pooled ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
            timeout=timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GeminiClient":
        """Build a client from application settings."""
        settings = settings or get_settings()
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY is not set; model calls will be rejected")
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
        )

    async def generate_content(
        self,
        prompt: str,
        response_mime_type: Optional[str] = None,
    ) -> str:
        """
        Generate text for a single prompt.

        Args:
            prompt: Prompt text
            response_mime_type: Optional output MIME type (e.g. ``application/json``)

        Returns:
            Concatenated text parts of the first candidate

        Raises:
            LLMError: On transport failure, an error status, or an empty answer
        """
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if response_mime_type:
            payload["generationConfig"] = {"responseMimeType": response_mime_type}

        try:
            response = await self.client.post(f"/models/{self.model}:generateContent", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini returned HTTP {e.response.status_code} for model {self.model}")
            raise LLMError(f"Model call failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise LLMError("Model call failed") from e
        except ValueError as e:
            raise LLMError("Model returned a non-JSON response") from e

        text = self._extract_text(data)
        if not text:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            raise LLMError(f"Model returned no text{f' (blocked: {block_reason})' if block_reason else ''}")

        usage = data.get("usageMetadata") or {}
        logger.debug(f"Gemini {self.model} used {usage.get('totalTokenCount', 'unknown')} tokens")
        return text

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
        logger.info("Gemini client closed")
