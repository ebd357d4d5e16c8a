"""
Model Gateway

Single entry point for text generation: generate(prompt) -> text.

Backed by Gemini through google-genai. The provider gives no structure
guarantee, so the caller receives raw free text and is responsible for
parsing it (services.analysis_parser). Any provider failure, including a
missing API key, surfaces as ModelError and nothing else.

No timeout is layered on top of the transport default; the caller runs in a
background task and nothing on the request path waits for it.
"""

import logging
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from core.config import settings

logger = logging.getLogger(__name__)


class ModelError(Exception):
    """The generation call failed. Never shown to the reflection submitter."""


class ModelGateway:
    """
    Wraps a google.genai.Client.

    Usage:
        gateway = ModelGateway(client=genai.Client(api_key=...))
        text = gateway.generate(prompt)

    Tests pass a MagicMock client shaped like a generate_content response.
    """

    def __init__(self, client=None, model: Optional[str] = None):
        self.client = client
        self.model = model or settings.GEMINI_MODEL

    def generate(self, prompt: str) -> str:
        if self.client is None:
            raise ModelError(
                "No Gemini client available. Set GEMINI_API_KEY to enable analysis generation."
            )

        start = time.monotonic()
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[
                    genai_types.Content(
                        role="user",
                        parts=[genai_types.Part(text=prompt)],
                    ),
                ],
            )
        except Exception as e:
            raise ModelError(f"Gemini generate_content failed: {e}") from e

        latency_ms = int((time.monotonic() - start) * 1000)
        text = _response_text(response)

        input_tokens = 0
        output_tokens = 0
        usage = getattr(response, "usage_metadata", None)
        if usage:
            input_tokens = getattr(usage, "prompt_token_count", 0) or 0
            output_tokens = getattr(usage, "candidates_token_count", 0) or 0

        logger.info(
            f"Gemini generation finished ({self.model}, {latency_ms}ms)",
            extra={
                "extra_fields": {
                    "model": self.model,
                    "latency_ms": latency_ms,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "response_chars": len(text),
                }
            },
        )
        return text


def _response_text(response) -> str:
    """Concatenate the text parts of the first candidate ("" if there are none)."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return ""

    content = candidates[0].content
    if not content or not content.parts:
        return ""

    return "".join(part.text or "" for part in content.parts)


def get_model_gateway() -> ModelGateway:
    """Build the gateway from settings. Without an API key every call raises ModelError."""
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set; analysis generation will fail")
        return ModelGateway(client=None)
    return ModelGateway(client=genai.Client(api_key=settings.GEMINI_API_KEY))
