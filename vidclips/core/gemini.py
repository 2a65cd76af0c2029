import logging
from typing import Optional

import google.generativeai as genai

from vidclips.config import (
    GEMINI_API_KEY_NAME,
    GEMINI_FALLBACK_MODEL,
    GEMINI_PRIMARY_MODEL,
    GEMINI_TEMPERATURE,
)
from vidclips.core.credentials import CredentialStore, EnvCredentialStore, require_credential
from vidclips.core.exceptions import ModelResponseError
from vidclips.core.utils.fallback import FallbackPolicy, is_transient_unavailable

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Wrapper around the Gemini API with a single downgrade on overload.

    The primary model is tried first; when the API reports it is unavailable
    the same prompt is sent once to the fallback model.
    """

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        primary_model: str = GEMINI_PRIMARY_MODEL,
        fallback_model: str = GEMINI_FALLBACK_MODEL,
        temperature: float = GEMINI_TEMPERATURE,
    ):
        self.credentials = credentials or EnvCredentialStore()
        self.primary_model = primary_model
        self.fallback_model = fallback_model
        self.temperature = temperature

    def generate(self, prompt: str, model_name: str) -> str:
        """Send one prompt to one model and return the response text."""
        api_key = require_credential(self.credentials, GEMINI_API_KEY_NAME)
        genai.configure(api_key=api_key)

        logger.info(f"Attempting with model: {model_name}")
        model = genai.GenerativeModel(model_name)
        response = model.generate_content(
            prompt,
            generation_config={"temperature": self.temperature},
        )

        text = (response.text or "").strip()
        if not text:
            raise ModelResponseError("Empty response from Gemini API")

        logger.info(f"Gemini response received from {model_name} ({len(text)} chars)")
        return text

    def fallback_policy(self, prompt: str) -> FallbackPolicy[str]:
        return FallbackPolicy(
            primary=lambda: self.generate(prompt, self.primary_model),
            secondary=lambda: self.generate(prompt, self.fallback_model),
            should_fallback=is_transient_unavailable,
            name=f"Gemini {self.primary_model}",
        )

    def generate_with_fallback(self, prompt: str) -> str:
        return self.fallback_policy(prompt).run()
