from __future__ import annotations
import os
from typing import Optional
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from clausescope.utils.config import AppConfig
from clausescope.utils.exception import ExternalServiceError, ValidationError
from clausescope.utils.logger import get_logger

logger = get_logger(__name__)


class GeminiClient:
    """Async text generation against Gemini.

    One call per ``generate``; transport failures surface as
    ExternalServiceError with no retry.
    """

    def __init__(self, config: AppConfig, api_key: Optional[str] = None):
        api_key = api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ValidationError("GOOGLE_API_KEY not set")
        genai.configure(api_key=api_key)
        self.config = config
        self.model = genai.GenerativeModel(config.gemini_model)

    async def generate(self, prompt: str, temperature: Optional[float] = None, json_mode: bool = False) -> str:
        generation_config = {
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_output_tokens": self.config.max_tokens,
        }
        if json_mode:
            generation_config["response_mime_type"] = "application/json"
        try:
            rsp = await self.model.generate_content_async(prompt, generation_config=generation_config)
            return rsp.text
        except (google_exceptions.GoogleAPIError, ValueError) as e:
            logger.error("Gemini generation failed: %s", e)
            raise ExternalServiceError(f"Gemini generation failed: {e}") from e
