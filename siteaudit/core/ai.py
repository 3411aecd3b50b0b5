"""Text generation using Gemini."""

from __future__ import annotations

import asyncio
import logging

from google import genai
from google.genai import types

from siteaudit.errors.exceptions import APIError

logger = logging.getLogger(__name__)


class GeminiTextGenerator:
    """
    Single-shot text generation with a system instruction and a user prompt.

    One SDK client is created per generator and reused for every call. The
    blocking SDK call runs in a worker thread so the event loop keeps
    serving the other providers.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = genai.Client(api_key=api_key)

    def _generate_sync(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = self.client.models.generate_content(  # type: ignore
                model=self.model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    max_output_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            raise APIError(f"Gemini request failed: {e}") from e

        if not response.text:
            raise APIError("Gemini returned an empty response")
        return response.text

    async def __call__(self, system_prompt: str, user_prompt: str) -> str:
        logger.debug(f"Generating text with {self.model}")
        return await asyncio.to_thread(self._generate_sync, system_prompt, user_prompt)
