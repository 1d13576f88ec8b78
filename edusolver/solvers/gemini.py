"""
Gemini API client wrapper.

Sends images, text items and a prompt as one multimodal request and
returns the answer text.
"""

import logging
from typing import Any, List, Optional

from ..utils.config import DEFAULT_MODEL
from ..utils.errors import ApiKeyMissingError, InferenceError

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "No response from the AI."
IMAGE_MIME_TYPE = "image/jpeg"


def material_label(index: int, text: str) -> str:
    """Label a user text item so the model can tell items apart."""
    return f"[Input material #{index}]: {text}"


class GeminiClient:
    """
    Thin wrapper around google.genai.Client.

    The SDK client is created lazily so constructing a GeminiClient
    never touches the network.

    Usage:
        client = GeminiClient(api_key)
        text = client.generate(prompt, images=[jpeg_bytes], texts=["2x + 4 = 10"])
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = DEFAULT_MODEL,
        client: Optional[Any] = None,
    ):
        """
        Args:
            api_key: Gemini API key. Must not be empty.
            model_name: Model used for generate_content.
            client: Pre-built SDK client (tests inject a fake here).

        Raises:
            ApiKeyMissingError: If api_key is empty.
        """
        if not api_key or not api_key.strip():
            raise ApiKeyMissingError()

        self._api_key = api_key.strip()
        self.model_name = model_name
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def build_parts(self, prompt: str, images: List[bytes], texts: List[str]) -> list:
        """
        Request parts in order: images, labelled texts, then the prompt.
        """
        from google.genai import types

        parts = [types.Part.from_bytes(data=img, mime_type=IMAGE_MIME_TYPE) for img in images]
        parts.extend(
            types.Part.from_text(text=material_label(i, text))
            for i, text in enumerate(texts, 1)
        )
        parts.append(types.Part.from_text(text=prompt))
        return parts

    def generate(self, prompt: str, images: List[bytes], texts: List[str]) -> str:
        """
        Run one generate_content call.

        Returns:
            The answer text, or NO_RESPONSE_TEXT if the model returned none.

        Raises:
            InferenceError: If the request fails.
        """
        from google.genai import errors, types

        contents = [types.Content(role="user", parts=self.build_parts(prompt, images, texts))]

        try:
            response = self._get_client().models.generate_content(
                model=self.model_name,
                contents=contents,
            )
        except errors.APIError as e:
            logger.error("Gemini API error %s: %s", getattr(e, "code", "?"), e)
            raise InferenceError(
                "The AI service rejected the request.",
                technical_details=f"{type(e).__name__}: {e}",
            )
        except Exception as e:
            logger.error("Gemini request failed: %s", e)
            raise InferenceError(
                "Could not connect to the AI service.",
                technical_details=f"{type(e).__name__}: {e}",
            )

        text = getattr(response, "text", None)
        return text or NO_RESPONSE_TEXT
