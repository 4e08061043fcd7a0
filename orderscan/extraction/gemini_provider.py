"""Gemini-based extraction provider for purchase order documents.

Sends the document inline (base64) together with the instruction prompt to
the Gemini multimodal API and returns the raw text reply.

Based on the google-genai SDK:
https://googleapis.github.io/python-genai/
"""

import logging

from google import genai
from google.genai import types

from orderscan.extraction.base import ExtractionProvider
from orderscan.extraction.schema import UploadedFile
from orderscan.shared.config import Settings
from orderscan.shared.errors import ExtractionError

logger = logging.getLogger(__name__)

# Safety filtering is off for every harm category the API exposes
SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiExtractionProvider(ExtractionProvider):
    """Gemini-based extraction provider.

    Requires APP_GEMINI_API_KEY; without it the provider runs in demo mode.
    """

    def __init__(self, settings: Settings, client: genai.Client | None = None) -> None:
        """Initialize Gemini extraction provider.

        Args:
            settings: Application settings
            client: Pre-built client (tests inject a stub); created lazily if omitted
        """
        super().__init__(settings)
        self._client = client

    @property
    def provider_name(self) -> str:
        """Get provider name for logging/metrics.

        Returns:
            Provider identifier 'gemini'
        """
        return "gemini"

    def is_configured(self) -> bool:
        """Check if a Gemini API key is configured.

        Returns:
            True if a non-placeholder key is set
        """
        return bool(self.settings.api_key_for(self.provider_name))

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.api_key_for(self.provider_name))
        return self._client

    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.settings.extraction_temperature,
            max_output_tokens=self.settings.extraction_max_output_tokens,
            safety_settings=SAFETY_SETTINGS,
        )

    async def _generate(self, prompt: str, file: UploadedFile, media_type: str) -> str:
        """Call Gemini with the prompt and the inlined document.

        Args:
            prompt: Instruction prompt
            file: Document bytes (the SDK base64-encodes inline data)
            media_type: Declared media type of the document

        Returns:
            Raw response text

        Raises:
            ExtractionError: If the API call fails or returns no text
        """
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=file.content, mime_type=media_type),
                ],
            )
        ]

        try:
            response = await self._get_client().aio.models.generate_content(
                model=self.settings.gemini_model,
                contents=contents,
                config=self._build_config(),
            )
        except Exception as e:
            raise ExtractionError(f"Gemini API request failed: {e}") from e

        if response.text is None:
            raise ExtractionError("Gemini API returned no text in response")
        return response.text
