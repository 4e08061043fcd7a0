"""OpenAI-based extraction provider for purchase order documents.

Uses the chat completions API with vision input: images are sent as base64
data URLs, PDFs as inline file parts.

This provider uses the cloud-based OpenAI API. Gemini is the default provider;
select this one with APP_EXTRACTION_PROVIDER=openai.
"""

from typing import Any

from openai import AsyncOpenAI

from orderscan.extraction.base import ExtractionProvider, encode_file
from orderscan.extraction.schema import UploadedFile
from orderscan.shared.config import Settings
from orderscan.shared.errors import ExtractionError


class OpenAIExtractionProvider(ExtractionProvider):
    """OpenAI-based extraction provider using a vision-capable chat model.

    Requires APP_OPENAI_API_KEY; without it the provider runs in demo mode.
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        """Initialize OpenAI extraction provider.

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
            Provider identifier 'openai'
        """
        return "openai"

    def is_configured(self) -> bool:
        """Check if an OpenAI API key is configured.

        Returns:
            True if a non-placeholder key is set
        """
        return bool(self.settings.api_key_for(self.provider_name))

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.settings.api_key_for(self.provider_name))
        return self._client

    def _build_document_part(self, file: UploadedFile, media_type: str) -> dict[str, Any]:
        """Build the message part carrying the encoded document.

        Args:
            file: Document to inline
            media_type: Declared media type

        Returns:
            Content part dict for the chat completions API
        """
        data_url = f"data:{media_type};base64,{encode_file(file.content)}"
        if media_type == "application/pdf":
            return {"type": "file", "file": {"filename": file.filename, "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}

    async def _generate(self, prompt: str, file: UploadedFile, media_type: str) -> str:
        """Call OpenAI with the prompt and the inlined document.

        Args:
            prompt: Instruction prompt
            file: Document to inline
            media_type: Declared media type of the document

        Returns:
            Raw response text

        Raises:
            ExtractionError: If the API call fails or returns no content
        """
        try:
            response = await self._get_client().chat.completions.create(
                model=self.settings.openai_model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            self._build_document_part(file, media_type),
                        ],
                    }
                ],
                temperature=self.settings.extraction_temperature,
                max_tokens=self.settings.extraction_max_output_tokens,
            )
        except Exception as e:
            raise ExtractionError(f"OpenAI API request failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise ExtractionError("No message content in API response")
        content: str = response.choices[0].message.content
        return content
