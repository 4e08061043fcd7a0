"""Abstract base class for extraction providers.

Enables switching between multimodal model vendors (Gemini, OpenAI) while
keeping the request/response handling identical.

Based on Strategy Pattern:
https://refactoring.guru/design-patterns/strategy/python

The shared flow lives in ``extract_order_fields``:
- no credential: demo mode, simulated delay, fallback record
- model call failure: ExtractionError, reported as a failed result
- unparseable model output: fallback record, never a failure
"""

import asyncio
import base64
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from orderscan.extraction.fallback import build_fallback_order
from orderscan.extraction.parsing import parse_order_response
from orderscan.extraction.prompts import ORDER_EXTRACTION_PROMPT
from orderscan.extraction.schema import OrderData, UploadedFile
from orderscan.shared.config import Settings
from orderscan.shared.errors import ExtractionError

logger = logging.getLogger(__name__)


class ExtractionResult(BaseModel):
    """Result of extraction operation.

    Attributes:
        order_data: Extracted order data or None if extraction failed
        success: Whether operation succeeded
        error: Error message if operation failed
        provider: Name of provider that performed extraction (e.g., 'gemini', 'openai')
        is_fallback: True when order_data is the demo record rather than model output
    """

    order_data: OrderData | None
    success: bool
    error: str | None = None
    provider: str
    is_fallback: bool = False


def encode_file(content: bytes) -> str:
    """Encode file bytes as base64 text for inline model payloads."""
    return base64.b64encode(content).decode("ascii")


class ExtractionProvider(ABC):
    """Abstract base class for purchase order extraction providers.

    Subclasses implement the vendor call in ``_generate`` and report whether a
    credential is configured. Everything else is shared.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize provider with settings.

        Args:
            settings: Application settings
        """
        self.settings = settings

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/metrics.

        Returns:
            Provider identifier (e.g., 'gemini', 'openai')
        """
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if a usable credential is configured.

        Returns:
            True if live extraction is possible, False for demo mode
        """
        pass

    @abstractmethod
    async def _generate(self, prompt: str, file: UploadedFile, media_type: str) -> str:
        """Send one single-turn request with the prompt and the inlined document.

        Args:
            prompt: Instruction prompt
            file: Document to inline (base64-encoded on the wire)
            media_type: Declared media type of the document

        Returns:
            Raw text of the model's reply

        Raises:
            ExtractionError: If the service call fails
        """
        pass

    def build_prompt(self) -> str:
        """Build the extraction instruction prompt."""
        return ORDER_EXTRACTION_PROMPT

    async def extract_order_fields(self, file: UploadedFile) -> ExtractionResult:
        """Extract structured purchase order data from a document.

        Args:
            file: Validated upload (image or PDF)

        Returns:
            ExtractionResult with order data, or error if the service call failed
        """
        if not self.is_configured():
            logger.warning(
                f"No API key configured for '{self.provider_name}', returning demo data"
            )
            await asyncio.sleep(self.settings.demo_delay_seconds)
            return self._fallback_result()

        media_type = file.content_type or "application/octet-stream"
        try:
            response_text = await self._generate(self.build_prompt(), file, media_type)
        except ExtractionError as e:
            logger.error(f"{self.provider_name} extraction failed: {e}")
            return ExtractionResult(
                order_data=None,
                success=False,
                error=f"Extraction failed: {str(e)}",
                provider=self.provider_name,
            )

        logger.debug(f"{self.provider_name} response: {response_text}")

        try:
            order_data = parse_order_response(response_text)
        except ValueError as e:
            logger.warning(f"Failed to parse {self.provider_name} response, using demo data: {e}")
            return self._fallback_result()

        return ExtractionResult(
            order_data=order_data,
            success=True,
            provider=self.provider_name,
        )

    def _fallback_result(self) -> ExtractionResult:
        return ExtractionResult(
            order_data=build_fallback_order(),
            success=True,
            provider=self.provider_name,
            is_fallback=True,
        )
