"""Builds the extraction provider named by ``APP_EXTRACTION_PROVIDER``."""

import logging

from orderscan.extraction.base import ExtractionProvider
from orderscan.extraction.gemini_provider import GeminiExtractionProvider
from orderscan.extraction.openai_provider import OpenAIExtractionProvider
from orderscan.shared.config import Settings

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[ExtractionProvider]] = {
    "gemini": GeminiExtractionProvider,
    "openai": OpenAIExtractionProvider,
}


def provider_class_for(name: str) -> type[ExtractionProvider]:
    """Look up the provider class for a configured name.

    Raises:
        ValueError: If no provider has that name
    """
    try:
        return PROVIDERS[name]
    except KeyError:
        known = ", ".join(sorted(PROVIDERS))
        raise ValueError(f"No extraction provider named '{name}' (known: {known})") from None


def create_extraction_service(settings: Settings) -> ExtractionProvider:
    """Create the configured provider.

    A provider without a usable API key still works: it serves the demo
    record, and a warning is logged once here at startup.

    Args:
        settings: Application settings

    Returns:
        Extraction provider, client created lazily on first call
    """
    provider = provider_class_for(settings.extraction_provider)(settings)

    if not provider.is_configured():
        logger.warning(
            f"No API key for '{provider.provider_name}', extraction runs in demo mode "
            f"and returns sample data"
        )

    logger.info(f"Using extraction provider: {provider.provider_name}")
    return provider
