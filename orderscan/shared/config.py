"""Shared configuration management for the service.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in example .env files; treated the same as an empty key.
PLACEHOLDER_API_KEYS = frozenset({"your_api_key_here", "your_gemini_api_key_here"})


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_GEMINI_API_KEY=...
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Service configuration
    service_name: str = Field(
        default="orderscan",
        description="Service identifier for metrics and logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # Extraction provider configuration
    extraction_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Extraction provider: gemini (Google multimodal API), openai (vision chat API)",
    )
    gemini_api_key: str = Field(
        default="",
        description="Gemini API key (use env var APP_GEMINI_API_KEY). Empty enables demo mode",
    )
    gemini_model: str = Field(
        default="gemini-1.5-pro",
        description="Gemini model (gemini-1.5-pro for accuracy, gemini-1.5-flash for speed)",
    )
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (use env var APP_OPENAI_API_KEY). Empty enables demo mode",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI vision-capable model",
    )
    extraction_temperature: float = Field(
        default=0.1,
        description="Sampling temperature; low for near-deterministic output",
        ge=0,
        le=2,
    )
    extraction_max_output_tokens: int = Field(
        default=4096,
        description="Output token ceiling, large enough for table-heavy orders",
        gt=0,
    )
    demo_delay_seconds: float = Field(
        default=1.5,
        description="Simulated latency of the demo-mode extraction",
        ge=0,
    )

    # Export configuration
    export_currency_format: str = Field(
        default="¥#,##0",
        description="Excel number format for unit price, amount and total cells",
    )

    # Preview configuration
    preview_max_size: int = Field(
        default=512,
        description="Longest edge in pixels of the generated image preview",
        gt=0,
    )

    def api_key_for(self, provider: str) -> str:
        """Return the configured credential for a provider.

        Args:
            provider: Provider identifier ('gemini' or 'openai')

        Returns:
            API key, or empty string when absent or a placeholder
        """
        key = {"gemini": self.gemini_api_key, "openai": self.openai_api_key}.get(provider, "")
        key = key.strip()
        if key in PLACEHOLDER_API_KEYS:
            return ""
        return key


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
