"""Upload validation for purchase order documents.

Checks the declared media type and the byte size before a file is accepted
for extraction. Rules are evaluated in order; the first failing rule wins.
"""

from enum import Enum

from pydantic import BaseModel

from orderscan.extraction.schema import UploadedFile, normalize_content_type

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/heic",
        "image/heif",
        "application/pdf",
        "image/tiff",
    }
)

MAX_FILE_SIZE = 20 * 1024 * 1024  # 20 MiB


class RejectionReason(str, Enum):
    """Why an upload was rejected."""

    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"


class ValidationResult(BaseModel):
    """Result of upload validation.

    Attributes:
        accepted: Whether the file may be used for extraction
        reason: Rejection reason if not accepted
        message: User-facing explanation if not accepted
    """

    accepted: bool
    reason: RejectionReason | None = None
    message: str | None = None


class FileValidator:
    """Validates uploads against the allowed media types and size limit."""

    def __init__(
        self,
        allowed_types: frozenset[str] = ALLOWED_CONTENT_TYPES,
        max_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.allowed_types = allowed_types
        self.max_size = max_size

    def validate(self, file: UploadedFile) -> ValidationResult:
        """Validate an uploaded file.

        Args:
            file: Upload with declared media type and content

        Returns:
            ValidationResult, accepted or with a rejection reason
        """
        content_type = normalize_content_type(file.content_type)
        if not content_type or content_type not in self.allowed_types:
            return ValidationResult(
                accepted=False,
                reason=RejectionReason.UNSUPPORTED_TYPE,
                message="Unsupported file type. Please upload an image or PDF file.",
            )

        if file.size > self.max_size:
            limit_mb = self.max_size // (1024 * 1024)
            return ValidationResult(
                accepted=False,
                reason=RejectionReason.TOO_LARGE,
                message=f"File is too large. Please upload a file of {limit_mb}MB or less.",
            )

        return ValidationResult(accepted=True)
