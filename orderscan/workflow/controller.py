"""Upload → extract → export workflow for a single user.

Holds the transient state of one session: the selected file, the in-flight
flag and the last extraction result. Nothing is persisted.

State machine:
    IDLE -> SELECTING (file accepted) -> EXTRACTING (submit) -> RESULT
    RESULT -> SELECTING (new file accepted, previous result discarded)
    EXTRACTING -> SELECTING (extraction failed, file kept)

Execution is cooperative (asyncio). ``submit`` flips the state to EXTRACTING
before its first await, so a second submit issued while one is in flight is
ignored rather than starting another model call.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Literal

from pydantic import BaseModel

from orderscan.export.service import ExportResult, SpreadsheetExporter
from orderscan.extraction.base import ExtractionProvider, ExtractionResult
from orderscan.extraction.schema import OrderData, UploadedFile
from orderscan.validation.service import FileValidator, ValidationResult
from orderscan.workflow.preview import ImagePreview

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    """Workflow states."""

    IDLE = "idle"
    SELECTING = "selecting"
    EXTRACTING = "extracting"
    RESULT = "result"


class Notification(BaseModel):
    """Transient user-facing message."""

    level: Literal["success", "warning", "error", "info"]
    message: str


class WorkflowStatus(BaseModel):
    """Snapshot of the workflow for display."""

    state: WorkflowState
    provider: str
    api_configured: bool
    filename: str | None = None
    content_type: str | None = None
    size: int | None = None
    has_result: bool = False


Notifier = Callable[[Notification], None]


def log_notification(notification: Notification) -> None:
    """Default notifier: write the message to the log."""
    logger.info(f"[{notification.level}] {notification.message}")


class OrderWorkflow:
    """Coordinates validation, extraction and export for one user session."""

    def __init__(
        self,
        extractor: ExtractionProvider,
        exporter: SpreadsheetExporter,
        validator: FileValidator | None = None,
        notify: Notifier | None = None,
    ) -> None:
        """Initialize workflow.

        Args:
            extractor: Extraction provider (injected so tests can stub it)
            exporter: Spreadsheet exporter
            validator: Upload validator, default rules if omitted
            notify: Callback receiving user-facing notifications
        """
        self.extractor = extractor
        self.exporter = exporter
        self.validator = validator or FileValidator()
        self._notify = notify or log_notification

        self.state = WorkflowState.IDLE
        self.selected_file: UploadedFile | None = None
        self.result: OrderData | None = None
        self._preview: ImagePreview | None = None
        self._selection_id = 0

    def select_file(self, file: UploadedFile) -> ValidationResult:
        """Validate a file and make it the current selection.

        A rejected file leaves the previous selection and result untouched.

        Args:
            file: Uploaded file

        Returns:
            ValidationResult from the validator
        """
        validation = self.validator.validate(file)
        if not validation.accepted:
            logger.info(f"Rejected upload {file.filename}: {validation.reason}")
            self._notify(Notification(level="error", message=validation.message or "Invalid file"))
            return validation

        preview = ImagePreview.open(file)
        self._release_preview()
        self.selected_file = file
        self._selection_id += 1
        self.result = None
        self._preview = preview

        if self.state is not WorkflowState.EXTRACTING:
            self.state = WorkflowState.SELECTING

        logger.info(f"Selected {file.filename} ({file.content_type}, {file.size} bytes)")
        return validation

    def clear(self) -> None:
        """Drop the selected file and any result.

        An in-flight extraction keeps running; its result is discarded when it
        resolves.
        """
        self._release_preview()
        self.selected_file = None
        self._selection_id += 1
        self.result = None
        if self.state is not WorkflowState.EXTRACTING:
            self.state = WorkflowState.IDLE

    async def submit(self) -> ExtractionResult | None:
        """Run extraction on the selected file.

        Returns:
            ExtractionResult, or None when the submit was ignored (nothing
            selected, an extraction already in flight, or the selection
            changed before the result arrived)
        """
        if self.state is WorkflowState.EXTRACTING:
            logger.info("Extraction already in progress, ignoring submit")
            return None
        if self.selected_file is None:
            logger.info("No file selected, ignoring submit")
            return None

        file = self.selected_file
        selection_id = self._selection_id
        self.state = WorkflowState.EXTRACTING

        try:
            result = await self.extractor.extract_order_fields(file)
        except Exception:
            self.state = WorkflowState.SELECTING
            raise

        if selection_id != self._selection_id:
            logger.info(f"Selection changed during extraction of {file.filename}, discarding")
            self.state = (
                WorkflowState.SELECTING if self.selected_file is not None else WorkflowState.IDLE
            )
            self._notify(
                Notification(
                    level="info",
                    message="A new file was selected. The previous extraction was discarded.",
                )
            )
            return None

        if not result.success:
            self.state = WorkflowState.SELECTING
            self._notify(
                Notification(
                    level="error", message="Failed to extract information. Please try again."
                )
            )
            return result

        self.result = result.order_data
        self.state = WorkflowState.RESULT
        if not self.extractor.is_configured():
            self._notify(
                Notification(
                    level="warning",
                    message="Running in demo mode. No real data was extracted.",
                )
            )
        else:
            self._notify(Notification(level="success", message="Extracted purchase order data"))
        return result

    def export(self) -> ExportResult:
        """Export the current result to a spreadsheet.

        Never changes the workflow state; a failure keeps the result so the
        export can be retried.

        Returns:
            ExportResult with workbook bytes, or error
        """
        if self.result is None:
            return ExportResult(success=False, error="No extraction result to export")

        export = self.exporter.export(self.result)
        if export.success:
            self._notify(Notification(level="success", message="Downloaded the Excel file"))
        else:
            self._notify(Notification(level="error", message="Failed to generate the Excel file"))
        return export

    def preview_png(self, max_size: int) -> bytes | None:
        """Render the selected image as a PNG thumbnail, if it is an image."""
        if self._preview is None:
            return None
        return self._preview.render_png(max_size)

    def status(self) -> WorkflowStatus:
        """Get a snapshot of the workflow state."""
        file = self.selected_file
        return WorkflowStatus(
            state=self.state,
            provider=self.extractor.provider_name,
            api_configured=self.extractor.is_configured(),
            filename=file.filename if file else None,
            content_type=file.content_type if file else None,
            size=file.size if file else None,
            has_result=self.result is not None,
        )

    def close(self) -> None:
        """Release held resources."""
        self._release_preview()

    def _release_preview(self) -> None:
        if self._preview is not None:
            self._preview.release()
            self._preview = None
