"""In-memory image preview of the selected upload, using Pillow.

The decoded image is held until the selection changes or the workflow is
closed; callers must call ``release()`` so repeated uploads do not pile up
decoded images.
"""

import io
import logging

from PIL import Image, UnidentifiedImageError

from orderscan.extraction.schema import UploadedFile

logger = logging.getLogger(__name__)


class ImagePreview:
    """Decoded image handle for one selected file."""

    def __init__(self, image: Image.Image) -> None:
        self._image: Image.Image | None = image

    @classmethod
    def open(cls, file: UploadedFile) -> "ImagePreview | None":
        """Decode an uploaded image for previewing.

        Args:
            file: Accepted upload

        Returns:
            ImagePreview, or None for PDFs, formats Pillow cannot decode and
            images over Pillow's decompression bomb limit
        """
        if not file.content_type or not file.content_type.startswith("image/"):
            return None
        try:
            image = Image.open(io.BytesIO(file.content))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.info(f"No preview available for {file.filename}: {e}")
            return None
        return cls(image)

    @property
    def released(self) -> bool:
        return self._image is None

    def render_png(self, max_size: int) -> bytes:
        """Render a PNG thumbnail no larger than max_size on either edge.

        Raises:
            RuntimeError: If the preview was already released
        """
        if self._image is None:
            raise RuntimeError("Preview has been released")

        thumbnail = self._image.copy()
        thumbnail.thumbnail((max_size, max_size))
        if thumbnail.mode not in ("RGB", "RGBA", "L"):
            thumbnail = thumbnail.convert("RGBA")

        buffer = io.BytesIO()
        thumbnail.save(buffer, format="PNG")
        return buffer.getvalue()

    def release(self) -> None:
        """Close the decoded image. Safe to call more than once."""
        if self._image is not None:
            self._image.close()
            self._image = None
