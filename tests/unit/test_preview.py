"""Unit tests for the image preview handle."""

import io

import pytest
from PIL import Image

from orderscan.extraction.schema import UploadedFile
from orderscan.workflow.preview import ImagePreview


def png_bytes(size: tuple[int, int] = (800, 400)) -> bytes:
    img = Image.new("RGB", size, color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def test_open_image() -> None:
    upload = UploadedFile(filename="po.png", content_type="image/png", content=png_bytes())

    preview = ImagePreview.open(upload)

    assert preview is not None
    assert preview.released is False


def test_pdf_has_no_preview() -> None:
    upload = UploadedFile(filename="po.pdf", content_type="application/pdf", content=b"%PDF-1.7")

    assert ImagePreview.open(upload) is None


def test_undecodable_image_has_no_preview() -> None:
    upload = UploadedFile(filename="po.heic", content_type="image/heic", content=b"not an image")

    assert ImagePreview.open(upload) is None


def test_render_png_thumbnail() -> None:
    upload = UploadedFile(filename="po.png", content_type="image/png", content=png_bytes())
    preview = ImagePreview.open(upload)
    assert preview is not None

    rendered = Image.open(io.BytesIO(preview.render_png(200)))

    assert rendered.format == "PNG"
    assert rendered.size == (200, 100)


def test_release_is_idempotent() -> None:
    upload = UploadedFile(filename="po.png", content_type="image/png", content=png_bytes())
    preview = ImagePreview.open(upload)
    assert preview is not None

    preview.release()
    preview.release()

    assert preview.released is True
    with pytest.raises(RuntimeError, match="released"):
        preview.render_png(100)


def test_decompression_bomb_has_no_preview() -> None:
    """A small PNG that decodes past Pillow's pixel limit gets no preview."""
    img = Image.new("1", (14000, 14000))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    upload = UploadedFile(filename="big.png", content_type="image/png", content=buffer.getvalue())

    assert ImagePreview.open(upload) is None
