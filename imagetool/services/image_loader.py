"""Acquisition helpers: turn a file on disk into a SelectedImage."""
from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..errors import ValidationError
from ..models import SelectedImage

logger = logging.getLogger(__name__)


def detect_media_type(payload: bytes, filename: Optional[str] = None) -> Optional[str]:
    """Return the image media type of ``payload``, or None if it is not an image."""
    try:
        with Image.open(io.BytesIO(payload)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        fmt = None

    if fmt:
        return Image.MIME.get(fmt, f"image/{fmt.lower()}")

    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed and guessed.startswith("image/"):
            logger.debug("Pillow could not identify %s, using extension (%s)", filename, guessed)
            return guessed
    return None


def load_image(path: Path) -> SelectedImage:
    """
    Read an image file for acquisition.

    Only image files pass; anything else raises ValidationError.
    """
    file_path = Path(path)
    try:
        payload = file_path.read_bytes()
    except OSError as exc:
        raise ValidationError(f"Cannot read {file_path}: {exc}") from exc

    if not payload:
        raise ValidationError(f"File is empty: {file_path.name}")

    media_type = detect_media_type(payload, file_path.name)
    if media_type is None:
        raise ValidationError(f"Unsupported file type: {file_path.suffix or file_path.name}")

    return SelectedImage(payload=payload, media_type=media_type, filename=file_path.name)
