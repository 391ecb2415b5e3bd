# glowback/services/encoder.py
from __future__ import annotations
import base64
import io
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Optional
from PIL import Image, UnidentifiedImageError

from glowback.errors import EncodingError
from glowback.services.io import SelectedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedImage:
    base64: str
    mime_type: str


def read_file(path: str) -> SelectedFile:
    """Прочитать файл с диска; заявленный MIME угадывается по расширению."""
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as e:
        raise EncodingError(f"Failed to read file: {e}") from e
    mime, _ = mimetypes.guess_type(path)
    return SelectedFile(name=os.path.basename(path), mime_type=mime or "", data=data)


def detect_mime(data: bytes) -> Optional[str]:
    """MIME по содержимому (через Pillow), None — если формат не распознан."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None
    return Image.MIME.get(fmt) if fmt else None


def encode_file(f: SelectedFile) -> EncodedImage:
    if f.data is None:
        raise EncodingError("Failed to read file.")
    payload = base64.b64encode(f.data).decode("ascii")
    if not payload:
        raise EncodingError("Failed to parse base64 string from file.")
    mime = detect_mime(f.data)
    if mime is None:
        logger.debug("Could not detect MIME of %s, using declared %r", f.name, f.mime_type)
        mime = f.mime_type
    return EncodedImage(base64=payload, mime_type=mime)
