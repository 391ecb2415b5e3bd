# glowback/services/io.py
from __future__ import annotations
import io
import re
from dataclasses import dataclass
from typing import Tuple
from PIL import Image

DEFAULT_DOWNLOAD_NAME = "restored_image.png"
_EXT_RE = re.compile(r"(\.[\w-]+)$")


@dataclass(frozen=True)
class SelectedFile:
    """Выбранный пользователем файл: имя, заявленный MIME (может быть пустым), байты."""
    name: str
    mime_type: str
    data: bytes


@dataclass(frozen=True)
class ImageRef:
    """Изображение в памяти (аналог object URL): байты как есть + их MIME."""
    data: bytes
    mime_type: str = "image/png"

    def to_pil(self) -> Image.Image:
        img = Image.open(io.BytesIO(self.data))
        img.load()
        return img

    @classmethod
    def from_file(cls, f: SelectedFile) -> "ImageRef":
        return cls(f.data, f.mime_type or "application/octet-stream")


def restored_filename(name: str | None) -> str:
    """photo.jpg -> photo_restored.png; без имени — restored_image.png."""
    if not name:
        return DEFAULT_DOWNLOAD_NAME
    return _EXT_RE.sub("_restored.png", name)


def for_display(ref: ImageRef) -> Image.Image:
    """Декодировать и привести к режиму, который понимает ImageTk."""
    img = ref.to_pil()
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA")
    return img


def thumbnail(ref: ImageRef, size: Tuple[int, int]) -> Image.Image:
    img = for_display(ref)
    img.thumbnail(size, Image.LANCZOS)
    return img


def fit_size(src: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """Размер, вписанный в box с сохранением пропорций (как object-contain)."""
    w, h = src
    bw, bh = box
    if w <= 0 or h <= 0 or bw <= 0 or bh <= 0:
        return 1, 1
    scale = min(bw / w, bh / h)
    return max(1, int(w * scale)), max(1, int(h * scale))


def save_bytes(path: str, ref: ImageRef) -> None:
    """Сохранить результат как есть, без перекодирования."""
    with open(path, "wb") as fh:
        fh.write(ref.data)
