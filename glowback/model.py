from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

from glowback.services.history import RestorationHistory
from glowback.services.io import ImageRef, SelectedFile


# --- состояния приложения: ровно одно активно ---
@dataclass(frozen=True)
class Initial:
    name = "initial"


@dataclass(frozen=True)
class ImageSelected:
    file: SelectedFile
    original: ImageRef
    name = "imageSelected"


@dataclass(frozen=True)
class Loading:
    file: SelectedFile
    original: ImageRef
    job_id: int
    progress: float = 0.0
    message: str = ""
    name = "loading"


@dataclass(frozen=True)
class Restored:
    original: ImageRef
    restored: ImageRef
    file_name: str
    name = "restored"


@dataclass(frozen=True)
class Error:
    message: str
    original: Optional[ImageRef] = None
    name = "error"


AppState = Union[Initial, ImageSelected, Loading, Restored, Error]


@dataclass
class Model:
    state: AppState = field(default_factory=Initial)
    history: RestorationHistory = field(default_factory=lambda: RestorationHistory(maxlen=5))
    last_job_id: int = 0
