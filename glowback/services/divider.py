# glowback/services/divider.py
from __future__ import annotations


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def divider_percent(pointer_x: float, left: float, width: float) -> float | None:
    """Позиция разделителя в процентах; None, если ширина контейнера неизвестна."""
    if width <= 0:
        return None
    return clamp((pointer_x - left) / width, 0.0, 1.0) * 100.0


class DividerDrag:
    """Состояние ползунка сравнения (без Tk)."""
    def __init__(self, percent: float = 50.0):
        self.percent = clamp(float(percent), 0.0, 100.0)
        self.dragging = False

    def begin(self, pointer_x: float, left: float, width: float) -> bool:
        self.dragging = True
        return self._update(pointer_x, left, width)

    def move(self, pointer_x: float, left: float, width: float) -> bool:
        if not self.dragging:
            return False
        return self._update(pointer_x, left, width)

    def end(self) -> None:
        self.dragging = False

    def _update(self, pointer_x, left, width) -> bool:
        p = divider_percent(pointer_x, left, width)
        if p is None or p == self.percent:
            return False
        self.percent = p
        return True
