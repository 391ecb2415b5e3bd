from .comparator import ComparatorWidget
from .history_panel import HistoryPanel
from .image_card import ImageCard

__all__ = ["ComparatorWidget", "HistoryPanel", "ImageCard"]
