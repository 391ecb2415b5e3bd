from __future__ import annotations
import logging
import tkinter as tk
from typing import Callable, Dict, List, Optional

from PIL import Image, ImageTk

from glowback.services.history import HistoryEntry
from glowback.services.io import thumbnail

logger = logging.getLogger(__name__)

THUMB = (64, 64)


class HistoryPanel(tk.Frame):
    """Боковая панель последних восстановлений (новые сверху)."""
    def __init__(self, master, *, bg="#262626"):
        super().__init__(master, bg=bg, width=300)
        self._bg = bg

        head = tk.Frame(self, bg=bg)
        head.pack(side=tk.TOP, fill=tk.X, padx=8, pady=8)
        tk.Label(head, text="Restoration History", bg=bg, fg="white",
                 font=("TkDefaultFont", 13, "bold")).pack(side=tk.LEFT)
        self._close_btn = tk.Button(head, text="✕", relief=tk.FLAT)
        self._close_btn.pack(side=tk.RIGHT)

        # Canvas + Scrollbar
        self._canvas = tk.Canvas(self, bg=bg, borderwidth=0, highlightthickness=0, width=280)
        self._scroll = tk.Scrollbar(self, orient="vertical", command=self._canvas.yview)
        self._canvas.configure(yscrollcommand=self._scroll.set)
        self._canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(8, 0), pady=(0, 8))
        self._scroll.pack(side=tk.RIGHT, fill=tk.Y, pady=(0, 8))

        self._inner = tk.Frame(self._canvas, bg=bg)
        self._win = self._canvas.create_window((0, 0), window=self._inner, anchor="nw")
        self._inner.bind("<Configure>", lambda _e: self._canvas.configure(scrollregion=self._canvas.bbox("all")))
        self._canvas.bind("<Configure>", lambda e: self._canvas.itemconfigure(self._win, width=e.width))

        self._on_select: Optional[Callable[[int], None]] = None
        self._on_download: Optional[Callable[[int], None]] = None
        # держим ссылки, иначе Tk выбросит картинки
        self._thumbs: Dict[int, ImageTk.PhotoImage] = {}
        self.set_entries([])

    # публичные API
    def set_callbacks(self, *, on_select, on_download, on_close):
        self._on_select = on_select
        self._on_download = on_download
        self._close_btn.config(command=on_close)

    def set_entries(self, entries: List[HistoryEntry]):
        for ch in self._inner.winfo_children():
            ch.destroy()
        self._thumbs = {k: v for k, v in self._thumbs.items() if any(e.id == k for e in entries)}

        if not entries:
            tk.Label(self._inner, text="Your recent restorations will appear here.",
                     bg=self._bg, fg="#999", wraplength=240).pack(pady=24)
            return

        for entry in reversed(entries):
            self._add_row(entry)

    def _add_row(self, entry: HistoryEntry):
        row = tk.Frame(self._inner, bg="#333", padx=6, pady=6)
        row.pack(fill=tk.X, pady=(0, 8), padx=(0, 8))

        thumb = self._thumb_for(entry)
        if thumb is not None:
            tk.Label(row, image=thumb, bg="#333").pack(side=tk.LEFT)
        else:
            tk.Label(row, text="No preview", bg="#333", fg="#999", width=9, height=4).pack(side=tk.LEFT)

        right = tk.Frame(row, bg="#333")
        right.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=(8, 0))
        tk.Label(right, text=entry.original_file_name, bg="#333", fg="white", anchor="w")\
            .pack(side=tk.TOP, fill=tk.X)
        btns = tk.Frame(right, bg="#333")
        btns.pack(side=tk.TOP, anchor="w", pady=(6, 0))
        tk.Button(btns, text="View", command=lambda i=entry.id: self._fire(self._on_select, i))\
            .pack(side=tk.LEFT, padx=(0, 6))
        tk.Button(btns, text="Download", command=lambda i=entry.id: self._fire(self._on_download, i))\
            .pack(side=tk.LEFT)

    def _thumb_for(self, entry: HistoryEntry) -> Optional[ImageTk.PhotoImage]:
        if entry.id not in self._thumbs:
            try:
                img = thumbnail(entry.restored, THUMB)
            except (OSError, Image.DecompressionBombError) as e:
                logger.warning("Cannot preview %s: %s", entry.original_file_name, e)
                return None
            self._thumbs[entry.id] = ImageTk.PhotoImage(img)
        return self._thumbs[entry.id]

    @staticmethod
    def _fire(cb, entry_id: int):
        if cb:
            cb(entry_id)
