from __future__ import annotations
import tkinter as tk
from tkinter import ttk
from PIL import Image, ImageTk

from glowback.services.io import fit_size


class ImageCard(tk.Frame):
    """Карточка с заголовком: картинка, заглушка или индикатор загрузки."""
    def __init__(self, master, title: str, *, bg="#1f1f1f", placeholder="Image will appear here"):
        super().__init__(master, bg=bg, padx=8, pady=8)
        self._bg = bg
        self._placeholder = placeholder
        tk.Label(self, text=title, bg=bg, fg="#ddd", font=("TkDefaultFont", 12, "bold"))\
            .pack(side=tk.TOP, pady=(0, 6))

        self._body = tk.Frame(self, bg="#111")
        self._body.pack(expand=True, fill=tk.BOTH)

        self._label = tk.Label(self._body, bg="#111", fg="#777")
        self._label.pack(expand=True, fill=tk.BOTH)

        # блок загрузки
        self._loading = tk.Frame(self._body, bg="#111")
        self._msg = tk.Label(self._loading, bg="#111", fg="#aaa", wraplength=320)
        self._msg.pack(side=tk.TOP, pady=(0, 8))
        self._bar = ttk.Progressbar(self._loading, orient=tk.HORIZONTAL, mode="determinate", maximum=100)
        self._bar.pack(side=tk.TOP, fill=tk.X, padx=24)
        self._pct = tk.Label(self._loading, bg="#111", fg="#ddd")
        self._pct.pack(side=tk.TOP, pady=(6, 0))

        self._pil_image: Image.Image | None = None
        self._tk_image: ImageTk.PhotoImage | None = None
        self._is_loading = False

        self._label.bind("<Configure>", lambda _e: self.refresh())
        self.set_image(None)

    def set_image(self, img: Image.Image | None, placeholder: str | None = None):
        self._show_loading(False)
        self._pil_image = img
        if placeholder is not None:
            self._placeholder = placeholder
        self.refresh()

    def set_loading(self, progress: float, message: str):
        self._show_loading(True)
        self._msg.config(text=message)
        self._bar["value"] = progress
        self._pct.config(text=f"{round(progress)}%")

    def _show_loading(self, flag: bool):
        if flag == self._is_loading:
            return
        self._is_loading = flag
        if flag:
            self._label.pack_forget()
            self._loading.place(relx=0.5, rely=0.5, anchor="center", relwidth=0.9)
        else:
            self._loading.place_forget()
            self._label.pack(expand=True, fill=tk.BOTH)

    def refresh(self):
        if self._is_loading:
            return
        if self._pil_image is None:
            self._tk_image = None
            self._label.config(image="", text=self._placeholder)
            return
        box = (max(1, self._label.winfo_width()), max(1, self._label.winfo_height()))
        if box == (1, 1):
            box = (420, 420)
        img = self._pil_image.resize(fit_size(self._pil_image.size, box), Image.LANCZOS)
        self._tk_image = ImageTk.PhotoImage(img)
        self._label.config(image=self._tk_image, text="")
