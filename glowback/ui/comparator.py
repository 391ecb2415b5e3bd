from __future__ import annotations
import tkinter as tk
from PIL import Image, ImageTk

from glowback.services.divider import DividerDrag
from glowback.services.io import fit_size

HANDLE_R = 18


class ComparatorWidget(tk.Frame):
    """Сравнение «до/после»: восстановленная картинка видна слева от разделителя.

    Обработчики движения/отпускания вешаются на всё приложение (bind_all)
    только на время перетаскивания, чтобы тянуть можно было и за пределами виджета.
    """
    def __init__(self, master, *, bg="#111"):
        super().__init__(master, bg=bg)
        tk.Label(self, text="Compare Before & After", bg=bg, fg="#ddd",
                 font=("TkDefaultFont", 12, "bold")).pack(side=tk.TOP, pady=(4, 6))

        self._canvas = tk.Canvas(self, bg=bg, highlightthickness=0, cursor="sb_h_double_arrow")
        self._canvas.pack(expand=True, fill=tk.BOTH)

        captions = tk.Frame(self, bg=bg)
        captions.pack(side=tk.BOTTOM, fill=tk.X, pady=(4, 0))
        tk.Label(captions, text="Before", bg=bg, fg="#aaa").pack(side=tk.LEFT, padx=4)
        tk.Label(captions, text="After", bg=bg, fg="#aaa").pack(side=tk.RIGHT, padx=4)

        self.drag = DividerDrag()
        self._before: Image.Image | None = None
        self._after: Image.Image | None = None
        # подогнанные под холст копии: (размер холста, before, after)
        self._fitted = None
        self._tk_before: ImageTk.PhotoImage | None = None
        self._tk_after: ImageTk.PhotoImage | None = None

        self._canvas.bind("<Configure>", lambda _e: self.refresh())
        self._canvas.bind("<ButtonPress-1>", self._on_press)

    def set_images(self, original: Image.Image, restored: Image.Image):
        self._before = original
        self._after = restored
        self._fitted = None
        self.refresh()

    @property
    def percent(self) -> float:
        return self.drag.percent

    # --- перетаскивание ---
    def _bounds(self):
        return self._canvas.winfo_rootx(), self._canvas.winfo_width()

    def _on_press(self, event):
        self.drag.begin(event.x_root, *self._bounds())
        self.bind_all("<B1-Motion>", self._on_motion)
        self.bind_all("<ButtonRelease-1>", self._on_release)
        self.refresh()
        return "break"

    def _on_motion(self, event):
        if self.drag.move(event.x_root, *self._bounds()):
            self.refresh()

    def _on_release(self, _event=None):
        self.drag.end()
        self.unbind_all("<B1-Motion>")
        self.unbind_all("<ButtonRelease-1>")

    def destroy(self):
        if self.drag.dragging:
            self._on_release()
        super().destroy()

    # --- отрисовка ---
    def _fit(self, cw: int, ch: int):
        if self._fitted and self._fitted[0] == (cw, ch):
            return self._fitted
        size = fit_size(self._before.size, (cw, ch))
        before = self._before.resize(size, Image.LANCZOS)
        # «после» растягиваем под тот же прямоугольник, чтобы линии совпадали
        after = self._after.resize(size, Image.LANCZOS)
        self._fitted = ((cw, ch), before, after)
        return self._fitted

    def refresh(self):
        c = self._canvas
        c.delete("all")
        cw, ch = c.winfo_width(), c.winfo_height()
        if self._before is None or self._after is None or cw <= 1 or ch <= 1:
            return
        _, before, after = self._fit(cw, ch)
        iw, ih = before.size
        ox, oy = (cw - iw) // 2, (ch - ih) // 2

        self._tk_before = ImageTk.PhotoImage(before)
        c.create_image(ox, oy, image=self._tk_before, anchor="nw")

        x = int(round(cw * self.drag.percent / 100.0))
        visible = max(0, min(iw, x - ox))
        self._tk_after = None
        if visible > 0:
            self._tk_after = ImageTk.PhotoImage(after.crop((0, 0, visible, ih)))
            c.create_image(ox, oy, image=self._tk_after, anchor="nw")

        c.create_line(x, 0, x, ch, fill="#f0f0f0", width=3)
        cy = ch // 2
        c.create_oval(x - HANDLE_R, cy - HANDLE_R, x + HANDLE_R, cy + HANDLE_R,
                      fill="white", outline="#888")
        c.create_text(x, cy, text="◀ ▶", fill="#444", font=("TkDefaultFont", 8, "bold"))
